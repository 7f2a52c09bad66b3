"""structlog setup for the API process.

Console rendering in development, JSON everywhere else. Optionally mirrors
JSON lines to ``{logs_dir}/audio2features.log`` with rotation.

Usage:
    from audio2features.core.logging import setup_logging, get_logger

    setup_logging(settings)
    logger = get_logger(__name__)
    logger.info("upload_received", file_name="feedback.mp3")
"""

import logging
import sys
import time
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.types import Processor

from audio2features.config import Settings

LOG_FILE_NAME = "audio2features.log"

# Client libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = (
    "uvicorn.access",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "httpx",
    "httpcore",
    "openai",
    "botocore",
    "boto3",
    "aiosqlite",
    "asyncio",
)


def get_log_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def wants_json(config: Settings) -> bool:
    if config.log_format == "auto":
        return not config.is_development
    return config.log_format == "json"


def _pre_chain() -> list[Processor]:
    """Processors applied to structlog events and to stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer: Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_pre_chain(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def _file_handler(config: Settings, level: int) -> logging.Handler:
    log_dir = Path(config.logs_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=config.log_file_max_bytes,
        backupCount=config.log_file_backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(_formatter(json_output=True))
    handler.setLevel(level)
    return handler


def setup_logging(config: Settings) -> None:
    """
    Route structlog through stdlib logging and install the handlers.

    Third-party client loggers are held at WARNING or above so a single
    upload does not produce a screen of connection-pool chatter.
    """
    level = get_log_level(config.log_level)

    structlog.configure(
        processors=_pre_chain() + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(_formatter(wants_json(config)))
    stdout_handler.setLevel(level)

    handlers: list[logging.Handler] = [stdout_handler]
    if config.log_to_file:
        handlers.append(_file_handler(config, level))

    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(level)

    library_level = max(logging.WARNING, level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


class LoggingMiddleware:
    """
    ASGI middleware that tags every log line of a request with a short
    correlation id and emits one ``request_completed`` event per request.

    Health probes are passed straight through.
    """

    SKIP_PATHS = {"/health"}

    def __init__(self, app: Any) -> None:
        self.app = app
        self.logger = get_logger("audio2features.http")

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=uuid.uuid4().hex[:8],
            method=scope.get("method", ""),
            path=scope.get("path", ""),
            client=client[0] if client else None,
        )

        status_code = 500
        started_at = time.perf_counter()

        async def capture_status(message: dict) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        try:
            await self.app(scope, receive, capture_status)
        finally:
            duration_ms = round((time.perf_counter() - started_at) * 1000, 1)
            if status_code >= 500:
                self.logger.error("request_completed", status_code=status_code, duration_ms=duration_ms)
            elif status_code >= 400:
                self.logger.warning("request_completed", status_code=status_code, duration_ms=duration_ms)
            else:
                self.logger.info("request_completed", status_code=status_code, duration_ms=duration_ms)
            structlog.contextvars.clear_contextvars()
