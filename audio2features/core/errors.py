"""HTTP-facing error type and its handler."""

from fastapi import Request
from fastapi.responses import JSONResponse

from audio2features.pipeline.response import error_envelope


class APIError(Exception):
    """
    Error surfaced to the caller as ``{"error": ..., "details": ...}``.

    Only caller input errors (4xx) and unexpected failures (500) use this;
    backend and storage failures are recovered before reaching the handler.
    """

    def __init__(self, status_code: int, error: str, details: str | None = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.error, exc.details),
    )
