"""Provider selection from settings and the injectable backend dependencies."""

from audio2features.config import Settings, settings
from audio2features.core.ai.base import GenerationBackend, TranscriptionBackend
from audio2features.core.ai.cloudflare import CloudflareAIProvider
from audio2features.core.ai.openai import OpenAIProvider
from audio2features.core.logging import get_logger

logger = get_logger(__name__)

AIProvider = OpenAIProvider | CloudflareAIProvider


def build_ai_provider(config: Settings) -> AIProvider | None:
    """Create the configured provider, or None when it lacks credentials."""
    name = config.ai_provider.lower()

    if name == "openai":
        if not config.openai_api_key:
            logger.warning("ai_provider_unavailable", provider=name, reason="missing_api_key")
            return None
        return OpenAIProvider(
            api_key=config.openai_api_key,
            transcription_model=config.transcription_model,
            generation_model=config.generation_model,
        )

    if name == "cloudflare":
        if not (config.cloudflare_account_id and config.cloudflare_api_token):
            logger.warning("ai_provider_unavailable", provider=name, reason="missing_credentials")
            return None
        return CloudflareAIProvider(
            account_id=config.cloudflare_account_id,
            api_token=config.cloudflare_api_token,
            transcription_model=config.transcription_model,
            generation_model=config.generation_model,
        )

    if name != "none":
        logger.warning("ai_provider_unknown", provider=name)
    return None


# Singleton instance
_provider: AIProvider | None = None
_provider_built = False


def get_ai_provider() -> AIProvider | None:
    """Get the process-wide provider built from settings."""
    global _provider, _provider_built
    if not _provider_built:
        _provider = build_ai_provider(settings)
        _provider_built = True
    return _provider


async def close_ai_provider() -> None:
    """Release the provider's HTTP client; the next get_ai_provider() builds a fresh one."""
    global _provider, _provider_built
    if _provider is not None:
        await _provider.aclose()
        logger.info("ai_provider_closed", provider=type(_provider).__name__)
    _provider = None
    _provider_built = False


def get_transcription_backend() -> TranscriptionBackend | None:
    return get_ai_provider()


def get_generation_backend() -> GenerationBackend | None:
    return get_ai_provider()


def default_transcription_model(config: Settings) -> str:
    if config.transcription_model:
        return config.transcription_model
    if config.ai_provider.lower() == "cloudflare":
        return CloudflareAIProvider.TRANSCRIPTION_MODEL
    return OpenAIProvider.TRANSCRIPTION_MODEL


def default_generation_model(config: Settings) -> str:
    if config.generation_model:
        return config.generation_model
    if config.ai_provider.lower() == "cloudflare":
        return CloudflareAIProvider.COMPLETION_MODEL
    return OpenAIProvider.COMPLETION_MODEL
