"""AI backends module."""

from audio2features.core.ai.base import (
    AIBackendError,
    BackendOutcome,
    ChatMessage,
    GenerationBackend,
    GenerationParams,
    GenerationResponse,
    TranscriptionBackend,
    TranscriptionResponse,
)
from audio2features.core.ai.cloudflare import CloudflareAIProvider
from audio2features.core.ai.openai import OpenAIProvider

__all__ = [
    "AIBackendError",
    "BackendOutcome",
    "ChatMessage",
    "GenerationBackend",
    "GenerationParams",
    "GenerationResponse",
    "TranscriptionBackend",
    "TranscriptionResponse",
    "CloudflareAIProvider",
    "OpenAIProvider",
]
