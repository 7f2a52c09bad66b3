"""Base AI backend interfaces and response types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class AIBackendError(Exception):
    """Raised by a backend when an inference call cannot be completed."""


@dataclass(frozen=True)
class BackendOutcome(Generic[T]):
    """Either a backend value or the text of a recoverable failure."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "BackendOutcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "BackendOutcome[T]":
        return cls(error=error or "Unknown error")


def _optional_str(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) else None


def _optional_float(payload: dict, key: str) -> float | None:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True)
class TranscriptionResponse:
    """Raw speech-to-text output. Backends populate whichever fields they have."""

    text: str | None = None
    transcription: str | None = None
    language: str | None = None
    language_confidence: float | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TranscriptionResponse":
        if not isinstance(payload, dict):
            return cls()
        return cls(
            text=_optional_str(payload, "text"),
            transcription=_optional_str(payload, "transcription"),
            language=_optional_str(payload, "language"),
            language_confidence=_optional_float(payload, "language_confidence"),
        )

    @property
    def best_text(self) -> str:
        return self.text or self.transcription or ""


@dataclass(frozen=True)
class GenerationResponse:
    """Raw text-generation output."""

    response: str | None = None
    text: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "GenerationResponse":
        if not isinstance(payload, dict):
            return cls()
        return cls(
            response=_optional_str(payload, "response"),
            text=_optional_str(payload, "text"),
        )

    @property
    def best_text(self) -> str:
        return self.response or self.text or ""


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class GenerationParams:
    max_output_tokens: int = 900
    temperature: float = 0.2


class TranscriptionBackend(ABC):
    """Speech-to-text capability."""

    @property
    @abstractmethod
    def transcription_model(self) -> str:
        """Model identifier reported with every transcription."""
        ...

    @abstractmethod
    async def transcribe(
        self,
        audio_data: bytes,
        filename: str | None = None,
    ) -> TranscriptionResponse:
        """Transcribe raw audio bytes. Raises AIBackendError on failure."""
        ...


class GenerationBackend(ABC):
    """Chat-style text generation capability."""

    @property
    @abstractmethod
    def generation_model(self) -> str:
        """Model identifier reported with every generation."""
        ...

    @abstractmethod
    async def generate(
        self,
        messages: list[ChatMessage],
        params: GenerationParams,
    ) -> GenerationResponse:
        """Generate text for system + user turns. Raises AIBackendError on failure."""
        ...
