"""Transcription stage: audio bytes -> text, then chained extraction."""

import asyncio
import time

from audio2features.core.ai.base import (
    AIBackendError,
    BackendOutcome,
    TranscriptionBackend,
    TranscriptionResponse,
)
from audio2features.core.logging import get_logger
from audio2features.pipeline.extraction import ExtractionStage
from audio2features.pipeline.types import DetectedLanguage, TranscriptionResult

logger = get_logger(__name__)

MOCK_TRANSCRIPTION = (
    "[mock] This is a mock transcription. The speech-to-text call failed "
    "or is not configured yet."
)
MOCK_LANGUAGE = DetectedLanguage(code="en", confidence=0.9)
BACKEND_UNAVAILABLE = "Speech-to-text backend not available"


def detected_language(response: TranscriptionResponse) -> DetectedLanguage | None:
    if not response.language:
        return None
    return DetectedLanguage(code=response.language, confidence=response.language_confidence)


class TranscriptionStage:
    """
    Runs the speech-to-text backend and then the extraction stage.

    Backend failures are not raised: a fixed mock transcription is produced
    after ``fallback_delay`` seconds and extraction still runs on it.
    """

    def __init__(
        self,
        backend: TranscriptionBackend | None,
        extraction: ExtractionStage,
        default_model: str = "",
        fallback_delay: float = 0.5,
    ):
        self._backend = backend
        self._extraction = extraction
        self._default_model = default_model
        self._fallback_delay = fallback_delay

    @property
    def model(self) -> str:
        if self._backend is not None:
            return self._backend.transcription_model
        return self._default_model

    async def _transcribe(
        self, audio_data: bytes, filename: str | None
    ) -> BackendOutcome[TranscriptionResponse]:
        if self._backend is None:
            return BackendOutcome.failure(BACKEND_UNAVAILABLE)
        try:
            response = await self._backend.transcribe(audio_data, filename=filename)
        except AIBackendError as e:
            return BackendOutcome.failure(str(e))
        return BackendOutcome.success(response)

    async def run(self, audio_data: bytes, filename: str | None = None) -> TranscriptionResult:
        started_at = time.perf_counter()
        outcome = await self._transcribe(audio_data, filename)
        elapsed_ms = int((time.perf_counter() - started_at) * 1000)

        if not outcome.ok:
            logger.warning("transcription_backend_failed", model=self.model, error=outcome.error)
            await asyncio.sleep(self._fallback_delay)
            extraction = await self._extraction.run(MOCK_TRANSCRIPTION)
            return TranscriptionResult(
                text=MOCK_TRANSCRIPTION,
                extraction=extraction,
                detected_language=MOCK_LANGUAGE,
                processing_duration_ms=int(self._fallback_delay * 1000),
                model=self.model,
                error_detail=outcome.error,
            )

        response = outcome.value or TranscriptionResponse()
        text = response.best_text
        logger.info(
            "transcription_completed",
            model=self.model,
            characters=len(text),
            duration_ms=elapsed_ms,
        )

        extraction = await self._extraction.run(text)
        return TranscriptionResult(
            text=text,
            extraction=extraction,
            detected_language=detected_language(response),
            processing_duration_ms=elapsed_ms,
            model=self.model,
        )
