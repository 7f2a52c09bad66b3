"""FastAPI dependencies that assemble the pipeline stages per request."""

from typing import Annotated

from fastapi import Depends

from audio2features.config import Settings, get_settings
from audio2features.core.ai.base import GenerationBackend, GenerationParams, TranscriptionBackend
from audio2features.core.ai.providers import (
    default_generation_model,
    default_transcription_model,
    get_generation_backend,
    get_transcription_backend,
)
from audio2features.pipeline.extraction import ExtractionStage
from audio2features.pipeline.transcription import TranscriptionStage


def get_extraction_stage(
    config: Annotated[Settings, Depends(get_settings)],
    backend: Annotated[GenerationBackend | None, Depends(get_generation_backend)],
) -> ExtractionStage:
    return ExtractionStage(
        backend=backend,
        default_model=default_generation_model(config),
        params=GenerationParams(
            max_output_tokens=config.generation_max_tokens,
            temperature=config.generation_temperature,
        ),
        fallback_delay=config.extraction_fallback_delay_seconds,
    )


def get_transcription_stage(
    config: Annotated[Settings, Depends(get_settings)],
    backend: Annotated[TranscriptionBackend | None, Depends(get_transcription_backend)],
    extraction: Annotated[ExtractionStage, Depends(get_extraction_stage)],
) -> TranscriptionStage:
    return TranscriptionStage(
        backend=backend,
        extraction=extraction,
        default_model=default_transcription_model(config),
        fallback_delay=config.transcription_fallback_delay_seconds,
    )
