"""Two-stage AI pipeline: transcription, then feature-request extraction."""

from audio2features.pipeline.extraction import ExtractionStage
from audio2features.pipeline.json_span import GreedyBraceLocator, JSONSpanLocator
from audio2features.pipeline.transcription import TranscriptionStage
from audio2features.pipeline.types import (
    Category,
    DetectedLanguage,
    ExtractionResult,
    FeatureRequestRecord,
    Priority,
    TranscriptionResult,
)

__all__ = [
    "ExtractionStage",
    "TranscriptionStage",
    "JSONSpanLocator",
    "GreedyBraceLocator",
    "Category",
    "DetectedLanguage",
    "ExtractionResult",
    "FeatureRequestRecord",
    "Priority",
    "TranscriptionResult",
]
