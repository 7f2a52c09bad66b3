"""Request-scoped values passed between the pipeline stages."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Category(str, Enum):
    ENHANCEMENT = "enhancement"
    BUG_FIX = "bug-fix"
    NEW_FEATURE = "new-feature"
    IMPROVEMENT = "improvement"


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _confidence(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return min(1.0, max(0.0, float(value)))


def _recommendation(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return json.dumps(value, ensure_ascii=False)
    return None


@dataclass(frozen=True)
class FeatureRequestRecord:
    """
    One extracted (or substituted) feature request.

    ``id`` is an advisory token; persistence mints its own identifiers.
    String fields keep whatever the model produced, so priority and category
    are not forced onto the enum values.
    """

    id: str
    title: str | None = None
    description: str | None = None
    priority: str | None = None
    category: str | None = None
    confidence: float | None = None
    potential_recommendation: str | None = None

    @classmethod
    def from_payload(cls, payload: dict, position: int) -> "FeatureRequestRecord":
        """Decode a model-produced item field by field. ``position`` is 1-based."""
        raw_id = payload.get("id")
        if isinstance(raw_id, (int, float)) and not isinstance(raw_id, bool):
            raw_id = str(raw_id)
        return cls(
            id=raw_id if isinstance(raw_id, str) and raw_id else f"request-{position}",
            title=_str_or_none(payload.get("title")),
            description=_str_or_none(payload.get("description")),
            priority=_str_or_none(payload.get("priority")),
            category=_str_or_none(payload.get("category")),
            confidence=_confidence(payload.get("confidence")),
            potential_recommendation=_recommendation(payload.get("potentialRecommendation")),
        )

    @property
    def is_actionable(self) -> bool:
        """A real, non-placeholder title: non-empty and free of parse-error/fallback markers."""
        if not self.title:
            return False
        lowered = self.title.lower()
        return "parse error" not in lowered and "fallback" not in lowered


@dataclass(frozen=True)
class ExtractionResult:
    requests: list[FeatureRequestRecord] = field(default_factory=list)
    summary: str | None = None
    extraction_duration_ms: int = 0
    model: str = ""
    original_transcription: str | None = None
    error_detail: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.error_detail is not None


@dataclass(frozen=True)
class DetectedLanguage:
    code: str
    confidence: float | None = None


@dataclass(frozen=True)
class TranscriptionResult:
    """
    Output of the transcription stage.

    The extraction stage always runs on ``text`` (real or mock), and its result
    travels inside this value.
    """

    text: str
    extraction: ExtractionResult
    detected_language: DetectedLanguage | None = None
    processing_duration_ms: int = 0
    model: str = ""
    error_detail: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.error_detail is not None
