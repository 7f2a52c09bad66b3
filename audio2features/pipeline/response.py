"""JSON envelopes returned by the HTTP surface.

Keys are camelCase to match the browser client. Optional values that are
absent are left out rather than sent as null.
"""

from typing import Any

from audio2features.core.feature_requests.models import FeatureRequest
from audio2features.pipeline.types import (
    ExtractionResult,
    FeatureRequestRecord,
    TranscriptionResult,
)

UNKNOWN = "Unknown"


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def record_envelope(record: FeatureRequestRecord) -> dict[str, Any]:
    return _compact({
        "id": record.id,
        "title": record.title,
        "description": record.description,
        "priority": record.priority,
        "category": record.category,
        "confidence": record.confidence,
        "potentialRecommendation": record.potential_recommendation,
    })


def extraction_envelope(result: ExtractionResult) -> dict[str, Any]:
    body = _compact({
        "summary": result.summary,
        "extractionTimeMs": result.extraction_duration_ms,
        "model": result.model,
        "originalTranscription": result.original_transcription,
        "error": result.error_detail,
    })
    # Always present, even when empty
    body["requests"] = [record_envelope(r) for r in result.requests]
    return body


def transcription_envelope(result: TranscriptionResult) -> dict[str, Any]:
    language = None
    if result.detected_language is not None:
        language = _compact({
            "detected": result.detected_language.code,
            "confidence": result.detected_language.confidence,
        })
    return _compact({
        "transcription": result.text,
        "language": language,
        "processingTimeMs": result.processing_duration_ms,
        "model": result.model,
        "featureRequests": extraction_envelope(result.extraction),
        "error": result.error_detail,
    })


def audio_info(
    file_id: str,
    file_name: str,
    file_size: int,
    file_type: str,
    storage_key: str | None,
) -> dict[str, Any]:
    """Upload metadata. Signal properties are not analysed and always report Unknown."""
    return _compact({
        "fileName": file_name,
        "fileSize": file_size,
        "fileType": file_type,
        "duration": UNKNOWN,
        "sampleRate": UNKNOWN,
        "channels": UNKNOWN,
        "fileId": file_id,
        "storageKey": storage_key,
    })


def upload_envelope(info: dict[str, Any], result: TranscriptionResult) -> dict[str, Any]:
    return {
        "success": True,
        "audioInfo": info,
        "aiFeatures": transcription_envelope(result),
        "message": "Audio processed successfully",
    }


def extract_envelope(result: ExtractionResult) -> dict[str, Any]:
    return {
        "success": True,
        "featureRequests": extraction_envelope(result),
        "message": "Feature requests extracted successfully",
    }


def stored_row_envelope(row: FeatureRequest) -> dict[str, Any]:
    """Stored rows keep nulls so placeholder rows stay recognisable."""
    return {
        "id": row.id,
        "audioFileId": row.audio_file_id,
        "title": row.title,
        "description": row.description,
        "priority": row.priority,
        "category": row.category,
        "confidence": row.confidence,
        "potentialRecommendation": row.potential_recommendation,
        "summary": row.summary,
        "createdAt": row.created_at.isoformat() if row.created_at else None,
    }


def stored_rows_envelope(rows: list[FeatureRequest]) -> dict[str, Any]:
    return {"success": True, "featureRequests": [stored_row_envelope(r) for r in rows]}


def error_envelope(error: str, details: str | None = None) -> dict[str, Any]:
    return _compact({"error": error, "details": details})
