"""Decides which extracted records reach the feature_requests table."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from audio2features.core.database.base import new_id
from audio2features.core.database.session import DATABASE_ERRORS
from audio2features.core.feature_requests.models import FeatureRequest
from audio2features.core.feature_requests.service import save_feature_requests
from audio2features.core.logging import get_logger
from audio2features.pipeline.types import ExtractionResult, FeatureRequestRecord

logger = get_logger(__name__)


def partition_requests(
    requests: list[FeatureRequestRecord],
) -> tuple[list[FeatureRequestRecord], list[FeatureRequestRecord]]:
    """Split into (actionable, non_actionable), preserving order."""
    actionable = [r for r in requests if r.is_actionable]
    rejected = [r for r in requests if not r.is_actionable]
    return actionable, rejected


def build_feature_request_rows(audio_file_id: str, extraction: ExtractionResult) -> list[FeatureRequest]:
    """
    One row per actionable record, each with a fresh id and the shared summary.

    With nothing actionable, a single placeholder row keeps the summary so the
    upload still shows that extraction ran.
    """
    actionable, _ = partition_requests(extraction.requests)

    if not actionable:
        return [
            FeatureRequest(
                id=new_id(),
                audio_file_id=audio_file_id,
                summary=extraction.summary,
            )
        ]

    return [
        FeatureRequest(
            id=new_id(),
            audio_file_id=audio_file_id,
            title=record.title,
            description=record.description,
            priority=record.priority,
            category=record.category,
            confidence=record.confidence,
            potential_recommendation=record.potential_recommendation,
            summary=extraction.summary,
        )
        for record in actionable
    ]


async def persist_extraction(
    session_factory: async_sessionmaker[AsyncSession] | None,
    audio_file_id: str,
    extraction: ExtractionResult,
) -> int:
    """
    Write the filtered rows. Failures are logged and swallowed.

    Returns:
        Number of rows written (0 when skipped or failed)
    """
    if session_factory is None:
        logger.info("feature_requests_persist_skipped", audio_file_id=audio_file_id, reason="no_database")
        return 0

    rows = build_feature_request_rows(audio_file_id, extraction)
    try:
        async with session_factory() as session:
            written = await save_feature_requests(session, rows)
    except DATABASE_ERRORS as e:
        logger.error("feature_requests_persist_failed", audio_file_id=audio_file_id, error=str(e))
        return 0

    logger.info("feature_requests_persisted", audio_file_id=audio_file_id, rows=written)
    return written
