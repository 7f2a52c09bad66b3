"""Feature request persistence service functions."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from audio2features.core.database.session import ensure_schema
from audio2features.core.feature_requests.models import AudioFile, FeatureRequest


async def record_audio_file(
    db: AsyncSession,
    file_id: str,
    file_name: str,
    file_size: int,
    file_type: str,
    storage_key: str | None,
) -> AudioFile:
    """
    Insert the metadata row for an accepted upload.

    Args:
        db: Database session
        file_id: Identifier minted for the upload
        file_name: Original client filename
        file_size: Size in bytes
        file_type: Declared MIME type
        storage_key: Object store key, or None if the bytes were not stored

    Returns:
        AudioFile: The committed row
    """
    await ensure_schema(await db.connection())

    audio_file = AudioFile(
        id=file_id,
        file_name=file_name,
        file_size=file_size,
        file_type=file_type,
        storage_key=storage_key,
    )
    db.add(audio_file)
    await db.commit()
    return audio_file


async def save_feature_requests(db: AsyncSession, rows: list[FeatureRequest]) -> int:
    """Insert prepared rows in one transaction. Returns the number written."""
    await ensure_schema(await db.connection())

    db.add_all(rows)
    await db.commit()
    return len(rows)


async def list_feature_requests(db: AsyncSession, audio_file_id: str) -> list[FeatureRequest]:
    """All rows stored for an audio file, oldest first. Unknown ids yield []."""
    await ensure_schema(await db.connection())
    await db.commit()

    result = await db.execute(
        select(FeatureRequest)
        .where(FeatureRequest.audio_file_id == audio_file_id)
        .order_by(FeatureRequest.created_at, FeatureRequest.id)
    )
    return list(result.scalars().all())
