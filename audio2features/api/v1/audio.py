"""Audio upload, feature extraction and stored feature request endpoints."""

from typing import Annotated
from uuid import uuid4

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from audio2features.config import Settings, get_settings
from audio2features.core.database.session import DATABASE_ERRORS, get_session_factory
from audio2features.core.dependencies import get_extraction_stage, get_transcription_stage
from audio2features.core.errors import APIError
from audio2features.core.feature_requests.service import list_feature_requests, record_audio_file
from audio2features.core.logging import get_logger
from audio2features.core.storage import ObjectStore, StorageError, get_object_store, upload_key
from audio2features.pipeline import response
from audio2features.pipeline.extraction import ExtractionStage
from audio2features.pipeline.persistence import persist_extraction
from audio2features.pipeline.transcription import TranscriptionStage

router = APIRouter()
logger = get_logger(__name__)

SessionFactory = async_sessionmaker[AsyncSession] | None


async def _store_audio(
    store: ObjectStore | None,
    key: str,
    content: bytes,
    content_type: str,
) -> bool:
    """Best-effort object put. Returns whether the bytes were stored."""
    if store is None:
        logger.info("audio_store_skipped", key=key, reason="no_object_store")
        return False
    try:
        await store.put(key, content, content_type)
    except StorageError as e:
        logger.error("audio_store_failed", key=key, store=store.name, error=str(e))
        return False
    logger.info("audio_stored", key=key, store=store.name)
    return True


async def _record_audio_file(
    session_factory: SessionFactory,
    file_id: str,
    file_name: str,
    file_size: int,
    file_type: str,
    storage_key: str | None,
) -> bool:
    """Best-effort audio_files insert. Returns whether the row was written."""
    if session_factory is None:
        logger.info("audio_file_record_skipped", file_id=file_id, reason="no_database")
        return False
    try:
        async with session_factory() as session:
            await record_audio_file(
                session,
                file_id=file_id,
                file_name=file_name,
                file_size=file_size,
                file_type=file_type,
                storage_key=storage_key,
            )
    except DATABASE_ERRORS as e:
        logger.error("audio_file_record_failed", file_id=file_id, error=str(e))
        return False
    return True


@router.post("/upload")
async def upload_audio(
    config: Annotated[Settings, Depends(get_settings)],
    stage: Annotated[TranscriptionStage, Depends(get_transcription_stage)],
    store: Annotated[ObjectStore | None, Depends(get_object_store)],
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
    audio: UploadFile | None = File(None),
) -> dict:
    """
    Upload an audio file, transcribe it and extract feature requests.

    Validation happens before any storage or AI call. Storage, database and
    AI backend failures are logged and degrade the result; only unexpected
    exceptions produce a 500.
    """
    if audio is None:
        raise APIError(400, "No audio file provided")

    content_type = audio.content_type or ""
    if not content_type.startswith("audio/"):
        raise APIError(400, "File must be an audio file")

    too_large = f"File size must be less than {config.max_upload_bytes // (1024 * 1024)}MB"
    if audio.size is not None and audio.size > config.max_upload_bytes:
        raise APIError(400, too_large)

    try:
        content = await audio.read()
        file_size = len(content)
        if file_size > config.max_upload_bytes:
            raise APIError(400, too_large)

        file_name = audio.filename or "audio"
        file_id = str(uuid4())
        key = upload_key(file_id, file_name)
        logger.info("upload_received", file_id=file_id, file_name=file_name, size_bytes=file_size)

        stored = await _store_audio(store, key, content, content_type)
        storage_key = key if stored else None

        recorded = await _record_audio_file(
            session_factory,
            file_id=file_id,
            file_name=file_name,
            file_size=file_size,
            file_type=content_type,
            storage_key=storage_key,
        )

        info = response.audio_info(file_id, file_name, file_size, content_type, storage_key)
        result = await stage.run(content, filename=file_name)

        persisted = 0
        if recorded:
            persisted = await persist_extraction(session_factory, file_id, result.extraction)

        logger.info(
            "upload_processed",
            file_id=file_id,
            transcription_fallback=result.is_fallback,
            extraction_fallback=result.extraction.is_fallback,
            persisted_rows=persisted,
        )
        return response.upload_envelope(info, result)
    except APIError:
        raise
    except Exception as e:
        logger.exception("upload_processing_failed", error=str(e))
        raise APIError(500, "Failed to process audio file", details=str(e)) from e


@router.post("/extract-features")
async def extract_features(
    request: Request,
    stage: Annotated[ExtractionStage, Depends(get_extraction_stage)],
) -> dict:
    """Extract feature requests from an existing transcription."""
    try:
        body = await request.json()
    except ValueError as e:
        raise APIError(400, "Invalid JSON body", details=str(e)) from e

    transcription = body.get("transcription") if isinstance(body, dict) else None
    if not transcription:
        raise APIError(400, "No transcription provided")
    if not isinstance(transcription, str):
        raise APIError(400, "Transcription must be a string")

    try:
        result = await stage.run(transcription)
    except Exception as e:
        logger.exception("extraction_request_failed", error=str(e))
        raise APIError(500, "Failed to extract feature requests", details=str(e)) from e

    logger.info("extraction_request_completed", fallback=result.is_fallback, request_count=len(result.requests))
    return response.extract_envelope(result)


@router.get("/audio/{audio_id}/feature-requests")
async def get_feature_requests(
    audio_id: str,
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
) -> dict:
    """Stored feature requests for one audio file."""
    if session_factory is None:
        raise APIError(500, "Database not available")

    try:
        async with session_factory() as session:
            rows = await list_feature_requests(session, audio_id)
    except DATABASE_ERRORS as e:
        logger.error("feature_requests_fetch_failed", audio_id=audio_id, error=str(e))
        raise APIError(500, "Failed to fetch feature requests", details=str(e)) from e

    return response.stored_rows_envelope(rows)
