"""Integration tests for the audio API."""

import pytest
from httpx import AsyncClient

from audio2features.core.ai.providers import get_transcription_backend
from audio2features.core.database.session import get_session_factory
from audio2features.pipeline.transcription import MOCK_TRANSCRIPTION
from tests.conftest import StubTranscriptionBackend


def audio_upload(content: bytes, filename: str = "feedback.mp3", content_type: str = "audio/mpeg") -> dict:
    return {"audio": (filename, content, content_type)}


@pytest.mark.integration
@pytest.mark.asyncio
class TestUpload:
    """Tests for POST /api/v1/upload."""

    async def test_upload_runs_pipeline_and_persists(
        self,
        async_client: AsyncClient,
        sample_audio_file: bytes,
        transcription_backend,
        generation_backend,
    ):
        """A valid upload is transcribed, extracted and stored."""
        response = await async_client.post("/api/v1/upload", files=audio_upload(sample_audio_file))

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Audio processed successfully"

        info = data["audioInfo"]
        assert info["fileName"] == "feedback.mp3"
        assert info["fileSize"] == len(sample_audio_file)
        assert info["fileType"] == "audio/mpeg"
        assert info["duration"] == "Unknown"

        features = data["aiFeatures"]
        assert features["transcription"] == "add dark mode"
        assert features["model"] == "stub-whisper"
        requests = features["featureRequests"]["requests"]
        assert len(requests) == 1
        assert requests[0]["title"] == "Add dark mode"

        assert transcription_backend.calls == [(sample_audio_file, "feedback.mp3")]
        assert len(generation_backend.calls) == 1

        stored = await async_client.get(f"/api/v1/audio/{info['fileId']}/feature-requests")
        assert stored.status_code == 200
        rows = stored.json()["featureRequests"]
        assert [r["title"] for r in rows] == ["Add dark mode"]
        assert rows[0]["summary"] == "s"

    async def test_audio_bytes_written_to_storage(
        self,
        async_client: AsyncClient,
        sample_audio_file: bytes,
        tmp_path,
    ):
        response = await async_client.post(
            "/api/v1/upload",
            files=audio_upload(sample_audio_file, filename="my note.mp3"),
        )

        info = response.json()["audioInfo"]
        assert info["storageKey"] == f"uploads/{info['fileId']}-my_note.mp3"
        assert (tmp_path / "storage" / info["storageKey"]).read_bytes() == sample_audio_file

    async def test_missing_file_rejected(self, async_client: AsyncClient, transcription_backend):
        response = await async_client.post(
            "/api/v1/upload",
            files={"attachment": ("feedback.mp3", b"abc", "audio/mpeg")},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No audio file provided"}
        assert transcription_backend.calls == []

    async def test_non_audio_rejected(
        self,
        async_client: AsyncClient,
        transcription_backend,
        generation_backend,
    ):
        response = await async_client.post(
            "/api/v1/upload",
            files=audio_upload(b"%PDF-1.4", filename="notes.pdf", content_type="application/pdf"),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "File must be an audio file"
        assert transcription_backend.calls == []
        assert generation_backend.calls == []

    async def test_oversized_file_rejected(
        self,
        async_client: AsyncClient,
        test_settings,
        transcription_backend,
        generation_backend,
    ):
        """One byte over the limit fails before any backend call."""
        content = b"\x00" * (test_settings.max_upload_bytes + 1)
        response = await async_client.post("/api/v1/upload", files=audio_upload(content))

        assert response.status_code == 400
        assert "error" in response.json()
        assert transcription_backend.calls == []
        assert generation_backend.calls == []

    async def test_file_at_limit_accepted(self, async_client: AsyncClient, test_settings):
        content = b"\x00" * test_settings.max_upload_bytes
        response = await async_client.post("/api/v1/upload", files=audio_upload(content))

        assert response.status_code == 200

    async def test_failing_backends_still_succeed(
        self,
        async_client: AsyncClient,
        sample_audio_file: bytes,
        transcription_backend,
        generation_backend,
    ):
        """Both fallbacks are reported inside a successful response."""
        transcription_backend.error = "stt unavailable"
        generation_backend.error = "llm unavailable"

        response = await async_client.post("/api/v1/upload", files=audio_upload(sample_audio_file))

        assert response.status_code == 200
        features = response.json()["aiFeatures"]
        assert features["transcription"] == MOCK_TRANSCRIPTION
        assert features["error"] == "stt unavailable"
        assert features["language"] == {"detected": "en", "confidence": 0.9}
        extraction = features["featureRequests"]
        assert extraction["error"] == "llm unavailable"
        assert extraction["requests"][0]["id"] == "fallback-1"

        file_id = response.json()["audioInfo"]["fileId"]
        stored = (await async_client.get(f"/api/v1/audio/{file_id}/feature-requests")).json()
        assert len(stored["featureRequests"]) == 1
        assert stored["featureRequests"][0]["title"] is None

    async def test_upload_without_database(
        self,
        app,
        async_client: AsyncClient,
        sample_audio_file: bytes,
    ):
        app.dependency_overrides[get_session_factory] = lambda: None

        response = await async_client.post("/api/v1/upload", files=audio_upload(sample_audio_file))

        assert response.status_code == 200
        assert response.json()["success"] is True

    async def test_unreachable_database_still_succeeds(
        self,
        app,
        async_client: AsyncClient,
        sample_audio_file: bytes,
        unreachable_session_factory,
    ):
        """Connection refused on both database writes is logged, AI results still returned."""
        app.dependency_overrides[get_session_factory] = lambda: unreachable_session_factory

        response = await async_client.post("/api/v1/upload", files=audio_upload(sample_audio_file))

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["aiFeatures"]["featureRequests"]["requests"][0]["title"] == "Add dark mode"

    async def test_unexpected_exception_returns_500(
        self,
        app,
        async_client: AsyncClient,
        sample_audio_file: bytes,
    ):
        class ExplodingBackend(StubTranscriptionBackend):
            async def transcribe(self, audio_data, filename=None):
                raise RuntimeError("decoder crashed")

        app.dependency_overrides[get_transcription_backend] = lambda: ExplodingBackend()

        response = await async_client.post("/api/v1/upload", files=audio_upload(sample_audio_file))

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process audio file", "details": "decoder crashed"}


@pytest.mark.integration
@pytest.mark.asyncio
class TestExtractFeatures:
    """Tests for POST /api/v1/extract-features."""

    async def test_extract_from_transcription(self, async_client: AsyncClient, generation_backend):
        response = await async_client.post(
            "/api/v1/extract-features",
            json={"transcription": "please add dark mode"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Feature requests extracted successfully"
        assert data["featureRequests"]["requests"][0]["title"] == "Add dark mode"
        assert data["featureRequests"]["originalTranscription"] == "please add dark mode"
        assert "please add dark mode" in generation_backend.calls[0][0][1].content

    @pytest.mark.parametrize("body", [{}, {"transcription": ""}, {"transcription": None}])
    async def test_missing_transcription_rejected(self, async_client: AsyncClient, generation_backend, body):
        response = await async_client.post("/api/v1/extract-features", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "No transcription provided"
        assert generation_backend.calls == []

    async def test_non_string_transcription_rejected(self, async_client: AsyncClient):
        response = await async_client.post("/api/v1/extract-features", json={"transcription": ["a"]})
        assert response.status_code == 400

    async def test_invalid_json_rejected(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/extract-features",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON body"

    async def test_unparseable_reply_gives_parse_error_record(self, async_client: AsyncClient, generation_backend):
        generation_backend.reply = "Sorry, I can't do that."

        response = await async_client.post("/api/v1/extract-features", json={"transcription": "x"})

        assert response.status_code == 200
        requests = response.json()["featureRequests"]["requests"]
        assert [r["id"] for r in requests] == ["parse-error-1"]


@pytest.mark.integration
@pytest.mark.asyncio
class TestStoredFeatureRequests:
    """Tests for GET /api/v1/audio/{audio_id}/feature-requests."""

    async def test_unknown_audio_id_returns_empty_list(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/audio/does-not-exist/feature-requests")

        assert response.status_code == 200
        assert response.json() == {"success": True, "featureRequests": []}

    async def test_database_disabled_returns_500(self, app, async_client: AsyncClient):
        app.dependency_overrides[get_session_factory] = lambda: None

        response = await async_client.get("/api/v1/audio/any/feature-requests")

        assert response.status_code == 500
        assert response.json()["error"] == "Database not available"

    async def test_query_failure_returns_500(self, app, async_client: AsyncClient, broken_session_factory):
        app.dependency_overrides[get_session_factory] = lambda: broken_session_factory

        response = await async_client.get("/api/v1/audio/any/feature-requests")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Failed to fetch feature requests"
        assert data["details"]
        assert "success" not in data

    async def test_unreachable_database_returns_500(
        self,
        app,
        async_client: AsyncClient,
        unreachable_session_factory,
    ):
        app.dependency_overrides[get_session_factory] = lambda: unreachable_session_factory

        response = await async_client.get("/api/v1/audio/any/feature-requests")

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch feature requests"


@pytest.mark.integration
@pytest.mark.asyncio
class TestHealth:
    async def test_health_reports_database(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"]["status"] == "connected"
