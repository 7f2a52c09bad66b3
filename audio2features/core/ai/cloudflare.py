"""Cloudflare Workers AI provider (REST API)."""

from typing import Any

import httpx

from audio2features.core.ai.base import (
    AIBackendError,
    ChatMessage,
    GenerationBackend,
    GenerationParams,
    GenerationResponse,
    TranscriptionBackend,
    TranscriptionResponse,
)


class CloudflareAIProvider(TranscriptionBackend, GenerationBackend):
    """
    Workers AI over the account-scoped REST endpoint.

    Every response is wrapped in an envelope: {"success": bool, "errors": [...],
    "result": {...}}. Only "result" carries model output.
    """

    BASE_URL = "https://api.cloudflare.com/client/v4"
    TRANSCRIPTION_MODEL = "@cf/openai/whisper-tiny-en"
    COMPLETION_MODEL = "@cf/mistral/mistral-7b-instruct-v0.2-lora"

    def __init__(
        self,
        account_id: str,
        api_token: str,
        transcription_model: str | None = None,
        generation_model: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 120.0,
    ):
        self._account_id = account_id
        self._client = client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=timeout,
        )
        self._transcription_model = transcription_model or self.TRANSCRIPTION_MODEL
        self._generation_model = generation_model or self.COMPLETION_MODEL

    @property
    def transcription_model(self) -> str:
        return self._transcription_model

    @property
    def generation_model(self) -> str:
        return self._generation_model

    def _run_path(self, model: str) -> str:
        return f"/accounts/{self._account_id}/ai/run/{model}"

    async def _run(self, model: str, **request_kwargs: Any) -> Any:
        try:
            response = await self._client.post(self._run_path(model), **request_kwargs)
            response.raise_for_status()
            envelope = response.json()
        except httpx.HTTPError as e:
            raise AIBackendError(f"Workers AI request to {model} failed: {e}") from e
        except ValueError as e:
            raise AIBackendError(f"Workers AI returned a non-JSON body for {model}") from e

        if not isinstance(envelope, dict):
            raise AIBackendError(f"Workers AI returned an unexpected body for {model}")
        if envelope.get("success") is False:
            errors = envelope.get("errors") or []
            raise AIBackendError(f"Workers AI reported errors for {model}: {errors}")
        return envelope.get("result")

    async def transcribe(
        self,
        audio_data: bytes,
        filename: str | None = None,
    ) -> TranscriptionResponse:
        """Send the raw audio bytes as the request body."""
        result = await self._run(
            self._transcription_model,
            content=audio_data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return TranscriptionResponse.from_payload(result)

    async def generate(
        self,
        messages: list[ChatMessage],
        params: GenerationParams,
    ) -> GenerationResponse:
        result = await self._run(
            self._generation_model,
            json={
                "messages": [m.to_dict() for m in messages],
                "max_tokens": params.max_output_tokens,
                "temperature": params.temperature,
            },
        )
        return GenerationResponse.from_payload(result)

    async def aclose(self) -> None:
        await self._client.aclose()
