"""OpenAI AI provider."""

import io
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from audio2features.core.ai.base import (
    AIBackendError,
    ChatMessage,
    GenerationBackend,
    GenerationParams,
    GenerationResponse,
    TranscriptionBackend,
    TranscriptionResponse,
)


class OpenAIProvider(TranscriptionBackend, GenerationBackend):
    """
    OpenAI provider for transcription (whisper-1) and extraction (gpt-4o-mini).

    verbose_json is requested so the detected language comes back with the text.
    """

    TRANSCRIPTION_MODEL = "whisper-1"
    COMPLETION_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: str,
        transcription_model: str | None = None,
        generation_model: str | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self._client = client or AsyncOpenAI(api_key=api_key)
        self._transcription_model = transcription_model or self.TRANSCRIPTION_MODEL
        self._generation_model = generation_model or self.COMPLETION_MODEL

    @property
    def transcription_model(self) -> str:
        return self._transcription_model

    @property
    def generation_model(self) -> str:
        return self._generation_model

    async def transcribe(
        self,
        audio_data: bytes,
        filename: str | None = None,
    ) -> TranscriptionResponse:
        """
        Transcribe audio with the OpenAI audio API.

        Args:
            audio_data: Raw audio bytes
            filename: Filename with extension for format detection

        Returns:
            TranscriptionResponse with text and detected language
        """
        audio_file = io.BytesIO(audio_data)
        audio_file.name = filename or "audio.mp3"

        try:
            response = await self._client.audio.transcriptions.create(
                model=self._transcription_model,
                file=audio_file,
                response_format="verbose_json",
            )
        except OpenAIError as e:
            raise AIBackendError(f"OpenAI transcription failed: {e}") from e

        payload: Any = response.model_dump() if hasattr(response, "model_dump") else None
        if not isinstance(payload, dict):
            payload = {
                "text": getattr(response, "text", None),
                "language": getattr(response, "language", None),
            }
        return TranscriptionResponse.from_payload(payload)

    async def generate(
        self,
        messages: list[ChatMessage],
        params: GenerationParams,
    ) -> GenerationResponse:
        """Chat completion; the first choice's content becomes the response text."""
        try:
            response = await self._client.chat.completions.create(
                model=self._generation_model,
                messages=[m.to_dict() for m in messages],
                max_tokens=params.max_output_tokens,
                temperature=params.temperature,
            )
        except OpenAIError as e:
            raise AIBackendError(f"OpenAI completion failed: {e}") from e

        if not response.choices:
            return GenerationResponse()
        return GenerationResponse(response=response.choices[0].message.content)

    async def aclose(self) -> None:
        await self._client.close()
