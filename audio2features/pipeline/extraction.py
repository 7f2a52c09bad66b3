"""Extraction stage: transcription text -> structured feature requests.

The model is asked for a JSON object embedded in its reply. Two failure shapes
are recovered locally and never raised:

- the backend could not be called  -> ``fallback-1`` record + ``error_detail``
- the reply could not be decoded   -> ``parse-error-1`` record
"""

import asyncio
import json
import time
from typing import Any

from audio2features.core.ai.base import (
    AIBackendError,
    BackendOutcome,
    ChatMessage,
    GenerationBackend,
    GenerationParams,
    GenerationResponse,
)
from audio2features.core.logging import get_logger
from audio2features.pipeline.json_span import GreedyBraceLocator, JSONSpanLocator
from audio2features.pipeline.types import (
    Category,
    ExtractionResult,
    FeatureRequestRecord,
    Priority,
)

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a developer manager for first responders who extracts actionable "
    "feature requests from user feedback. Always respond with valid JSON."
)

EXTRACTION_PROMPT_TEMPLATE = """You are a developer for first responders analyzing user feedback from audio transcriptions. Extract feature requests from the following transcription and format them as structured data.

TRANSCRIPTION:
"{transcription}"

Please analyze this transcription and extract any feature requests, suggestions, or product improvements mentioned. For each feature request, provide:
1. A clear, concise title
2. A detailed description of what the user is addressing
3. Priority level (high/medium/low)
4. Category (enhancement/bug-fix/new-feature/improvement)
5. Confidence score (0.0-1.0)
6. Potential recommendation: 1-2 possible solutions nicely formatted (could be bullet points)

Format your response as a JSON object with this structure:
{{
  "requests": [
    {{
      "id": "unique-id",
      "title": "Feature request title",
      "description": "Detailed description",
      "priority": "high|medium|low",
      "category": "enhancement|bug-fix|new-feature|improvement",
      "confidence": 0.8,
      "potentialRecommendation": "1-2 possible solutions nicely formatted (could be bullet points)"
    }}
  ],
  "summary": "Brief summary of all extracted requests"
}}

If no clear feature requests are found, return an empty requests array but still provide a summary of the transcription content."""

PARSE_ERROR_SUMMARY = "Error in processing AI response"
FALLBACK_SUMMARY = "Feature extraction failed - using fallback response"
BACKEND_UNAVAILABLE = "Text-generation backend not available"

PARSE_ERROR_RECORD = FeatureRequestRecord(
    id="parse-error-1",
    title="Unable to parse AI response",
    description=(
        "The AI model returned a response that couldn't be parsed as structured "
        "feature requests."
    ),
    priority=Priority.LOW.value,
    category=Category.IMPROVEMENT.value,
    confidence=0.1,
    potential_recommendation="• Check AI model configuration\n• Implement better error handling",
)

FALLBACK_RECORD = FeatureRequestRecord(
    id="fallback-1",
    title="[Fallback] Feature extraction failed",
    description=(
        "The AI model failed to process the transcription. This could be due to "
        "network issues, model unavailability, or configuration problems."
    ),
    priority=Priority.MEDIUM.value,
    category=Category.IMPROVEMENT.value,
    confidence=0.3,
    potential_recommendation=(
        "• Verify AI provider configuration\n"
        "• Check network connectivity and model availability"
    ),
)


class ResponseParseError(ValueError):
    """The model reply held no decodable JSON object."""


def build_extraction_prompt(transcription: str) -> str:
    """Embed the transcription verbatim in the instruction template."""
    return EXTRACTION_PROMPT_TEMPLATE.format(transcription=transcription)


def build_messages(transcription: str) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_extraction_prompt(transcription)),
    ]


def decode_requests(raw_requests: Any) -> list[FeatureRequestRecord]:
    """Decode the ``requests`` array; anything that is not a list gives []."""
    if not isinstance(raw_requests, list):
        return []

    records = []
    for position, item in enumerate(raw_requests, start=1):
        if not isinstance(item, dict):
            logger.warning("extraction_item_skipped", position=position, item_type=type(item).__name__)
            continue
        records.append(FeatureRequestRecord.from_payload(item, position))
    return records


def parse_model_reply(text: str, locator: JSONSpanLocator) -> tuple[list[FeatureRequestRecord], str | None]:
    """
    Decode the JSON object embedded in a model reply.

    Returns:
        (requests, summary)

    Raises:
        ResponseParseError: no span found, invalid JSON, or not an object
    """
    span = locator.locate(text)
    if span is None:
        raise ResponseParseError("No valid JSON found in response")

    try:
        body = json.loads(span)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON in response: {e.msg}") from e

    if not isinstance(body, dict):
        raise ResponseParseError("JSON in response is not an object")

    summary = body.get("summary")
    return decode_requests(body.get("requests")), summary if isinstance(summary, str) else None


class ExtractionStage:
    """
    Runs the text-generation backend over a transcription.

    Args:
        backend: Text-generation capability, or None when unavailable
        default_model: Model id reported when there is no backend
        params: Generation parameters (max output tokens, temperature)
        fallback_delay: Seconds to wait before returning the fallback payload
        locator: Strategy for finding the JSON span in the reply
    """

    def __init__(
        self,
        backend: GenerationBackend | None,
        default_model: str = "",
        params: GenerationParams | None = None,
        fallback_delay: float = 0.3,
        locator: JSONSpanLocator | None = None,
    ):
        self._backend = backend
        self._default_model = default_model
        self._params = params or GenerationParams()
        self._fallback_delay = fallback_delay
        self._locator = locator or GreedyBraceLocator()

    @property
    def model(self) -> str:
        if self._backend is not None:
            return self._backend.generation_model
        return self._default_model

    async def _generate(self, transcription: str) -> BackendOutcome[GenerationResponse]:
        if self._backend is None:
            return BackendOutcome.failure(BACKEND_UNAVAILABLE)
        try:
            response = await self._backend.generate(build_messages(transcription), self._params)
        except AIBackendError as e:
            return BackendOutcome.failure(str(e))
        return BackendOutcome.success(response)

    async def run(self, transcription: str) -> ExtractionResult:
        """Extract feature requests. Never raises for backend or parse failures."""
        started_at = time.perf_counter()
        outcome = await self._generate(transcription)
        elapsed_ms = int((time.perf_counter() - started_at) * 1000)

        if not outcome.ok:
            logger.warning("extraction_backend_failed", model=self.model, error=outcome.error)
            await asyncio.sleep(self._fallback_delay)
            return ExtractionResult(
                requests=[FALLBACK_RECORD],
                summary=FALLBACK_SUMMARY,
                extraction_duration_ms=int(self._fallback_delay * 1000),
                model=self.model,
                error_detail=outcome.error,
            )

        reply = outcome.value.best_text if outcome.value is not None else ""
        try:
            requests, summary = parse_model_reply(reply, self._locator)
        except ResponseParseError as e:
            logger.warning("extraction_parse_failed", model=self.model, error=str(e))
            requests, summary = [PARSE_ERROR_RECORD], PARSE_ERROR_SUMMARY

        logger.info(
            "extraction_completed",
            model=self.model,
            request_count=len(requests),
            duration_ms=elapsed_ms,
        )
        return ExtractionResult(
            requests=requests,
            summary=summary,
            extraction_duration_ms=elapsed_ms,
            model=self.model,
            original_transcription=transcription,
        )
