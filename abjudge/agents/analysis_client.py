import logging
from enum import Enum

from google import genai
from google.genai import types

from abjudge.agents.encoder import encode_variant
from abjudge.agents.prompt import build_prompt
from abjudge.agents.validator import validate_result
from abjudge.config import Settings
from abjudge.errors import TransportError, classify_transport_error
from abjudge.models.request import AnalysisRequest, validate_variants
from abjudge.models.response import AnalysisResult, build_result_schema

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    ENCODING = "encoding"
    REQUESTING = "requesting"
    VALIDATING = "validating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def build_parts(request: AnalysisRequest, language: str = "en") -> list[types.Part]:
    """Encode every variant in submission order, then append the instruction prompt."""
    parts: list[types.Part] = []
    for variant in request.variants:
        parts.extend(encode_variant(variant))
    parts.append(
        types.Part.from_text(
            text=build_prompt(request.mode, request.context, request.labels, language)
        )
    )
    return parts


class AnalysisClient:
    """One-shot comparative analysis against Gemini.

    Holds only configuration and the SDK client; every call to ``analyze``
    starts from IDLE and keeps nothing afterwards. Overlapping calls on one
    instance are not serialized.
    """

    def __init__(self, settings: Settings, client: genai.Client | None = None):
        self.settings = settings
        if client is None:
            http_options = None
            if settings.request_timeout_ms:
                http_options = types.HttpOptions(timeout=settings.request_timeout_ms)
            client = genai.Client(api_key=settings.gemini_api_key, http_options=http_options)
        self._client = client

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            thinking_config=types.ThinkingConfig(thinking_budget=self.settings.thinking_budget),
            response_mime_type="application/json",
            response_json_schema=build_result_schema(),
        )

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        phase = Phase.IDLE
        try:
            # Requests built by hand skip build_request; re-check before encoding
            variants = validate_variants(request.mode, request.variants)
            if variants != request.variants:
                request = request.model_copy(update={"variants": variants})

            phase = Phase.ENCODING
            parts = build_parts(request, self.settings.output_language)
            logger.debug("Encoded %d parts for %d variants", len(parts), len(request.variants))

            phase = Phase.REQUESTING
            logger.info(
                "Requesting %s analysis of %s from %s",
                request.mode.value,
                ",".join(request.labels),
                self.settings.model_name,
            )
            try:
                response = await self._client.aio.models.generate_content(
                    model=self.settings.model_name,
                    contents=[types.Content(role="user", parts=parts)],
                    config=self._generation_config(),
                )
            except Exception as e:
                failure = classify_transport_error(e)
                logger.error("Model call failed (%s): %s", failure.value, e)
                raise TransportError(str(e), failure) from e

            phase = Phase.VALIDATING
            result = validate_result(response.text, request.labels)
        except Exception:
            logger.debug("Analysis %s during %s", Phase.FAILED.value, phase.value)
            raise

        logger.info("Analysis %s: winner=%s", Phase.SUCCEEDED.value, result.winner)
        return result
