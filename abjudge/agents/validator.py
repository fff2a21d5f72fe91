import json
import logging
from collections.abc import Iterable

import pydantic

from abjudge.errors import EmptyResponseError, MalformedResponseError, SchemaViolationError
from abjudge.models.response import TIE, AnalysisResult

logger = logging.getLogger(__name__)


def _error_path(error: dict) -> str:
    return ".".join(str(part) for part in error["loc"]) or "<root>"


def validate_result(raw_text: str | None, labels: Iterable[str]) -> AnalysisResult:
    """Turn raw model output into an AnalysisResult, or raise a classified error.

    This is the only way a model response becomes a typed result. Validation is
    strict: out-of-range scores and wrong types are violations, never coerced.
    """
    if raw_text is None or not raw_text.strip():
        raise EmptyResponseError("Model returned no text payload")

    try:
        json.loads(raw_text)
    except json.JSONDecodeError as e:
        logger.warning("Unparseable model output (%d chars): %s", len(raw_text), e)
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    try:
        result = AnalysisResult.model_validate_json(raw_text, strict=True)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        if first["type"] == "json_invalid":
            logger.warning("Unparseable model output (%d chars): %s", len(raw_text), first["msg"])
            raise MalformedResponseError(f"Response is not valid JSON: {first['msg']}") from e
        field = _error_path(first)
        logger.warning("Schema violation at %s (%d errors total)", field, e.error_count())
        raise SchemaViolationError(field, first["msg"]) from e

    expected = list(labels)
    returned = [detail.label for detail in result.variant_details]
    if len(returned) != len(expected) or set(returned) != set(expected):
        raise SchemaViolationError(
            "variantDetails",
            f"labels {sorted(returned)} do not match submitted labels {sorted(expected)}",
        )
    if result.winner != TIE and result.winner not in expected:
        raise SchemaViolationError(
            "winner", f"{result.winner!r} is not one of {sorted(expected)} or {TIE!r}"
        )

    return result
