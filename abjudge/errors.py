"""Failure taxonomy for one analysis call.

Every failure surfaced to callers is an ``AnalysisError`` subclass with a
stable ``kind``. ``user_message`` turns any of them into the localized text
shown to the person who submitted the variants.
"""

from enum import Enum

import httpx
from google.genai import errors as genai_errors


class TransportFailure(str, Enum):
    OVERLOADED = "overloaded"  # timeout or server under load
    UNKNOWN = "unknown"


class AnalysisError(Exception):
    kind = "analysis_error"


class VariantValidationError(AnalysisError):
    """The submitted variants cannot be analyzed (count, content, kind, MIME)."""

    kind = "validation"


class EncodingError(AnalysisError):
    kind = "encoding"


class TransportError(AnalysisError):
    kind = "transport"

    def __init__(self, message: str, failure: TransportFailure = TransportFailure.UNKNOWN):
        super().__init__(message)
        self.failure = failure


class EmptyResponseError(AnalysisError):
    kind = "empty_response"


class MalformedResponseError(AnalysisError):
    kind = "malformed_response"


class SchemaViolationError(AnalysisError):
    kind = "schema_violation"

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


_OVERLOAD_CODES = frozenset({429, 500, 503, 504})
_OVERLOAD_STATUSES = frozenset(
    {"RESOURCE_EXHAUSTED", "UNAVAILABLE", "DEADLINE_EXCEEDED", "INTERNAL", "UNKNOWN"}
)
# Proxy failures surface only as free text; kept for compatibility
_LEGACY_OVERLOAD_MARKERS = ("Rpc failed",)


def classify_transport_error(exc: BaseException) -> TransportFailure:
    """Map a transport-layer exception onto the two TransportError categories."""
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return TransportFailure.OVERLOADED
    if isinstance(exc, genai_errors.APIError):
        if exc.code in _OVERLOAD_CODES:
            return TransportFailure.OVERLOADED
        if (exc.status or "").upper() in _OVERLOAD_STATUSES:
            return TransportFailure.OVERLOADED
    message = str(exc)
    if any(marker in message for marker in _LEGACY_OVERLOAD_MARKERS):
        return TransportFailure.OVERLOADED
    return TransportFailure.UNKNOWN


_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "validation": "Please submit 2 to 4 variants and make sure each one has an image or copy.",
        "encoding": "One of the variants could not be prepared for analysis. Please re-upload it and try again.",
        "overloaded": (
            "The model timed out or is under heavy load. "
            "Try again with fewer variants or smaller images."
        ),
        "empty_response": "The model returned an empty response. Please try again.",
        "generic": (
            "The analysis failed, possibly because of large images or a network hiccup. "
            "Please try again later."
        ),
    },
    "zh": {
        "validation": "请提交 2-4 个方案，并确保每个方案都已上传图片或填写文案。",
        "encoding": "有方案无法转换为可分析的内容，请重新上传后再试。",
        "overloaded": "模型响应超时或负载过重。建议尝试减少方案数量，或确保上传的图片大小适中。",
        "empty_response": "AI 返回了空响应，请稍后再试。",
        "generic": "分析失败。可能是因为图片过大或网络波动，请稍后再试。",
    },
}


def user_message(exc: AnalysisError, language: str = "en") -> str:
    """Return the localized, human-readable message for a failed analysis."""
    catalog = _MESSAGES.get(language, _MESSAGES["en"])
    if isinstance(exc, TransportError) and exc.failure is TransportFailure.OVERLOADED:
        return catalog["overloaded"]
    return catalog.get(exc.kind, catalog["generic"])
