import json
from unittest.mock import patch

import httpx
import pytest
from google.genai import errors as genai_errors

from abjudge.agents.analysis_client import AnalysisClient, build_parts
from abjudge.config import Settings
from abjudge.errors import (
    EmptyResponseError,
    EncodingError,
    MalformedResponseError,
    SchemaViolationError,
    TransportError,
    TransportFailure,
    VariantValidationError,
)
from abjudge.models.request import AnalysisMode, AnalysisRequest, Variant, build_request
from abjudge.models.response import build_result_schema

from .conftest import make_genai_client, make_result_payload


def _settings(**overrides) -> Settings:
    return Settings(gemini_api_key="test-gemini-key", **overrides)


@pytest.mark.asyncio
async def test_text_comparison_sends_two_variants_and_prompt(text_variants):
    client = make_genai_client(text=json.dumps(make_result_payload()))
    analyzer = AnalysisClient(_settings(), client=client)

    result = await analyzer.analyze(build_request("text-comparison", "", text_variants))

    assert result.winner == "A"
    client.aio.models.generate_content.assert_awaited_once()
    kwargs = client.aio.models.generate_content.call_args.kwargs
    parts = kwargs["contents"][0].parts
    assert len(parts) == 3  # 2 text variants + 1 prompt
    assert parts[0].text == "Variant A copy: Buy now!"
    assert parts[1].text == "Variant B copy: Limited offer"
    assert "Number of variants: 2 (A, B)" in parts[2].text


@pytest.mark.asyncio
async def test_request_is_constrained_by_result_schema(text_variants):
    client = make_genai_client(text=json.dumps(make_result_payload()))
    analyzer = AnalysisClient(_settings(model_name="gemini-test", thinking_budget=1234), client=client)

    await analyzer.analyze(build_request("text-comparison", "", text_variants))

    kwargs = client.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    config = kwargs["config"]
    assert config.response_mime_type == "application/json"
    assert config.response_json_schema == build_result_schema()
    assert config.thinking_config.thinking_budget == 1234


def test_image_parts_precede_their_labels(image_variants):
    parts = build_parts(build_request("visual-comparison", "Hero banner", image_variants))
    assert len(parts) == 5  # (image + label) x 2 + prompt
    assert parts[0].inline_data is not None
    assert parts[1].text == "Variant A visual asset"
    assert parts[2].inline_data is not None
    assert parts[3].text == "Variant B visual asset"
    assert '"Hero banner"' in parts[4].text


@pytest.mark.asyncio
async def test_encoding_failure_aborts_before_network():
    variants = [
        Variant(kind="image", content="data:image/png;base64,AAAA"),
        Variant(kind="image", content="data:image/png;base64,"),
    ]
    client = make_genai_client(text="{}")
    analyzer = AnalysisClient(_settings(), client=client)

    with pytest.raises(EncodingError):
        await analyzer.analyze(build_request("visual-comparison", "", variants))
    client.aio.models.generate_content.assert_not_called()


@pytest.mark.asyncio
async def test_hand_built_invalid_request_is_rejected_before_encoding():
    request = AnalysisRequest(mode=AnalysisMode.TEXT, variants=[Variant(kind="text", content="Only one")])
    client = make_genai_client(text="{}")
    analyzer = AnalysisClient(_settings(), client=client)

    with patch("abjudge.agents.analysis_client.encode_variant") as mock_encode:
        with pytest.raises(VariantValidationError):
            await analyzer.analyze(request)
        mock_encode.assert_not_called()
    client.aio.models.generate_content.assert_not_called()


@pytest.mark.asyncio
async def test_hand_built_request_gets_positional_labels(text_variants):
    request = AnalysisRequest(mode=AnalysisMode.TEXT, variants=text_variants)
    client = make_genai_client(text=json.dumps(make_result_payload()))
    result = await AnalysisClient(_settings(), client=client).analyze(request)
    assert {d.label for d in result.variant_details} == {"A", "B"}


@pytest.mark.asyncio
async def test_server_overload_is_classified_and_not_retried(text_variants):
    error = genai_errors.ServerError(503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}})
    client = make_genai_client(side_effect=error)
    analyzer = AnalysisClient(_settings(), client=client)

    with pytest.raises(TransportError) as exc_info:
        await analyzer.analyze(build_request("text-comparison", "", text_variants))

    assert exc_info.value.failure is TransportFailure.OVERLOADED
    assert exc_info.value.__cause__ is error
    client.aio.models.generate_content.assert_awaited_once()


@pytest.mark.asyncio
async def test_connection_error_is_unknown_transport_failure(text_variants):
    client = make_genai_client(side_effect=httpx.ConnectError("connection refused"))
    analyzer = AnalysisClient(_settings(), client=client)

    with pytest.raises(TransportError) as exc_info:
        await analyzer.analyze(build_request("text-comparison", "", text_variants))
    assert exc_info.value.failure is TransportFailure.UNKNOWN


@pytest.mark.asyncio
async def test_unexpected_client_error_is_wrapped_as_unknown_transport_failure(text_variants):
    error = RuntimeError("client connection reset")
    client = make_genai_client(side_effect=error)
    analyzer = AnalysisClient(_settings(), client=client)

    with pytest.raises(TransportError) as exc_info:
        await analyzer.analyze(build_request("text-comparison", "", text_variants))

    assert exc_info.value.failure is TransportFailure.UNKNOWN
    assert exc_info.value.__cause__ is error
    client.aio.models.generate_content.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text,error",
    [
        ("", EmptyResponseError),
        (None, EmptyResponseError),
        ("Sure! Here is my analysis", MalformedResponseError),
        (json.dumps(make_result_payload(winner="Z")), SchemaViolationError),
    ],
)
async def test_bad_responses_are_classified(text_variants, text, error):
    client = make_genai_client(text=text)
    analyzer = AnalysisClient(_settings(), client=client)

    with pytest.raises(error):
        await analyzer.analyze(build_request("text-comparison", "", text_variants))


@pytest.mark.asyncio
async def test_each_call_starts_fresh(text_variants):
    client = make_genai_client(text=json.dumps(make_result_payload(winner="B")))
    analyzer = AnalysisClient(_settings(), client=client)
    request = build_request("text-comparison", "", text_variants)

    first = await analyzer.analyze(request)
    second = await analyzer.analyze(request)

    assert first == second
    assert first is not second
    assert client.aio.models.generate_content.await_count == 2


def test_builds_sdk_client_from_settings():
    with patch("abjudge.agents.analysis_client.genai.Client") as mock_client:
        AnalysisClient(_settings(request_timeout_ms=60_000))

    kwargs = mock_client.call_args.kwargs
    assert kwargs["api_key"] == "test-gemini-key"
    assert kwargs["http_options"].timeout == 60_000


def test_no_transport_timeout_unless_configured():
    with patch("abjudge.agents.analysis_client.genai.Client") as mock_client:
        AnalysisClient(_settings())
    assert mock_client.call_args.kwargs["http_options"] is None
