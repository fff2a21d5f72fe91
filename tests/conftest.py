from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from abjudge.models.request import Variant
from abjudge.service import get_analyzer
from tests import TEST_API_KEY

# Minimal valid 1x1 PNG as base64
TINY_PNG = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
TINY_PNG_DATA_URL = f"data:image/png;base64,{TINY_PNG}"


def make_result_payload(labels: tuple[str, ...] = ("A", "B"), winner: str = "A") -> dict:
    """A complete, schema-valid model response for the given labels."""
    return {
        "winner": winner,
        "winnerReason": "Variant A states the benefit and the action in one line.",
        "designReview": "Variant A has a clear hierarchy; the others bury the call to action.",
        "dimensions": {
            "visualAppeal": {"score": 80, "comment": "Balanced layouts."},
            "copyPersuasion": {"score": 70, "comment": "Urgency is underused."},
            "conversionPotential": {"score": 75, "comment": "One strong CTA wins."},
        },
        "variantDetails": [
            {"label": label, "score": 90 - 10 * i, "pros": ["Clear CTA"], "cons": ["Small logo"]}
            for i, label in enumerate(labels)
        ],
        "optimizedSolution": {
            "content": "Buy now - limited offer ends tonight!",
            "explanation": "Combines A's directness with B's scarcity.",
        },
    }


def make_genai_client(text: str | None = None, side_effect: BaseException | None = None) -> MagicMock:
    """Stand-in for google.genai.Client whose async generate_content returns `text`."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(text=text),
        side_effect=side_effect,
    )
    return client


@pytest.fixture
def text_variants() -> list[Variant]:
    return [
        Variant(kind="text", content="Buy now!"),
        Variant(kind="text", content="Limited offer"),
    ]


@pytest.fixture
def image_variants() -> list[Variant]:
    return [
        Variant(label="A", kind="image", content=TINY_PNG_DATA_URL, media_type="image/png"),
        Variant(label="B", kind="image", content=TINY_PNG),
    ]


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch):
    """Run every test offline, instantly, in English, with auth enabled."""
    from abjudge.config import settings

    monkeypatch.setattr(settings, "api_key", TEST_API_KEY)
    monkeypatch.setattr(settings, "gemini_api_key", "")
    monkeypatch.setattr(settings, "output_language", "en")
    monkeypatch.setattr(settings, "offline_delay_seconds", 0)
    get_analyzer.cache_clear()
    yield
    get_analyzer.cache_clear()
