import asyncio
import json
import logging

from abjudge.agents.validator import validate_result
from abjudge.config import Settings
from abjudge.models.request import AnalysisRequest, validate_variants
from abjudge.models.response import AnalysisResult

logger = logging.getLogger(__name__)

# Fixed per-variant verdicts, assigned to submitted labels in order.
_VARIANT_VERDICTS = (
    {
        "score": 86,
        "pros": ["Clear value proposition above the fold", "Strong, high-contrast call to action"],
        "cons": ["Secondary message competes slightly with the headline"],
    },
    {
        "score": 74,
        "pros": ["Friendly, approachable tone"],
        "cons": ["Call to action lacks urgency", "Visual hierarchy is flat"],
    },
    {
        "score": 68,
        "pros": ["Distinctive color palette"],
        "cons": ["Dense copy raises cognitive load"],
    },
    {
        "score": 61,
        "pros": ["Concise wording"],
        "cons": ["Benefit is not stated explicitly", "Weak social proof"],
    },
)


def _offline_payload(labels: list[str]) -> dict:
    details = [
        {"label": label, **verdict}
        for label, verdict in zip(labels, _VARIANT_VERDICTS)
    ]
    return {
        "winner": labels[0],
        "winnerReason": "Offline demo result: the first variant is declared the winner.",
        "designReview": (
            "This is a fixed offline demonstration report generated without contacting "
            "the analysis service. Configure GEMINI_API_KEY to receive a real comparative "
            "review covering conversion-rate optimization, visual hierarchy, cognitive load "
            "and persuasion for each submitted variant. The scores and comments below are "
            "placeholders that only illustrate the shape of a complete report."
        ),
        "dimensions": {
            "visualAppeal": {"score": 78, "comment": "Clean layouts with room for a bolder focal point."},
            "copyPersuasion": {"score": 72, "comment": "Benefits are present but could lead with the outcome."},
            "conversionPotential": {"score": 75, "comment": "A single dominant call to action would lift clicks."},
        },
        "variantDetails": details,
        "optimizedSolution": {
            "content": "Get results in minutes. Start your free trial today.",
            "explanation": "Leads with the outcome, keeps one action and adds a low-risk offer.",
        },
    }


class OfflineFallback:
    """Credential-free stand-in for AnalysisClient.

    Returns the same fixed report for every call after a fixed delay. Only the
    submitted labels are taken from the request, so the result still satisfies
    the label-set invariant.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        variants = validate_variants(request.mode, request.variants)
        labels = [v.label for v in variants]
        logger.info("No service credential configured; returning offline result for %s", labels)
        await asyncio.sleep(self.settings.offline_delay_seconds)
        return validate_result(json.dumps(_offline_payload(labels)), labels)
