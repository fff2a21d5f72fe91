from functools import lru_cache

from loguru import logger

from abjudge.agents.analysis_client import AnalysisClient
from abjudge.agents.offline import OfflineFallback
from abjudge.config import Settings, settings
from abjudge.logging import analysis_scope
from abjudge.models.request import AnalysisMode, Variant, build_request
from abjudge.models.response import AnalysisResult


def select_analyzer(config: Settings) -> AnalysisClient | OfflineFallback:
    if not config.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; analyses use the offline fallback")
        return OfflineFallback(config)
    logger.info("Analyses use {model}", model=config.model_name)
    return AnalysisClient(config)


@lru_cache(maxsize=1)
def get_analyzer() -> AnalysisClient | OfflineFallback:
    """Process-wide analyzer, chosen once from the credential at first use."""
    return select_analyzer(settings)


def is_offline() -> bool:
    return isinstance(get_analyzer(), OfflineFallback)


async def analyze(
    mode: AnalysisMode | str,
    context: str | None,
    variants: list[Variant],
) -> AnalysisResult:
    """Compare 2-4 variants and return a validated AnalysisResult.

    Raises VariantValidationError before any encoding or network activity when
    the submission is invalid; any other AnalysisError comes from the call itself.
    """
    request = build_request(mode, context, variants)
    with analysis_scope(request.mode.value, len(request.variants)):
        return await get_analyzer().analyze(request)
