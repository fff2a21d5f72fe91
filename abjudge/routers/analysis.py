from fastapi import APIRouter
from loguru import logger

from abjudge.models.request import AnalysisMode, AnalysisRequest
from abjudge.models.response import AnalysisResult
from abjudge.service import analyze

router = APIRouter()


@router.get("/api/modes")
async def get_modes() -> list[dict[str, str]]:
    """Return the supported comparison modes and the variant kind each expects."""
    return [{"mode": m.value, "variantKind": m.variant_kind} for m in AnalysisMode]


@router.post("/api/analyze", response_model=AnalysisResult)
async def analyze_variants(request: AnalysisRequest) -> AnalysisResult:
    logger.info(
        "Analysis request: {mode}, {count} variants, context={has_context}",
        mode=request.mode.value,
        count=len(request.variants),
        has_context=bool(request.context.strip()),
    )
    return await analyze(request.mode, request.context, request.variants)
