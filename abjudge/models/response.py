from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TIE = "Tie"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class DimensionScore(_WireModel):
    score: int = Field(ge=0, le=100)
    comment: str


class Dimensions(_WireModel):
    visual_appeal: DimensionScore
    copy_persuasion: DimensionScore
    conversion_potential: DimensionScore


class VariantAnalysis(_WireModel):
    label: str
    score: int = Field(ge=0, le=100)
    pros: list[str] = Field(min_length=1)
    cons: list[str] = Field(min_length=1)


class OptimizedSolution(_WireModel):
    content: str = Field(description="The synthesized improved copy or design description")
    explanation: str


class AnalysisResult(_WireModel):
    winner: str = Field(description="Label of the winning variant (e.g. 'A', 'B', 'C', 'D') or 'Tie'")
    winner_reason: str = Field(description="One-sentence summary of why the winner wins")
    design_review: str = Field(description="Detailed expert review, at least 100 words")
    dimensions: Dimensions
    variant_details: list[VariantAnalysis] = Field(description="One entry per submitted variant")
    optimized_solution: OptimizedSolution


def _inline_refs(node: Any, defs: dict[str, Any]) -> Any:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if ref is not None:
            siblings = {k: v for k, v in node.items() if k != "$ref"}
            return _inline_refs({**defs[ref.rsplit("/", 1)[-1]], **siblings}, defs)
        return {k: _inline_refs(v, defs) for k, v in node.items() if k != "$defs"}
    if isinstance(node, list):
        return [_inline_refs(item, defs) for item in node]
    return node


def build_result_schema() -> dict:
    """Render AnalysisResult as a self-contained JSON Schema for generation-time constraint.

    The same model validates the response afterwards, so the constraint sent to
    the model and the checks applied to its output cannot drift apart.
    """
    schema = AnalysisResult.model_json_schema(by_alias=True)
    return _inline_refs(schema, schema.get("$defs", {}))
