import re
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from abjudge.errors import VariantValidationError

LABELS = ("A", "B", "C", "D")
MIN_VARIANTS = 2
MAX_VARIANTS = 4
_IMAGE_MIME_RE = re.compile(r"image/[a-z0-9][a-z0-9.+-]*")


class AnalysisMode(str, Enum):
    TEXT = "text-comparison"
    VISUAL = "visual-comparison"

    @property
    def variant_kind(self) -> Literal["text", "image"]:
        return "text" if self is AnalysisMode.TEXT else "image"


class Variant(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    label: str | None = None
    kind: Literal["text", "image"]
    content: str
    media_type: str | None = None


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    mode: AnalysisMode
    context: str = ""
    variants: list[Variant]

    @property
    def labels(self) -> list[str]:
        return [v.label for v in self.variants]


def _is_image_mime(media_type: str) -> bool:
    return _IMAGE_MIME_RE.fullmatch(media_type.strip().lower()) is not None


def validate_variants(mode: AnalysisMode, variants: list[Variant]) -> list[Variant]:
    """Check submission rules and return the variants with labels assigned.

    Variants without a label get the first letter of "A".."D" that no
    explicit label has taken. Raises VariantValidationError before anything
    is encoded or sent.
    """
    count = len(variants)
    if not MIN_VARIANTS <= count <= MAX_VARIANTS:
        raise VariantValidationError(
            f"Expected {MIN_VARIANTS}-{MAX_VARIANTS} variants, got {count}"
        )

    explicit = [v.label for v in variants if v.label]
    free_labels = iter(label for label in LABELS if label not in explicit)

    labelled: list[Variant] = []
    for variant in variants:
        label = variant.label or next(free_labels)
        if not variant.content.strip():
            raise VariantValidationError(f"Variant {label} has no content")
        if variant.kind != mode.variant_kind:
            raise VariantValidationError(
                f"Variant {label} is {variant.kind!r} but mode {mode.value!r} "
                f"expects {mode.variant_kind!r}"
            )
        if variant.kind == "image" and variant.media_type and not _is_image_mime(variant.media_type):
            raise VariantValidationError(
                f"Variant {label} has non-image media type {variant.media_type!r}"
            )
        labelled.append(variant if variant.label else variant.model_copy(update={"label": label}))

    labels = [v.label for v in labelled]
    if len(set(labels)) != len(labels):
        raise VariantValidationError(f"Variant labels must be unique, got {labels}")
    return labelled


def build_request(mode: AnalysisMode | str, context: str | None, variants: list[Variant]) -> AnalysisRequest:
    """Validate raw caller input into an AnalysisRequest."""
    try:
        mode = AnalysisMode(mode)
    except ValueError:
        raise VariantValidationError(f"Unknown analysis mode: {mode!r}") from None
    return AnalysisRequest(
        mode=mode,
        context=(context or "").strip(),
        variants=validate_variants(mode, variants),
    )
