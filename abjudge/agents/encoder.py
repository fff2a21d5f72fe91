import base64
import binascii
import logging

from google.genai import types

from abjudge.errors import EncodingError
from abjudge.models.request import Variant

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/png"


def strip_data_url(content: str) -> str:
    """Drop a ``data:<mime>;base64,`` header if present, leaving the raw payload."""
    content = content.strip()
    if content.startswith("data:") and "," in content:
        return content.split(",", 1)[1].strip()
    return content


def encode_variant(variant: Variant) -> list[types.Part]:
    """Turn one labelled variant into the ordered request parts for the model.

    Text variants become a single labelled text part. Image variants become an
    inline-data part followed by a short label part. Image bytes are never
    inspected; the MIME type is taken from the variant as given.
    """
    name = f"Variant {variant.label}"

    if variant.kind == "text":
        text = variant.content.strip()
        if not text:
            raise EncodingError(f"{name} has no copy to send")
        return [types.Part.from_text(text=f"{name} copy: {text}")]

    payload = strip_data_url(variant.content)
    if not payload:
        raise EncodingError(f"{name} has an empty image payload")
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise EncodingError(f"{name} image is not valid base64: {e}") from e

    mime_type = variant.media_type or DEFAULT_IMAGE_MIME
    logger.debug("Encoded %s: %d bytes (%s)", name, len(data), mime_type)
    return [
        types.Part.from_bytes(data=data, mime_type=mime_type),
        types.Part.from_text(text=f"{name} visual asset"),
    ]
