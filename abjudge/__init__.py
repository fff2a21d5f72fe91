"""Comparative evaluation of 2-4 creative variants by a multimodal model."""

__version__ = "0.1.0"

from abjudge.service import analyze

__all__ = ["analyze", "__version__"]
