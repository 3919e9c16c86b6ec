"""
Error taxonomy for the poster pipeline.

Decode and fullres/thumbnail failures abort the derivative call. Presenter
failures are best effort. Palette failures only drop the accent suffix.
"""

from typing import Optional


class PosterError(Exception):
    """Base class for every pipeline failure."""


class UnsupportedFormat(PosterError):
    """Declared content type is not one of the accepted poster formats."""

    def __init__(self, content_type: Optional[str]):
        self.content_type = content_type
        super().__init__(f"Unsupported poster format: {content_type!r}")


class CorruptImage(PosterError):
    """Bytes could not be decoded as the declared format."""


class EncodeFailure(PosterError):
    """Pillow refused to encode a buffer."""


class IOFailure(PosterError):
    """Read or write failure at a named pipeline stage."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"[{stage}] {message}")


class PaletteExtractionFailure(PosterError):
    """Not enough distinct colors to pick the accent swatch."""


class PresenterError(PosterError):
    """Failure confined to presenter generation."""


class FontLoadFailure(PresenterError):
    """Font or template asset could not be loaded."""


class PresenterIOFailure(PresenterError):
    """Thumbnail missing or presenter could not be written."""
