"""
Codec Adapter - raster bytes to and from RGB Pillow images.

Only WebP and PNG posters are accepted. The content type is checked before
a single byte is decoded.
"""

from io import BytesIO
from typing import Dict, Optional

from PIL import Image, UnidentifiedImageError

from ..errors import CorruptImage, EncodeFailure, UnsupportedFormat


class Codec:
    """Decode/encode capability for one raster format."""

    content_type = ""
    pil_format = ""

    def decode(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(BytesIO(data))
            detected = img.format
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError,
                EOFError, ValueError) as e:
            raise CorruptImage(f"Unable to decode {self.content_type} poster: {e}") from e
        if detected != self.pil_format:
            raise CorruptImage(
                f"Declared {self.content_type} but bytes decode as {detected or 'unknown'}"
            )
        if img.mode != "RGB":
            img = img.convert("RGB")
        return img

    def encode(self, image: Image.Image, lossless: bool = False,
               quality: Optional[int] = None) -> bytes:
        buf = BytesIO()
        try:
            image.save(buf, format=self.pil_format, **self._save_params(lossless, quality))
        except (OSError, ValueError, KeyError) as e:
            raise EncodeFailure(f"Unable to encode {self.pil_format}: {e}") from e
        return buf.getvalue()

    def _save_params(self, lossless: bool, quality: Optional[int]) -> dict:
        return {}


class WebPCodec(Codec):
    content_type = "image/webp"
    pil_format = "WEBP"

    def _save_params(self, lossless: bool, quality: Optional[int]) -> dict:
        if lossless:
            return {"lossless": True, "quality": 100, "method": 4}
        return {"quality": quality if quality is not None else 80, "method": 4}


class PngCodec(Codec):
    content_type = "image/png"
    pil_format = "PNG"

    def _save_params(self, lossless: bool, quality: Optional[int]) -> dict:
        # PNG is always lossless; quality has no meaning here
        return {"optimize": True}


WEBP = WebPCodec()
PNG = PngCodec()

CODECS: Dict[str, Codec] = {c.content_type: c for c in (WEBP, PNG)}


def get_codec(content_type: Optional[str]) -> Codec:
    """Resolve a declared content type, e.g. 'image/webp; q=1'."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    codec = CODECS.get(mime)
    if codec is None:
        raise UnsupportedFormat(content_type)
    return codec


def decode(data: bytes, content_type: Optional[str]) -> Image.Image:
    """Decode uploaded bytes into an RGB image."""
    return get_codec(content_type).decode(data)
