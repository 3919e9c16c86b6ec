"""
Perceptual Hash Encoder - blurhash placeholder plus accent color.

Wire format:

    <body>[/<accent>]

body    blurhash over a 4x7 DCT grid, always 4 + 2*4*7 = 60 characters
accent  24-bit RGB of the third palette swatch, 4 base83 characters

Two placeholder formats exist in stored records:

  FORMAT_LEGACY   no suffix means "use the body's average color as accent"
  FORMAT_CURRENT  no suffix means "no accent, use the brand color"

New placeholders are always FORMAT_CURRENT.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from ..errors import PaletteExtractionFailure
from . import base83
from .palette import RGB, dominant_color

logger = logging.getLogger(__name__)

COMPONENTS_X = 4
COMPONENTS_Y = 7

SEPARATOR = "/"
ACCENT_LENGTH = 4

FORMAT_LEGACY = 1
FORMAT_CURRENT = 2

# Fallback accent when a placeholder carries none
BRAND_ACCENT: RGB = (241, 143, 243)


def body_length(components_x: int = COMPONENTS_X, components_y: int = COMPONENTS_Y) -> int:
    return 4 + 2 * components_x * components_y


# ── sRGB helpers ──────────────────────────────────────────────────────

def _srgb_to_linear(values: np.ndarray) -> np.ndarray:
    v = values.astype(np.float64) / 255.0
    return np.where(v <= 0.04045, v / 12.92, ((v + 0.055) / 1.055) ** 2.4)


def _linear_to_srgb(value: float) -> int:
    v = max(0.0, min(1.0, value))
    if v <= 0.0031308:
        return int(v * 12.92 * 255 + 0.5)
    return int((1.055 * math.pow(v, 1 / 2.4) - 0.055) * 255 + 0.5)


def _sign_pow(value: float, exp: float) -> float:
    return math.copysign(math.pow(abs(value), exp), value)


# ── Encoding ──────────────────────────────────────────────────────────

def _dct_factors(image: Image.Image, components_x: int, components_y: int) -> np.ndarray:
    """Project the image onto the cosine basis. Returns (cy*cx, 3), y-major."""
    lin = _srgb_to_linear(np.asarray(image.convert("RGB")))
    h, w = lin.shape[:2]
    cos_x = np.cos(np.pi * np.outer(np.arange(components_x), np.arange(w)) / w)
    cos_y = np.cos(np.pi * np.outer(np.arange(components_y), np.arange(h)) / h)

    factors = np.einsum("jy,ix,yxc->jic", cos_y, cos_x, lin) / (w * h)
    factors[1:, :, :] *= 2
    factors[0, 1:, :] *= 2
    return factors.reshape(-1, 3)


def encode_blurhash(image: Image.Image, components_x: int = COMPONENTS_X,
                    components_y: int = COMPONENTS_Y) -> str:
    """Blurhash body; its length depends on the grid only."""
    if not (1 <= components_x <= 9 and 1 <= components_y <= 9):
        raise ValueError("Blurhash components must be within 1..9")

    factors = _dct_factors(image, components_x, components_y)
    dc, ac = factors[0], factors[1:]

    parts = [base83.encode((components_x - 1) + (components_y - 1) * 9, 1)]

    if len(ac):
        actual_max = float(np.abs(ac).max())
        quantised_max = int(max(0, min(82, math.floor(actual_max * 166 - 0.5))))
        max_value = (quantised_max + 1) / 166
        parts.append(base83.encode(quantised_max, 1))
    else:
        max_value = 1.0
        parts.append(base83.encode(0, 1))

    r, g, b = (_linear_to_srgb(float(c)) for c in dc)
    parts.append(base83.encode((r << 16) + (g << 8) + b, 4))

    for color in ac:
        qr, qg, qb = (
            int(max(0, min(18, math.floor(_sign_pow(float(c) / max_value, 0.5) * 9 + 9.5))))
            for c in color
        )
        parts.append(base83.encode(qr * 19 * 19 + qg * 19 + qb, 2))

    return "".join(parts)


def encode_accent(color: RGB) -> str:
    r, g, b = color
    return base83.encode((r << 16) | (g << 8) | b, ACCENT_LENGTH)


def decode_accent(text: str) -> RGB:
    value = base83.decode(text[:ACCENT_LENGTH])
    if len(text) < ACCENT_LENGTH or value > 0xFFFFFF:
        raise ValueError(f"Invalid accent color: {text!r}")
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def compute_placeholder(image: Image.Image) -> str:
    """
    Placeholder for an already resized poster.

    Palette failure is not an error here: the accent suffix is simply left off.
    """
    placeholder = encode_blurhash(image)
    try:
        accent = dominant_color(image)
    except PaletteExtractionFailure as e:
        logger.info("No accent color for placeholder: %s", e)
        return placeholder
    return f"{placeholder}{SEPARATOR}{encode_accent(accent)}"


# ── Decoding ──────────────────────────────────────────────────────────

def split_placeholder(placeholder: str) -> Tuple[str, Optional[str]]:
    body, sep, suffix = placeholder.partition(SEPARATOR)
    return body, (suffix if sep else None)


def placeholder_components(placeholder: str) -> Tuple[int, int]:
    """Grid size read back from the body's size flag."""
    size_flag = base83.decode(placeholder[:1])
    return size_flag % 9 + 1, size_flag // 9 + 1


def is_valid_placeholder(placeholder: str) -> bool:
    try:
        body, suffix = split_placeholder(placeholder)
        cx, cy = placeholder_components(body)
        base83.decode(body)
        if len(body) != body_length(cx, cy):
            return False
        if suffix is not None:
            decode_accent(suffix)
            return len(suffix) == ACCENT_LENGTH
        return True
    except ValueError:
        return False


def average_color(placeholder: str) -> RGB:
    """DC term of the body: the image's average color."""
    return decode_accent(placeholder[2:6])


def accent_color(placeholder: Optional[str], fmt: int = FORMAT_CURRENT) -> Optional[RGB]:
    """
    Accent stored in a placeholder, or None.

    Legacy placeholders without a suffix fall back to the body's average color.
    """
    if not placeholder:
        return None
    body, suffix = split_placeholder(placeholder)
    try:
        if suffix is not None:
            return decode_accent(suffix)
        if fmt == FORMAT_LEGACY:
            return average_color(body)
    except ValueError:
        logger.warning("Malformed placeholder %r", placeholder)
    return None


def accent_or_brand(placeholder: Optional[str], fmt: int = FORMAT_CURRENT) -> RGB:
    return accent_color(placeholder, fmt) or BRAND_ACCENT
