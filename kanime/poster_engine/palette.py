"""
Palette extraction by modified median cut (MMCQ, as popularised by color-thief).

Pixels are sampled, bucketed into a 5-bit-per-channel histogram, and the
color space is split box by box until enough swatches exist. Swatches are
ranked by how many sampled pixels fall into them.
"""

from typing import List, Tuple

import numpy as np
from PIL import Image

from ..errors import PaletteExtractionFailure

SIGBITS = 5
RSHIFT = 8 - SIGBITS
MAX_ITERATION = 1000
FRACT_BY_POPULATION = 0.75

# Rank of the accent swatch (0-based)
ACCENT_RANK = 2

RGB = Tuple[int, int, int]


class _Box:
    """Set of histogram cells plus their populations."""

    def __init__(self, cells: np.ndarray, counts: np.ndarray):
        self.cells = cells
        self.counts = counts
        self.lo = cells.min(axis=0)
        self.hi = cells.max(axis=0)

    @property
    def population(self) -> int:
        return int(self.counts.sum())

    @property
    def volume(self) -> int:
        return int(np.prod(self.hi.astype(np.int64) - self.lo + 1))

    def splittable(self) -> bool:
        return len(self.cells) > 1

    def color(self) -> RGB:
        mult = 1 << RSHIFT
        centers = (self.cells.astype(np.float64) + 0.5) * mult
        avg = (centers * self.counts[:, None]).sum(axis=0) / self.counts.sum()
        return tuple(int(v) for v in np.clip(avg, 0, 255))

    def split(self) -> Tuple["_Box", "_Box"]:
        """Cut along the widest channel at the population median."""
        dim = int(np.argmax(self.hi - self.lo))
        values = self.cells[:, dim]
        lo, hi = int(self.lo[dim]), int(self.hi[dim])

        # Population per channel value, lo..hi inclusive
        per_value = np.bincount(values - lo, weights=self.counts, minlength=hi - lo + 1)
        cumulative = np.cumsum(per_value)
        median = lo + int(np.searchsorted(cumulative, cumulative[-1] / 2, side="right"))
        median = min(median, hi)

        # Lean the cut toward the emptier side, as MMCQ does
        left, right = median - lo, hi - median
        if left <= right:
            cut = min(hi - 1, median + right // 2)
        else:
            cut = max(lo, median - 1 - left // 2)

        below = values <= cut
        return (_Box(self.cells[below], self.counts[below]),
                _Box(self.cells[~below], self.counts[~below]))


def _histogram(pixels: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    cells = pixels >> RSHIFT
    index = (cells[:, 0].astype(np.int32) << (2 * SIGBITS)) \
        | (cells[:, 1].astype(np.int32) << SIGBITS) \
        | cells[:, 2].astype(np.int32)
    unique, counts = np.unique(index, return_counts=True)
    mask = (1 << SIGBITS) - 1
    cells = np.stack([
        (unique >> (2 * SIGBITS)) & mask,
        (unique >> SIGBITS) & mask,
        unique & mask,
    ], axis=1)
    return cells, counts


def _split_until(boxes: List[_Box], target: int, key, budget: List[int]) -> None:
    while len(boxes) < target and budget[0] > 0:
        budget[0] -= 1
        candidates = [b for b in boxes if b.splittable()]
        if not candidates:
            return
        box = max(candidates, key=key)
        boxes.remove(box)
        boxes.extend(box.split())


def quantize(pixels: np.ndarray, max_colors: int) -> List[RGB]:
    """Median-cut an (N, 3) uint8 pixel array into at most `max_colors` swatches."""
    if not 2 <= max_colors <= 256:
        raise ValueError(f"max_colors must be within 2..256, got {max_colors}")
    if len(pixels) == 0:
        raise PaletteExtractionFailure("No usable pixels to quantize")

    cells, counts = _histogram(pixels)
    boxes = [_Box(cells, counts)]
    budget = [MAX_ITERATION]

    # First by population, then by population x volume to favour large sparse boxes
    _split_until(boxes, int(np.ceil(FRACT_BY_POPULATION * max_colors)), lambda b: b.population, budget)
    _split_until(boxes, max_colors, lambda b: b.population * b.volume, budget)

    ranked = sorted(boxes, key=lambda b: (-b.population, b.color()))
    return [b.color() for b in ranked]


def get_palette(image: Image.Image, max_colors: int = 5, quality: int = 10) -> List[RGB]:
    """
    Extract a palette from an RGB image, most prominent swatch first.

    Every `quality`-th pixel is sampled; near-white pixels are ignored.
    """
    if quality < 1:
        raise ValueError("quality must be >= 1")
    arr = np.asarray(image.convert("RGB"), dtype=np.uint8).reshape(-1, 3)[::quality]
    near_white = (arr > 250).all(axis=1)
    return quantize(arr[~near_white], max_colors)


def dominant_color(image: Image.Image, rank: int = ACCENT_RANK,
                   max_colors: int = 5, quality: int = 10) -> RGB:
    """Swatch at `rank` in the palette; fails if the palette is shorter."""
    palette = get_palette(image, max_colors=max_colors, quality=quality)
    if len(palette) <= rank:
        raise PaletteExtractionFailure(
            f"Palette has {len(palette)} swatch(es), need at least {rank + 1}"
        )
    return palette[rank]
