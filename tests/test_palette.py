import numpy as np
import pytest
from PIL import Image

from kanime.errors import PaletteExtractionFailure
from kanime.poster_engine.palette import dominant_color, get_palette, quantize

from .images import FLAT, banded_image

THREE_BANDS = [((200, 30, 40), 0.5), ((30, 60, 180), 0.3), ((40, 160, 70), 0.2)]


def close(a, b, tol=8):
    return all(abs(x - y) <= tol for x, y in zip(a, b))


def test_swatches_ranked_by_population():
    palette = get_palette(banded_image(100, 200, THREE_BANDS), quality=1)
    assert len(palette) == 3
    for swatch, (color, _) in zip(palette, THREE_BANDS):
        assert close(swatch, color)


def test_third_swatch_is_accent():
    assert close(dominant_color(banded_image(100, 200, THREE_BANDS), quality=1), (40, 160, 70))


def test_at_most_max_colors():
    rng = np.random.default_rng(7)
    noise = Image.fromarray(rng.integers(0, 250, (120, 80, 3), dtype=np.uint8), "RGB")
    assert len(get_palette(noise, max_colors=5)) == 5
    assert len(get_palette(noise, max_colors=10)) == 10


def test_deterministic():
    img = banded_image(310, 468)
    assert get_palette(img) == get_palette(img)


def test_single_color_fails():
    with pytest.raises(PaletteExtractionFailure):
        dominant_color(Image.new("RGB", (310, 468), FLAT))


def test_white_pixels_ignored():
    with pytest.raises(PaletteExtractionFailure):
        get_palette(Image.new("RGB", (50, 50), (255, 255, 255)))


def test_invalid_arguments():
    with pytest.raises(ValueError):
        quantize(np.zeros((4, 3), dtype=np.uint8), max_colors=1)
    with pytest.raises(ValueError):
        get_palette(banded_image(10, 10), quality=0)
