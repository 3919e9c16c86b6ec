import pytest
from PIL import Image, ImageFont

from kanime.poster_engine.derivatives import DerivativeStore
from kanime.poster_engine.presenter import (
    COUNT_FONT_SIZE, PRESENTER_H, PRESENTER_W, TITLE_SIZES, YEAR_FONT_SIZE, PresenterAssets,
)

from .images import banded_image, encode


@pytest.fixture
def store(tmp_path):
    return DerivativeStore(tmp_path / "cache")


@pytest.fixture
def poster_webp():
    return encode(banded_image(1200, 1800))


@pytest.fixture
def presenter_assets():
    # Pillow's bundled FreeType font stands in for Poppins
    return PresenterAssets(
        template=Image.new("RGB", (PRESENTER_W, PRESENTER_H), (24, 22, 38)),
        title_fonts={size: ImageFont.load_default(size=size) for size in TITLE_SIZES},
        year_font=ImageFont.load_default(size=YEAR_FONT_SIZE),
        count_font=ImageFont.load_default(size=COUNT_FONT_SIZE),
    )
