import pytest
from PIL import Image

from kanime.errors import CorruptImage, UnsupportedFormat
from kanime.poster_engine.codec import PNG, WEBP, decode, get_codec

from .images import banded_image, encode


def test_jpeg_rejected_before_decode():
    # Not even image bytes: the content type alone must reject it
    with pytest.raises(UnsupportedFormat):
        decode(b"definitely not a jpeg", "image/jpeg")


@pytest.mark.parametrize("content_type", [None, "", "image/gif", "application/octet-stream"])
def test_other_content_types_rejected(content_type):
    with pytest.raises(UnsupportedFormat):
        get_codec(content_type)


def test_content_type_parameters_and_case_ignored():
    assert get_codec("Image/WebP; charset=binary") is WEBP
    assert get_codec("image/png") is PNG


def test_corrupt_bytes():
    with pytest.raises(CorruptImage):
        decode(b"RIFF\x00\x00\x00\x00WEBPgarbage", "image/webp")


def test_declared_format_must_match_bytes():
    png = encode(banded_image(40, 60), "PNG")
    with pytest.raises(CorruptImage):
        decode(png, "image/webp")


def test_png_with_alpha_decodes_to_rgb():
    rgba = Image.new("RGBA", (30, 20), (10, 20, 30, 128))
    img = decode(encode(rgba, "PNG"), "image/png")
    assert img.mode == "RGB"
    assert img.size == (30, 20)


def test_lossless_webp_keeps_pixels():
    src = banded_image(64, 96)
    out = WEBP.decode(WEBP.encode(src, lossless=True))
    assert list(out.getdata()) == list(src.getdata())


def test_oversized_image_is_corrupt(monkeypatch):
    png = encode(banded_image(100, 100), "PNG")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    with pytest.raises(CorruptImage):
        decode(png, "image/png")
