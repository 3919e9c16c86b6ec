import io

import numpy as np
from PIL import Image

KEY = "abc123DEF456ghi789JK"

# (color, share of rows), largest band first
BANDS = [
    ((200, 30, 40), 0.40),
    ((30, 60, 180), 0.25),
    ((40, 160, 70), 0.20),
    ((230, 200, 20), 0.10),
    ((120, 40, 140), 0.05),
]

# Channel values sit mid-way in their 5-bit histogram cells, so resampling
# noise of +-1 cannot split a flat image into several swatches
FLAT = (204, 44, 92)


def banded_image(width: int, height: int, bands=BANDS) -> Image.Image:
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    y = 0
    for i, (color, share) in enumerate(bands):
        end = height if i == len(bands) - 1 else y + int(round(height * share))
        arr[y:end] = color
        y = end
    return Image.fromarray(arr, "RGB")


def encode(image: Image.Image, fmt: str = "WEBP") -> bytes:
    buf = io.BytesIO()
    if fmt == "WEBP":
        image.save(buf, format=fmt, lossless=True)
    else:
        image.save(buf, format=fmt)
    return buf.getvalue()
