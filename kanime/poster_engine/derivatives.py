"""
Derivative Writer - persists the full-resolution poster and its thumbnail.

The resize is destructive, so the buffer moves through explicit stages:

    DecodedPoster -> FullresPersisted -> ResizedPoster -> ThumbnailPersisted

Each stage only exposes the next step, which keeps "fullres is written
before the buffer is resized" out of the caller's hands.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from ..errors import IOFailure, PosterError
from .cache_key import is_cache_key
from .codec import WEBP

logger = logging.getLogger(__name__)

FULLRES = "fullres"
THUMBNAIL = "310x468"
PRESENTER = "pre"
KINDS = (FULLRES, THUMBNAIL, PRESENTER)

THUMB_W = 310
THUMB_H = 468


class DerivativeStore:
    """Keyed file layout under one cache root: {root}/{kind}/{key}.webp"""

    def __init__(self, root: Path):
        self.root = Path(root)

    def path(self, kind: str, key: str) -> Path:
        if kind not in KINDS:
            raise ValueError(f"Unknown derivative kind: {kind}")
        if not is_cache_key(key):
            raise ValueError(f"Invalid cache key: {key!r}")
        return self.root / kind / f"{key}.webp"

    def exists(self, kind: str, key: str) -> bool:
        return self.path(kind, key).is_file()

    def write(self, kind: str, key: str, data: bytes) -> Path:
        """Write through a temp sibling + rename so readers never see half a file."""
        dest = self.path(kind, key)
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=dest.parent, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, dest)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        return dest

    def read(self, kind: str, key: str) -> bytes:
        return self.path(kind, key).read_bytes()

    def discard(self, kind: str, key: str) -> bool:
        """Best-effort removal. Returns True if a file was removed."""
        try:
            self.path(kind, key).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Could not remove %s/%s: %s", kind, key, e)
            return False


def _persist(store: DerivativeStore, kind: str, stage: str, key: str,
             image: Image.Image, lossless: bool, quality: int) -> Path:
    try:
        data = WEBP.encode(image, lossless=lossless, quality=quality)
        return store.write(kind, key, data)
    except (PosterError, OSError) as e:
        raise IOFailure(stage, f"Unable to save {kind}/{key}.webp: {e}") from e


@dataclass
class DecodedPoster:
    image: Image.Image

    def persist_fullres(self, store: DerivativeStore, key: str) -> "FullresPersisted":
        path = _persist(store, FULLRES, "fullres", key, self.image, lossless=True, quality=100)
        return FullresPersisted(self.image, path)


@dataclass
class FullresPersisted:
    image: Image.Image
    fullres_path: Path

    def resize(self) -> "ResizedPoster":
        # Aspect ratio is not preserved
        resized = self.image.resize((THUMB_W, THUMB_H), Image.Resampling.LANCZOS)
        return ResizedPoster(resized, self.fullres_path)


@dataclass
class ResizedPoster:
    image: Image.Image
    fullres_path: Path

    def persist_thumbnail(self, store: DerivativeStore, key: str,
                          quality: int = 80) -> "ThumbnailPersisted":
        path = _persist(store, THUMBNAIL, "thumbnail", key, self.image, lossless=False, quality=quality)
        return ThumbnailPersisted(self.image, self.fullres_path, path)


@dataclass
class ThumbnailPersisted:
    image: Image.Image
    fullres_path: Path
    thumbnail_path: Path
