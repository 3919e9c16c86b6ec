"""
Poster Generator - turns one uploaded poster into its derivative set.

    bytes --decode--> fullres/{key}.webp --resize--> 310x468/{key}.webp
                                                     `--> placeholder

The presenter card is generated separately (see poster_engine.presenter)
once the thumbnail exists.

Calls for different keys never touch the same files. Calls for the same
key are not serialised here: last writer wins per file.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from .catalog import CachedImage
from .errors import IOFailure
from .poster_engine.cache_key import is_cache_key, new_cache_key
from .poster_engine.codec import WEBP, decode
from .poster_engine.derivatives import FULLRES, THUMBNAIL, DecodedPoster, DerivativeStore
from .poster_engine.placeholder import (
    FORMAT_CURRENT, SEPARATOR, accent_color, compute_placeholder, encode_accent,
    split_placeholder,
)

logger = logging.getLogger(__name__)


def export_poster(data: bytes, content_type: Optional[str], store: DerivativeStore,
                  cache_key: Optional[str] = None, thumbnail_quality: int = 80) -> CachedImage:
    """
    Write fullres + thumbnail for an uploaded poster and compute its placeholder.

    Pass the entity's existing cache_key when regenerating; a new one is
    drawn otherwise. Raises UnsupportedFormat, CorruptImage or IOFailure.
    """
    t = time.perf_counter()
    key = cache_key or new_cache_key()
    if not is_cache_key(key):
        raise ValueError(f"Invalid cache key: {key!r}")

    poster = DecodedPoster(decode(data, content_type))
    fullres = poster.persist_fullres(store, key)
    try:
        thumbnail = fullres.resize().persist_thumbnail(store, key, quality=thumbnail_quality)
    except IOFailure:
        # Drop the orphaned fullres
        store.discard(FULLRES, key)
        raise

    placeholder = compute_placeholder(thumbnail.image)
    logger.info("Successfully generated poster images in %.3fs", time.perf_counter() - t)
    return CachedImage(key=key, placeholder=placeholder, placeholder_format=FORMAT_CURRENT)


def export_poster_file(path: Path, content_type: Optional[str], store: DerivativeStore,
                       cache_key: Optional[str] = None, thumbnail_quality: int = 80) -> CachedImage:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise IOFailure("upload", f"Unable to open uploaded file: {e}") from e
    return export_poster(data, content_type, store, cache_key, thumbnail_quality)


def migrate_placeholder(image: CachedImage, store: DerivativeStore) -> CachedImage:
    """
    Rewrite a legacy-format placeholder in the current format.

    The placeholder is recomputed from the stored thumbnail when there is
    one. Otherwise the accent legacy readers showed (the body's average
    color) is pinned as an explicit suffix.
    """
    if image.placeholder_format == FORMAT_CURRENT:
        return image

    if store.exists(THUMBNAIL, image.key):
        thumbnail = WEBP.decode(store.read(THUMBNAIL, image.key))
        return CachedImage(image.key, compute_placeholder(thumbnail), FORMAT_CURRENT)

    if not image.placeholder:
        return CachedImage(image.key, None, FORMAT_CURRENT)

    body, suffix = split_placeholder(image.placeholder)
    if suffix is not None:
        return CachedImage(image.key, image.placeholder, FORMAT_CURRENT)

    accent = accent_color(image.placeholder, image.placeholder_format)
    if accent is None:
        logger.warning("Unreadable legacy placeholder for %s, keeping body only", image.key)
        return CachedImage(image.key, body, FORMAT_CURRENT)
    return CachedImage(image.key, f"{body}{SEPARATOR}{encode_accent(accent)}", FORMAT_CURRENT)
