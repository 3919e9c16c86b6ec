#!/usr/bin/env python3
"""
Generate the derivative set for one poster.

Usage:
    python generate_poster.py poster.webp
    python generate_poster.py poster.png --key Xk3f...
    python generate_poster.py upload.bin --content-type image/webp

Writes fullres/, 310x468/ under KANIME_CACHE_DIR (or --cache-dir) and
prints the CachedImage record as JSON.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from kanime import config
from kanime.errors import PosterError
from kanime.poster_engine.derivatives import DerivativeStore
from kanime.poster_generator import export_poster_file

CONTENT_TYPES = {".webp": "image/webp", ".png": "image/png"}


def main():
    parser = argparse.ArgumentParser(description="Generate poster derivatives and placeholder")
    parser.add_argument("image", type=str, help="Uploaded poster file")
    parser.add_argument("--key", "-k", type=str, default=None,
                        help="Existing cache key (default: draw a new one)")
    parser.add_argument("--content-type", "-t", type=str, default=None,
                        help="Declared content type (default: from file extension)")
    parser.add_argument("--cache-dir", "-c", type=str, default=None,
                        help=f"Cache root (default: {config.CACHE_DIR})")
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s: %(message)s")

    image_path = Path(args.image)
    content_type = args.content_type or CONTENT_TYPES.get(image_path.suffix.lower())
    store = DerivativeStore(Path(args.cache_dir) if args.cache_dir else config.CACHE_DIR)

    try:
        cached = export_poster_file(image_path, content_type, store, args.key,
                                    thumbnail_quality=config.THUMBNAIL_QUALITY)
    except PosterError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(cached.to_dict(), indent=2))


if __name__ == "__main__":
    main()
