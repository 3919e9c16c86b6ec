#!/usr/bin/env python3
"""
Generate the presenter card for one catalog series.

Usage:
    python generate_presenter.py series.json
    python generate_presenter.py series.json --assets-dir assets --cache-dir data/cache

series.json is a catalog series document with at least `titles`, `anime`,
`manga` and `poster` ({"key": ..., "placeholder": ...}). The poster's
thumbnail must already exist in the cache.

Assets needed (see kanime/poster_engine/presenter.py):
  - assets/templates/AnimePresenter.png
  - assets/fonts/Poppins-Bold.ttf, Poppins-ExtraBold.ttf (Google Fonts)
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from kanime import config
from kanime.catalog import SeriesSummary
from kanime.errors import PresenterError
from kanime.poster_engine.derivatives import DerivativeStore
from kanime.poster_engine.presenter import export_presenter, load_presenter_assets


def main():
    parser = argparse.ArgumentParser(description="Generate presenter card for a series")
    parser.add_argument("record", type=str, help="Catalog series JSON file")
    parser.add_argument("--cache-dir", "-c", type=str, default=None,
                        help=f"Cache root (default: {config.CACHE_DIR})")
    parser.add_argument("--assets-dir", "-a", type=str, default=None,
                        help=f"Template and fonts (default: {config.ASSETS_DIR})")
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s: %(message)s")

    with open(args.record, "r", encoding="utf-8") as f:
        summary = SeriesSummary.from_record(json.load(f))

    store = DerivativeStore(Path(args.cache_dir) if args.cache_dir else config.CACHE_DIR)
    try:
        assets = load_presenter_assets(Path(args.assets_dir) if args.assets_dir else config.ASSETS_DIR)
        path = export_presenter(summary, store, assets, quality=config.PRESENTER_QUALITY)
    except PresenterError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"  Saved: {path}")


if __name__ == "__main__":
    main()
