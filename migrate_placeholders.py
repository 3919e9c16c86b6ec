#!/usr/bin/env python3
"""
One-time migration of legacy placeholders to the current format.

Usage:
    python migrate_placeholders.py records.json
    python migrate_placeholders.py records.json --dry-run
    python migrate_placeholders.py records.json --output migrated.json

records.json holds a list of catalog series documents (or bare poster
records). Each `poster` without `placeholderFormat` is legacy: its accent
used to be read from the placeholder body. Migrated records carry an
explicit accent suffix (or none) and `placeholderFormat: 2`.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from kanime import config
from kanime.catalog import CachedImage
from kanime.errors import PosterError
from kanime.poster_engine.derivatives import DerivativeStore
from kanime.poster_generator import migrate_placeholder


def migrate_records(records: list, store: DerivativeStore):
    """Migrate every poster record in place. Returns (changed, failed)."""
    changed = failed = 0
    for record in records:
        holder = record if "poster" in record else {"poster": record}
        try:
            before = CachedImage.from_dict(holder["poster"])
        except (KeyError, TypeError, ValueError) as e:
            print(f"  ERROR: unreadable poster record {holder['poster']!r}: {e!r}")
            failed += 1
            continue
        try:
            after = migrate_placeholder(before, store)
        except (PosterError, ValueError) as e:
            print(f"  ERROR: {before.key}: {e}")
            failed += 1
            continue
        if after != before:
            changed += 1
            print(f"  {before.key}: {before.placeholder} -> {after.placeholder}")
            if "poster" in record:
                record["poster"] = after.to_dict()
            else:
                record.clear()
                record.update(after.to_dict())
    return changed, failed


def main():
    parser = argparse.ArgumentParser(description="Migrate legacy poster placeholders")
    parser.add_argument("records", type=str, help="JSON list of series or poster records")
    parser.add_argument("--cache-dir", "-c", type=str, default=None,
                        help=f"Cache root (default: {config.CACHE_DIR})")
    parser.add_argument("--output", "-o", type=str, default=None,
                        help="Write migrated records here (default: in place)")
    parser.add_argument("--dry-run", action="store_true", help="Report changes only")
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s: %(message)s")

    records_path = Path(args.records)
    with open(records_path, "r", encoding="utf-8") as f:
        records = json.load(f)

    store = DerivativeStore(Path(args.cache_dir) if args.cache_dir else config.CACHE_DIR)
    changed, failed = migrate_records(records, store)
    print(f"  Migrated {changed} of {len(records)} record(s), {failed} failed")

    if not args.dry_run:
        out_path = Path(args.output) if args.output else records_path
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False, indent=2)
        print(f"  Saved: {out_path}")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
