"""
Runtime settings, read once from the environment (and a .env file).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent.parent

load_dotenv(BASE_DIR / ".env")

# Derivative cache root (fullres/, 310x468/, pre/ live under it)
CACHE_DIR = Path(os.getenv("KANIME_CACHE_DIR", str(BASE_DIR / "data" / "cache")))

# Template and fonts for the presenter card
ASSETS_DIR = Path(os.getenv("KANIME_ASSETS_DIR", str(BASE_DIR / "assets")))

THUMBNAIL_QUALITY = int(os.getenv("KANIME_THUMBNAIL_QUALITY", "80"))
PRESENTER_QUALITY = int(os.getenv("KANIME_PRESENTER_QUALITY", "85"))

# Bounded pool for CPU-bound image work
WORKERS = max(1, int(os.getenv("KANIME_WORKERS", "2")))

LOG_LEVEL = os.getenv("KANIME_LOG_LEVEL", "INFO").upper()
