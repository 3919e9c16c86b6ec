"""
Cache keys name every derivative file of one catalog entry.

A key is drawn once when the entry is created and reused for every later
regeneration. Uniqueness rests on the keyspace (56^20) alone; nothing
checks existing keys.
"""

import re
import secrets

# No 0/O/o, 1/l/I
ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz"
KEY_LENGTH = 20

# Keys handed in by callers predate the alphabet; only require a safe file stem.
_SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def new_cache_key(length: int = KEY_LENGTH) -> str:
    """Draw a fresh random cache key."""
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def is_cache_key(value: str) -> bool:
    """True if `value` can name a derivative file without leaving its folder."""
    return isinstance(value, str) and _SAFE_KEY_RE.match(value) is not None
