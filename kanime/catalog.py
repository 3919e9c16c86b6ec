"""
Catalog-facing records.

The catalog stores series documents in camelCase; only the pieces the
poster pipeline reads or writes are modelled here.
"""

from dataclasses import dataclass
from typing import Optional

from .poster_engine.placeholder import FORMAT_CURRENT, FORMAT_LEGACY


@dataclass
class CachedImage:
    """Poster reference persisted on the series record."""

    key: str
    placeholder: Optional[str] = None
    placeholder_format: int = FORMAT_CURRENT

    def to_dict(self) -> dict:
        data = {"key": self.key, "placeholderFormat": self.placeholder_format}
        if self.placeholder is not None:
            data["placeholder"] = self.placeholder
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CachedImage":
        # Records written before formats were versioned carry no field
        return cls(
            key=data["key"],
            placeholder=data.get("placeholder"),
            placeholder_format=int(data.get("placeholderFormat", FORMAT_LEGACY)),
        )


@dataclass
class SeriesSummary:
    """What the presenter card shows for one series."""

    title: str
    release_year: int
    episodes: int
    seasons: int
    chapters: int
    volumes: int
    poster: CachedImage

    @classmethod
    def from_record(cls, record: dict) -> "SeriesSummary":
        """Build from a catalog series document."""
        titles = record.get("titles") or [""]
        # Series without an anime or manga release store null sections
        anime = record.get("anime") or {}
        manga = record.get("manga") or {}
        return cls(
            title=titles[0] or "",
            release_year=int(anime.get("releaseYear") or manga.get("releaseYear") or 0),
            episodes=int(anime.get("episodes") or 0),
            seasons=int(anime.get("seasons") or 0),
            chapters=int(manga.get("chapters") or 0),
            volumes=int(manga.get("volumes") or 0),
            poster=CachedImage.from_dict(record["poster"]),
        )
