from kanime.catalog import CachedImage, SeriesSummary
from kanime.poster_engine.placeholder import FORMAT_CURRENT, FORMAT_LEGACY

RECORD = {
    "id": "64b7f0c2e13a4b0012345678",
    "titles": ["Tokyo Revengers", "Tokyo Ribenjazu"],
    "manga": {"author": "Ken Wakui", "volumes": 30, "chapters": 270, "releaseYear": 2017},
    "anime": {"studios": ["Liden Films"], "seasons": 1, "episodes": 24, "releaseYear": 2021},
    "poster": {"key": "abc123DEF456ghi789JK", "placeholder": "v0abcd", "placeholderFormat": 2},
}


def test_cached_image_round_trip():
    image = CachedImage("abc123DEF456ghi789JK", "v0abcd/1234")
    assert CachedImage.from_dict(image.to_dict()) == image


def test_unversioned_record_is_legacy():
    image = CachedImage.from_dict({"key": "k", "placeholder": "v0abcd"})
    assert image.placeholder_format == FORMAT_LEGACY


def test_absent_placeholder_omitted():
    assert CachedImage("k").to_dict() == {"key": "k", "placeholderFormat": FORMAT_CURRENT}


def test_summary_from_record():
    summary = SeriesSummary.from_record(RECORD)
    assert summary.title == "Tokyo Revengers"
    assert summary.release_year == 2021
    assert (summary.episodes, summary.seasons, summary.chapters, summary.volumes) == (24, 1, 270, 30)
    assert summary.poster.key == "abc123DEF456ghi789JK"


def test_summary_falls_back_to_manga_year():
    record = {**RECORD, "anime": {}}
    summary = SeriesSummary.from_record(record)
    assert summary.release_year == 2017
    assert summary.episodes == 0


def test_summary_tolerates_null_sections_and_counts():
    record = {**RECORD, "titles": [None], "anime": None,
              "manga": {"chapters": None, "volumes": 41, "releaseYear": 1989}}
    summary = SeriesSummary.from_record(record)
    assert summary.title == ""
    assert summary.release_year == 1989
    assert (summary.episodes, summary.seasons, summary.chapters, summary.volumes) == (0, 0, 0, 41)
