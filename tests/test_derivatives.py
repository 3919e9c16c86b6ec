import pytest
from PIL import Image

from kanime.errors import IOFailure
from kanime.poster_engine.derivatives import (
    FULLRES, PRESENTER, THUMB_H, THUMB_W, THUMBNAIL, DecodedPoster, DerivativeStore,
)

from .images import KEY, banded_image


def test_paths_follow_cache_layout(store):
    assert store.path(FULLRES, KEY) == store.root / "fullres" / f"{KEY}.webp"
    assert store.path(THUMBNAIL, KEY) == store.root / "310x468" / f"{KEY}.webp"
    assert store.path(PRESENTER, KEY) == store.root / "pre" / f"{KEY}.webp"


def test_path_rejects_unknown_kind_and_unsafe_key(store):
    with pytest.raises(ValueError):
        store.path("originals", KEY)
    with pytest.raises(ValueError):
        store.path(FULLRES, "../escape")


def test_write_leaves_no_temp_files(store):
    store.write(THUMBNAIL, KEY, b"first")
    store.write(THUMBNAIL, KEY, b"second")
    assert store.read(THUMBNAIL, KEY) == b"second"
    assert [p.name for p in (store.root / THUMBNAIL).iterdir()] == [f"{KEY}.webp"]


def test_discard_is_best_effort(store):
    assert store.discard(FULLRES, KEY) is False
    store.write(FULLRES, KEY, b"x")
    assert store.discard(FULLRES, KEY) is True
    assert not store.exists(FULLRES, KEY)


@pytest.mark.parametrize("size", [(1200, 1800), (2000, 500), (90, 90)])
def test_stage_sequence(store, size):
    src = banded_image(*size)
    fullres = DecodedPoster(src).persist_fullres(store, KEY)
    with Image.open(fullres.fullres_path) as img:
        assert img.size == size

    thumb = fullres.resize().persist_thumbnail(store, KEY)
    assert thumb.image.size == (THUMB_W, THUMB_H)
    with Image.open(thumb.thumbnail_path) as img:
        assert img.size == (THUMB_W, THUMB_H)
    # The source buffer is untouched by the resize
    assert src.size == size


def test_fullres_failure_is_tagged(tmp_path):
    blocker = tmp_path / "cache"
    blocker.write_text("a file where the cache folder should be")
    with pytest.raises(IOFailure) as exc:
        DecodedPoster(banded_image(40, 60)).persist_fullres(DerivativeStore(blocker), KEY)
    assert exc.value.stage == "fullres"
