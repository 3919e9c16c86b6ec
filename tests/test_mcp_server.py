import asyncio
import base64
import json

import pytest

import mcp_server
from kanime.poster_engine.cache_key import is_cache_key

from .images import KEY


@pytest.fixture
def server_store(store, monkeypatch):
    monkeypatch.setattr(mcp_server, "STORE", store)
    monkeypatch.setattr(mcp_server, "PRESENTER_ASSETS", None)
    return store


def handle(name, args):
    return asyncio.run(mcp_server._handle_tool(name, args))


def test_new_cache_key():
    assert is_cache_key(handle("new_cache_key", {}))


def test_export_poster_tool(server_store, poster_webp):
    result = json.loads(handle("export_poster", {
        "image_base64": base64.b64encode(poster_webp).decode(),
        "content_type": "image/webp",
        "cache_key": KEY,
        "series": {"titles": ["Tokyo Revengers"], "anime": {}, "manga": {}},
    }))
    assert result["poster"]["key"] == KEY
    # No assets loaded: presenter skipped, poster still exported
    assert result["presenter"] is None
    assert server_store.exists("310x468", KEY)


def test_errors_become_text(server_store, poster_webp):
    out = asyncio.run(mcp_server.call_tool("export_poster", {
        "image_base64": base64.b64encode(poster_webp).decode(),
        "content_type": "image/jpeg",
    }))
    assert out[0].text.startswith("ERROR:")
    assert handle("export_poster", {"image_base64": "***", "content_type": "image/png"}).startswith("ERROR")


def test_decode_placeholder_tool(server_store, poster_webp):
    exported = json.loads(handle("export_poster", {
        "image_base64": base64.b64encode(poster_webp).decode(),
        "content_type": "image/webp",
        "cache_key": KEY,
    }))
    info = json.loads(handle("decode_placeholder", {"placeholder": exported["poster"]["placeholder"]}))
    assert info["components"] == [4, 7]
    assert info["has_accent_suffix"] is True
    assert len(info["accent_color"]) == 3


def test_presenter_tool_without_assets(server_store):
    assert handle("export_presenter", {"series": {}}).startswith("ERROR")


NULL_SECTIONS = {"titles": ["Berserk"], "anime": None, "manga": {"chapters": None, "volumes": 41}}


def test_null_series_sections_keep_poster_export(server_store, poster_webp, presenter_assets, monkeypatch):
    monkeypatch.setattr(mcp_server, "PRESENTER_ASSETS", presenter_assets)
    out = asyncio.run(mcp_server.call_tool("export_poster", {
        "image_base64": base64.b64encode(poster_webp).decode(),
        "content_type": "image/webp",
        "cache_key": KEY,
        "series": NULL_SECTIONS,
    }))
    result = json.loads(out[0].text)
    assert result["poster"]["key"] == KEY
    assert result["presenter"] == str(server_store.path("pre", KEY))


def test_unreadable_series_skips_presenter_only(server_store, poster_webp):
    result = json.loads(handle("export_poster", {
        "image_base64": base64.b64encode(poster_webp).decode(),
        "content_type": "image/webp",
        "cache_key": KEY,
        "series": {"titles": ["Berserk"], "anime": {"episodes": "twenty-five"}},
    }))
    assert result["poster"]["key"] == KEY
    assert result["presenter"] is None
    assert server_store.exists("fullres", KEY) and server_store.exists("310x468", KEY)
