#!/usr/bin/env python3
"""
Kanime Posters - MCP Server
===========================
Model Context Protocol server exposing the poster pipeline to the catalog
backend and to assistants.

Tools:
  - export_poster: Decode an upload, write fullres + thumbnail, return CachedImage
  - export_presenter: Compose the presenter card for a catalog series
  - new_cache_key: Draw a fresh cache key for a new series
  - decode_placeholder: Inspect a placeholder (grid, average color, accent)

Image work is CPU bound and runs in a bounded thread pool so one upload
cannot stall other requests. Logs go to stderr; stdout is the protocol.

Run: python mcp_server.py
"""

import asyncio
import base64
import binascii
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from kanime import config
from kanime.catalog import CachedImage, SeriesSummary
from kanime.errors import PresenterError
from kanime.poster_engine.cache_key import new_cache_key
from kanime.poster_engine.derivatives import DerivativeStore
from kanime.poster_engine.placeholder import (
    FORMAT_CURRENT, accent_color, average_color, is_valid_placeholder,
    placeholder_components, split_placeholder,
)
from kanime.poster_engine.presenter import (
    PresenterAssets, export_presenter, load_presenter_assets, try_export_presenter,
)
from kanime.poster_generator import export_poster

logger = logging.getLogger("kanime.mcp")

STORE = DerivativeStore(config.CACHE_DIR)
EXECUTOR = ThreadPoolExecutor(max_workers=config.WORKERS, thread_name_prefix="poster")

# Loaded once in main(); None if the template or fonts are missing
PRESENTER_ASSETS: Optional[PresenterAssets] = None


async def run_blocking(func, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(EXECUTOR, partial(func, *args, **kwargs))


def presenter_best_effort(series: dict, cached: CachedImage) -> Optional[str]:
    """Regenerate the presenter after a poster export; failures only log."""
    try:
        summary = SeriesSummary.from_record({**series, "poster": cached.to_dict()})
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error("Unreadable series record for presenter %s: %s", cached.key, e)
        return None
    path = try_export_presenter(summary, STORE, PRESENTER_ASSETS, quality=config.PRESENTER_QUALITY)
    return str(path) if path else None


# ─── MCP Server ───────────────────────────────────────────────────────

app = Server("kanime-posters")


@app.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="export_poster",
            description=(
                "Generate the derivative set for an uploaded poster: fullres/{key}.webp "
                "(lossless) and 310x468/{key}.webp, plus the blurhash placeholder. "
                "Only image/webp and image/png are accepted. Pass the series' existing "
                "cache_key when replacing a poster. If `series` is given, the presenter "
                "card is regenerated too (best effort)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "image_base64": {"type": "string", "description": "Poster bytes, base64"},
                    "content_type": {"type": "string", "description": "image/webp or image/png"},
                    "cache_key": {"type": "string", "description": "Existing key (optional)"},
                    "series": {"type": "object", "description": "Catalog series document (optional)"},
                },
                "required": ["image_base64", "content_type"],
            },
        ),
        Tool(
            name="export_presenter",
            description=(
                "Compose pre/{key}.webp for a catalog series whose poster thumbnail "
                "already exists. Call after create, or when title, counts or poster change."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "series": {"type": "object", "description": "Catalog series document"},
                },
                "required": ["series"],
            },
        ),
        Tool(
            name="new_cache_key",
            description="Draw a fresh cache key for a new series.",
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        Tool(
            name="decode_placeholder",
            description="Inspect a placeholder: grid size, average color, accent color.",
            inputSchema={
                "type": "object",
                "properties": {
                    "placeholder": {"type": "string"},
                    "placeholder_format": {"type": "integer", "default": FORMAT_CURRENT},
                },
                "required": ["placeholder"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    try:
        result = await _handle_tool(name, arguments)
        return [TextContent(type="text", text=result)]
    except Exception as e:
        logger.exception("Tool %s failed", name)
        return [TextContent(type="text", text=f"ERROR: {str(e)}")]


async def _handle_tool(name: str, args: dict[str, Any]) -> str:

    # ── export_poster ─────────────────────────────────────────────
    if name == "export_poster":
        try:
            data = base64.b64decode(args.get("image_base64", ""), validate=True)
        except (binascii.Error, ValueError):
            return "ERROR: image_base64 is not valid base64"

        cached = await run_blocking(
            export_poster, data, args.get("content_type"), STORE,
            cache_key=args.get("cache_key"), thumbnail_quality=config.THUMBNAIL_QUALITY,
        )
        result = {"poster": cached.to_dict()}

        series = args.get("series")
        if series:
            path = await run_blocking(presenter_best_effort, series, cached)
            result["presenter"] = path

        return json.dumps(result, indent=2)

    # ── export_presenter ──────────────────────────────────────────
    elif name == "export_presenter":
        if PRESENTER_ASSETS is None:
            return "ERROR: presenter assets are not loaded (template or fonts missing)"
        summary = SeriesSummary.from_record(args.get("series") or {})
        try:
            path = await run_blocking(export_presenter, summary, STORE, PRESENTER_ASSETS,
                                      quality=config.PRESENTER_QUALITY)
        except PresenterError as e:
            return f"ERROR: presenter not generated: {e}"
        return f"Presenter saved: {path}"

    # ── new_cache_key ─────────────────────────────────────────────
    elif name == "new_cache_key":
        return new_cache_key()

    # ── decode_placeholder ────────────────────────────────────────
    elif name == "decode_placeholder":
        placeholder = args.get("placeholder", "")
        fmt = int(args.get("placeholder_format", FORMAT_CURRENT))
        if not is_valid_placeholder(placeholder):
            return f"ERROR: not a valid placeholder: {placeholder!r}"
        body, suffix = split_placeholder(placeholder)
        return json.dumps({
            "components": list(placeholder_components(body)),
            "average_color": list(average_color(body)),
            "accent_color": list(accent_color(placeholder, fmt) or []) or None,
            "has_accent_suffix": suffix is not None,
        }, indent=2)

    else:
        return f"ERROR: Unknown tool '{name}'"


# ─── Main ─────────────────────────────────────────────────────────────

async def main():
    global PRESENTER_ASSETS

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s: %(message)s")
    try:
        PRESENTER_ASSETS = load_presenter_assets(config.ASSETS_DIR)
    except PresenterError as e:
        logger.warning("Presenter disabled: %s", e)

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
    finally:
        EXECUTOR.shutdown(wait=False)


if __name__ == "__main__":
    asyncio.run(main())
