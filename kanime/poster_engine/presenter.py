"""
Presenter Composer - the 1200x630 card shown when a series is shared.

Layout (template-relative):
  - poster thumbnail on the left edge, full template height
  - title at (452, 82), shrunk until it fits its box
  - release year badge centered at (516, 55)
  - volume/chapter/season/episode counts at x=532

Assets (template + fonts) are loaded once with load_presenter_assets() and
shared read-only by every call.

Assets needed under KANIME_ASSETS_DIR:
  - templates/AnimePresenter.png
  - fonts/Poppins-Bold.ttf
  - fonts/Poppins-ExtraBold.ttf
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..catalog import SeriesSummary
from ..errors import FontLoadFailure, PosterError, PresenterError, PresenterIOFailure
from .codec import WEBP
from .derivatives import PRESENTER, THUMB_H, THUMB_W, THUMBNAIL, DerivativeStore
from .palette import RGB
from .placeholder import BRAND_ACCENT, accent_or_brand

logger = logging.getLogger(__name__)

PRESENTER_W = 1200
PRESENTER_H = 630

TEMPLATE_FILE = Path("templates") / "AnimePresenter.png"
BOLD_FONT_FILE = Path("fonts") / "Poppins-Bold.ttf"
XBOLD_FONT_FILE = Path("fonts") / "Poppins-ExtraBold.ttf"

# Poster keeps the thumbnail's aspect at full card height
POSTER_W = THUMB_W * PRESENTER_H // THUMB_H

TITLE_ORIGIN = (452, 82)
TITLE_MARGIN = 64
TITLE_MAX_HEIGHT = 200
TITLE_MAX_CHARS = 100
TITLE_START_SIZE = 64
TITLE_MIN_SIZE = 32
TITLE_SIZE_STEP = 4
TITLE_SIZES = tuple(range(TITLE_START_SIZE, TITLE_MIN_SIZE - 1, -TITLE_SIZE_STEP))

YEAR_POSITION = (452 + 64, 32 + 21 + 2)
YEAR_FONT_SIZE = 28
COUNT_FONT_SIZE = 32
COUNT_X = 532

WHITE: RGB = (255, 255, 255)


@dataclass
class PresenterAssets:
    template: Image.Image
    title_fonts: Dict[int, ImageFont.FreeTypeFont]
    year_font: ImageFont.FreeTypeFont
    count_font: ImageFont.FreeTypeFont


@dataclass
class TitleLayout:
    font_size: int
    lines: List[str]
    line_height: int
    line_spacing: int
    height: int
    font: ImageFont.FreeTypeFont = field(repr=False)

    def line_offsets(self) -> List[int]:
        """Vertical drawing origin of each line, relative to the title origin."""
        step = self.line_height + self.line_spacing
        return [i * step for i in range(len(self.lines))]


def load_template(assets_dir: Path) -> Image.Image:
    """Open the card template, resized to the fixed presenter size."""
    template_path = Path(assets_dir) / TEMPLATE_FILE
    try:
        with Image.open(template_path) as img:
            template = img.convert("RGB")
    except OSError as e:
        raise PresenterIOFailure(f"Unable to open template image {template_path}: {e}") from e
    if template.size != (PRESENTER_W, PRESENTER_H):
        logger.warning("Template is %dx%d, resizing to %dx%d",
                       *template.size, PRESENTER_W, PRESENTER_H)
        template = template.resize((PRESENTER_W, PRESENTER_H), Image.Resampling.LANCZOS)
    return template


def load_presenter_assets(assets_dir: Path) -> PresenterAssets:
    """Read template and fonts once; raises FontLoadFailure / PresenterIOFailure."""
    assets_dir = Path(assets_dir)
    template = load_template(assets_dir)

    def font(path: Path, size: int) -> ImageFont.FreeTypeFont:
        try:
            return ImageFont.truetype(str(assets_dir / path), size)
        except OSError as e:
            raise FontLoadFailure(f"Unable to open font file {assets_dir / path}: {e}") from e

    return PresenterAssets(
        template=template,
        title_fonts={size: font(XBOLD_FONT_FILE, size) for size in TITLE_SIZES},
        year_font=font(BOLD_FONT_FILE, YEAR_FONT_SIZE),
        count_font=font(BOLD_FONT_FILE, COUNT_FONT_SIZE),
    )


# ── Title fitting ─────────────────────────────────────────────────────

def truncate_title(title: str, limit: int = TITLE_MAX_CHARS) -> str:
    title = " ".join(title.split())
    if len(title) <= limit:
        return title
    return title[:limit - 3].rstrip() + "..."


def _text_width(draw: ImageDraw.ImageDraw, text: str, font) -> int:
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[2] - bbox[0]


def _break_word(word: str, font, max_width: int, draw: ImageDraw.ImageDraw) -> List[str]:
    """Split a word wider than the box into box-wide chunks."""
    chunks, current = [], ""
    for ch in word:
        if current and _text_width(draw, current + ch, font) > max_width:
            chunks.append(current)
            current = ch
        else:
            current += ch
    if current:
        chunks.append(current)
    return chunks


def wrap_title_lines(text: str, font, max_width: int, draw: ImageDraw.ImageDraw) -> List[str]:
    """Word-wrap into lines no wider than max_width."""
    lines: List[str] = []
    current: List[str] = []
    for word in text.split():
        if _text_width(draw, word, font) > max_width:
            if current:
                lines.append(" ".join(current))
            *full, rest = _break_word(word, font, max_width, draw)
            lines.extend(full)
            current = [rest]
            continue
        test = " ".join(current + [word])
        if _text_width(draw, test, font) <= max_width:
            current.append(word)
        else:
            lines.append(" ".join(current))
            current = [word]
    if current:
        lines.append(" ".join(current))
    return lines


def layout_title(text: str, font, max_width: int) -> TitleLayout:
    draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    lines = wrap_title_lines(text, font, max_width, draw)
    ref = draw.textbbox((0, 0), "Mg", font=font)
    line_height = ref[3] - ref[1]
    spacing = int(line_height * 0.15)
    layout = TitleLayout(getattr(font, "size", 0), lines, line_height, spacing, 0, font)
    # Ink bottom of the drawn lines, measured from the title origin
    layout.height = max(
        (draw.textbbox((0, y), line, font=font)[3] for y, line in zip(layout.line_offsets(), lines)),
        default=0,
    )
    return layout


def fit_title(title: str, fonts: Dict[int, ImageFont.FreeTypeFont],
              box: Tuple[int, int]) -> TitleLayout:
    """
    Largest font size whose wrapped layout fits the box height.

    Sizes are tried from largest to smallest; the smallest is used even if
    the title still overflows.
    """
    if not fonts:
        raise FontLoadFailure("No title fonts loaded")
    text = truncate_title(title)
    max_width, max_height = box
    layout = None
    for size in sorted(fonts, reverse=True):
        layout = layout_title(text, fonts[size], max_width)
        layout.font_size = size
        if layout.height <= max_height:
            break
    return layout


def title_box(poster_width: int = POSTER_W) -> Tuple[int, int]:
    return PRESENTER_W - poster_width - TITLE_MARGIN, TITLE_MAX_HEIGHT


# ── Composition ───────────────────────────────────────────────────────

def _draw_count(draw: ImageDraw.ImageDraw, y: int, value: int, label: str,
                font, accent: RGB) -> None:
    number = str(value)
    draw.text((COUNT_X, y), number, font=font, fill=accent, anchor="lm")
    offset = draw.textlength(number, font=font)
    draw.text((COUNT_X + offset, y), f" {label}", font=font, fill=WHITE, anchor="lm")


def compose_presenter(summary: SeriesSummary, thumbnail: Image.Image,
                      assets: PresenterAssets) -> Image.Image:
    """Draw the presenter card onto a copy of the template."""
    canvas = assets.template.copy()
    poster = thumbnail.convert("RGB").resize((POSTER_W, PRESENTER_H), Image.Resampling.LANCZOS)
    canvas.paste(poster, (0, 0))

    draw = ImageDraw.Draw(canvas)
    accent = accent_or_brand(summary.poster.placeholder, summary.poster.placeholder_format)

    layout = fit_title(summary.title, assets.title_fonts, title_box())
    x, y = TITLE_ORIGIN
    for offset, line in zip(layout.line_offsets(), layout.lines):
        draw.text((x, y + offset), line, font=layout.font, fill=WHITE)

    draw.text(YEAR_POSITION, str(summary.release_year), font=assets.year_font,
              fill=BRAND_ACCENT, anchor="mm")

    for y, value, label in (
        (534 + 32 + 4, summary.episodes, "episodes"),
        (454 + 32 + 4, summary.seasons, "seasons"),
        (374 + 32 + 4, summary.chapters, "chapters"),
        (294 + 32 + 4, summary.volumes, "volumes"),
    ):
        _draw_count(draw, y, value, label, assets.count_font, accent)

    return canvas


def export_presenter(summary: SeriesSummary, store: DerivativeStore,
                     assets: PresenterAssets, quality: int = 85) -> Path:
    """Compose and write pre/{key}.webp from the stored thumbnail."""
    t = time.perf_counter()
    key = summary.poster.key
    try:
        thumbnail = WEBP.decode(store.read(THUMBNAIL, key))
    except (OSError, PosterError) as e:
        raise PresenterIOFailure(f"Unable to open thumbnail for {key}: {e}") from e

    canvas = compose_presenter(summary, thumbnail, assets)
    try:
        path = store.write(PRESENTER, key, WEBP.encode(canvas, quality=quality))
    except (OSError, PosterError) as e:
        raise PresenterIOFailure(f"Unable to save presenter image for {key}: {e}") from e

    logger.info("Successfully generated presenter image in %.3fs", time.perf_counter() - t)
    return path


def try_export_presenter(summary: SeriesSummary, store: DerivativeStore,
                         assets: Optional[PresenterAssets], quality: int = 85) -> Optional[Path]:
    """Best-effort variant: presenter failures are logged, never raised."""
    if assets is None:
        logger.error("Presenter assets not loaded; skipping presenter for %s", summary.poster.key)
        return None
    try:
        return export_presenter(summary, store, assets, quality=quality)
    except PresenterError as e:
        logger.error("Could not generate presenter for %s: %s", summary.poster.key, e)
        return None
