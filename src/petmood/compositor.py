"""Photo + caption composition with Pillow."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .config import CompositorConfig

logger = logging.getLogger("petmood")

MIN_CANVAS_HEIGHT = 160
MIN_BASE_WIDTH = 300
ASSISTANT_BACKDROP = (0, 0, 0, 128)
USER_BACKDROP = (255, 255, 255, 255)
ASSISTANT_TEXT = (255, 255, 255, 255)
USER_TEXT = (0, 0, 0, 255)
LINE_SPACING = 4

_BOLD_FALLBACKS = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")
_REGULAR_FALLBACKS = ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf")


@lru_cache(maxsize=64)
def _load_font_cached(size: int, bold: bool, path: Optional[str]):
    candidates = [path] if path else []
    candidates += list(_BOLD_FALLBACKS if bold else _REGULAR_FALLBACKS)
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.debug("No TrueType font found, using Pillow default at %s", size)
    return ImageFont.load_default(size=size)


def load_font(size: float, bold: bool = False, config: Optional[CompositorConfig] = None):
    cfg = config or CompositorConfig()
    path = cfg.bold_font_path if bold else cfg.regular_font_path
    return _load_font_cached(max(1, int(size)), bold, path)


def assistant_font_size(width: int) -> float:
    return max(14, max(width, MIN_BASE_WIDTH) * 0.05)


def user_font_size(width: int) -> float:
    return max(13, max(width, MIN_BASE_WIDTH) * 0.045)


def right_column_width(width: int) -> float:
    return max(180, max(width, MIN_BASE_WIDTH) * 0.6)


def line_height(font) -> int:
    left, top, right, bottom = font.getbbox("Ag")
    return int(bottom) + LINE_SPACING


def _break_long_word(word: str, font, max_width: float) -> List[str]:
    pieces: List[str] = []
    current = ""
    for char in word:
        if current and font.getlength(current + char) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_text(text: str, font, max_width: float) -> List[str]:
    """Word-wrap ``text`` to ``max_width`` pixels.

    Words wider than the line, and text written without spaces, are broken
    between characters.
    """
    lines: List[str] = []
    for paragraph in text.splitlines() or [""]:
        words = paragraph.split(" ")
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if font.getlength(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            if font.getlength(word) <= max_width:
                current = word
            else:
                pieces = _break_long_word(word, font, max_width)
                lines.extend(pieces[:-1])
                current = pieces[-1] if pieces else ""
        lines.append(current)
    return lines


def measure_wrapped(text: str, font, max_width: float) -> Tuple[List[str], int]:
    lines = wrap_text(text, font, max_width)
    return lines, line_height(font) * len(lines)


def _draw_lines(draw: ImageDraw.ImageDraw, origin, lines: List[str], font, fill) -> None:
    x, y = origin
    step = line_height(font)
    for line in lines:
        draw.text((x, y), line, font=font, fill=fill)
        y += step


def compose(
    base: Image.Image,
    assistant_text: Optional[str] = None,
    user_text: Optional[str] = None,
    draw_user_text: bool = False,
    config: Optional[CompositorConfig] = None,
) -> Image.Image:
    """Lay the photo out on the left, captions on top or to the right.

    The assistant caption sits on a translucent backdrop at the bottom-left of
    the photo column. The user caption, drawn only when ``draw_user_text``,
    sits top-aligned in a right column on an opaque white backdrop. Blank
    captions draw nothing.
    """
    cfg = config or CompositorConfig()
    padding = cfg.padding
    width, height = base.size
    if width == 0 or height == 0:
        logger.info("Skipping composition for empty image")
        return base.copy()

    canvas_height = max(height, MIN_CANVAS_HEIGHT)
    left_width = int(round(width * (canvas_height / height)))
    right_width = int(round(right_column_width(width)))
    canvas_width = left_width + padding
    if draw_user_text:
        canvas_width += right_width

    canvas = Image.new("RGBA", (canvas_width, canvas_height), (0, 0, 0, 0))
    photo = base.convert("RGBA")
    if photo.size != (left_width, canvas_height):
        photo = photo.resize((left_width, canvas_height), Image.Resampling.LANCZOS)
    canvas.alpha_composite(photo, (0, 0))

    if assistant_text and assistant_text.strip():
        font = load_font(assistant_font_size(width), bold=True, config=cfg)
        lines, text_height = measure_wrapped(
            assistant_text, font, max(80, left_width - 2 * padding)
        )
        text_height += 8
        box_x = padding / 2
        box_y = canvas_height - text_height - padding / 2
        box_w = max(80, left_width - padding)
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).rounded_rectangle(
            (box_x - 8, box_y - 6, box_x + box_w + 8, box_y + text_height + 6),
            radius=8,
            fill=ASSISTANT_BACKDROP,
        )
        canvas = Image.alpha_composite(canvas, overlay)
        _draw_lines(ImageDraw.Draw(canvas), (box_x, box_y), lines, font, ASSISTANT_TEXT)

    if draw_user_text and user_text and user_text.strip():
        font = load_font(user_font_size(width), bold=False, config=cfg)
        max_width = right_width - 2 * padding
        lines, text_height = measure_wrapped(user_text, font, max_width)
        box_x = left_width + padding
        box_y = padding
        draw = ImageDraw.Draw(canvas)
        draw.rounded_rectangle(
            (box_x - 8, box_y - 8, box_x + max_width + 8, box_y + text_height + 8),
            radius=12,
            fill=USER_BACKDROP,
        )
        _draw_lines(draw, (box_x, box_y), lines, font, USER_TEXT)

    return canvas


def fit_font_size(
    text: str,
    width: int,
    config: Optional[CompositorConfig] = None,
    minimum: int = 8,
) -> int:
    """Largest bold size, starting at 8% of ``width``, that fits 90% of it."""
    size = int(width * 0.08)
    limit = width * 0.9
    while size > minimum and load_font(size, bold=True, config=config).getlength(text) > limit:
        size -= 1
    return max(size, 1)


def draw_text_inside(
    image: Image.Image,
    text: str,
    config: Optional[CompositorConfig] = None,
    margin: int = 12,
) -> Image.Image:
    """Single-line caption centred along the bottom edge, auto-fitted."""
    result = image.convert("RGBA")
    if not text or result.width == 0 or result.height == 0:
        return result
    font = load_font(fit_font_size(text, result.width, config), bold=True, config=config)
    draw = ImageDraw.Draw(result)
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = (result.width - (right - left)) / 2
    y = result.height - (bottom - top) - margin
    draw.text((x, y), text, font=font, fill=ASSISTANT_TEXT)
    return result
