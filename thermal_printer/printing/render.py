"""
Bitmap text rendering for Thermal Printer.

Used by the `bitmap` text strategy: blocks are drawn with a TrueType font
into grayscale Pillow images at printer width, so any glyph the font has
reaches the paper without code page loss.

- Resolve a font from config/env/common locations
- Word-wrap by measured pixel width
- Render text and separator blocks ('L' mode, black=0, white=255)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import List, Optional

import PIL
from PIL import Image, ImageDraw, ImageFont

from thermal_printer.printing.models import SeparatorBlock, TextBlock

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

# (horizontal, vertical) magnification per size class, matching GS ! n
SIZE_SCALE = {"normal": (1, 1), "wide": (2, 1), "tall": (1, 2), "big": (2, 2)}

LINE_SPACING = 4

# Tried in order after the configured font; first hit wins.
SYSTEM_FONTS: Sequence[str] = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
)


def _measure_text(font: Font, text: str) -> tuple[int, int]:
    """Ink box of `text` as (width, height); (0, 0) if the font cannot measure it."""
    try:
        left, top, right, bottom = font.getbbox(text)
    except (AttributeError, OSError, ValueError):
        try:
            w, h = font.getmask(text).size
        except (AttributeError, OSError, ValueError):
            return 0, 0
        return int(w), int(h)
    return int(right - left), int(bottom - top)


def line_height(font: Font) -> int:
    try:
        ascent, descent = font.getmetrics()  # type: ignore[union-attr]
    except AttributeError:
        return max(1, _measure_text(font, "Ag")[1])
    return max(1, int(ascent + descent))


def _font_candidates(config: Optional[Mapping[str, object]]) -> List[str]:
    paths: List[str] = []
    configured = (config or {}).get("font_path")
    if isinstance(configured, str) and configured.strip():
        paths.append(configured.strip())
    env_path = os.environ.get("THERMALPRINTER_FONT_PATH")
    if env_path:
        paths.append(env_path)
    paths.extend(SYSTEM_FONTS)
    # Pillow wheels sometimes carry DejaVu for their own test suite
    pil_dir = Path(PIL.__file__).resolve().parent
    paths.extend(str(pil_dir / rel) for rel in ("fonts/DejaVuSans.ttf", "Tests/fonts/DejaVuSans.ttf"))
    return list(dict.fromkeys(paths))


def resolve_font(config: Optional[Mapping[str, object]], font_size: int) -> Font:
    """
    First loadable TrueType font among font_path, THERMALPRINTER_FONT_PATH,
    SYSTEM_FONTS and Pillow's own copy of DejaVu. Without any, Pillow's
    built-in default font is scaled to font_size.
    """
    for path in _font_candidates(config):
        try:
            return ImageFont.truetype(path, font_size)
        except OSError:
            continue

    logger.warning("No TTF font found; using Pillow's default font. Set THERMALPRINTER_FONT_PATH for better coverage")
    return ImageFont.load_default(size=font_size)


def _break_long_word(word: str, font: Font, max_width: int) -> List[str]:
    """Split an overwide word into pieces that each fit max_width (at least one character each)."""
    result: List[str] = []
    current = ""
    for char in word:
        test = current + char
        w, _ = _measure_text(font, test)
        if w <= max_width or not current:
            current = test
        else:
            result.append(current)
            current = char
    if current:
        result.append(current)
    return result or [""]


def wrap_pixels(text: str, font: Font, max_width: int) -> List[str]:
    """
    Greedy word-wrapping for a given pixel width.

    Same rules as the character-grid wrap: whitespace runs separate words,
    overlong words are split, and the last piece of a split word stays open
    for the next word. Empty input yields [""].
    """
    words = (text or "").split()
    lines: List[str] = []
    current_line = ""

    for word in words:
        test_line = current_line + (" " if current_line else "") + word
        w, _ = _measure_text(font, test_line)
        if w <= max_width:
            current_line = test_line
            continue
        if current_line:
            lines.append(current_line)
            current_line = ""
        if _measure_text(font, word)[0] > max_width:
            pieces = _break_long_word(word, font, max_width)
            lines.extend(pieces[:-1])
            current_line = pieces[-1]
        else:
            current_line = word

    if current_line:
        lines.append(current_line)

    return lines or [""]


def _layout(config: Mapping[str, object]) -> tuple[int, int, int, int]:
    width = int(config.get("printer_width", 384))  # type: ignore[arg-type]
    font_size = int(config.get("font_size", 24))  # type: ignore[arg-type]
    left_margin = int(config.get("print_left_margin", 0))  # type: ignore[arg-type]
    right_margin = int(config.get("print_right_margin", 0))  # type: ignore[arg-type]
    return width, font_size, left_margin, right_margin


def _magnify(img: Image.Image, size: str, width: int) -> Image.Image:
    sx, sy = SIZE_SCALE[size]
    if (sx, sy) == (1, 1):
        return img
    scaled = img.resize((img.width * sx, img.height * sy), Image.NEAREST)
    if scaled.width == width:
        return scaled
    canvas = Image.new("L", (width, scaled.height), 255)
    canvas.paste(scaled, (0, 0))
    return canvas


def render_text_block(block: TextBlock, config: Optional[Mapping[str, object]] = None) -> Image.Image:
    """
    Render a text block into a grayscale image exactly printer_width wide.

    Size classes magnify the glyphs like the printer's own GS ! modes; bold
    draws a 1px stroke; underline adds a rule under each line; invert prints
    white text on a black band behind each line.

    Config keys used (with defaults):
      - printer_width: int (default 384)
      - font_size: int (default 24)
      - print_left_margin / print_right_margin: int (default 0)
      - font_path: optional, resolved by resolve_font()
    """
    cfg = config or {}
    width, font_size, left_margin, right_margin = _layout(cfg)
    sx, sy = SIZE_SCALE[block.size]

    # Lay out at 1/sx width, then magnify
    base_width = max(1, width // sx)
    lm, rm = left_margin // sx, right_margin // sx
    max_text_width = max(1, base_width - lm - rm)

    font = resolve_font(cfg, font_size)
    lines = wrap_pixels(block.content, font, max_text_width)
    lh = line_height(font)
    step = lh + LINE_SPACING

    fg, bg = (255, 0) if block.invert else (0, 255)
    img = Image.new("L", (base_width, max(1, step * len(lines))), 255)
    draw = ImageDraw.Draw(img)

    y = 0
    for line in lines:
        tw, _ = _measure_text(font, line)
        if block.align == "center":
            x = lm + max(0, (max_text_width - tw) // 2)
        elif block.align == "right":
            x = lm + max(0, max_text_width - tw)
        else:
            x = lm
        if block.invert and line:
            draw.rectangle([max(0, x - 2), y, min(base_width - 1, x + tw + 2), y + step - 1], fill=bg)
        if block.bold:
            draw.text((x, y), line, font=font, fill=fg, stroke_width=1, stroke_fill=fg)
        else:
            draw.text((x, y), line, font=font, fill=fg)
        if block.underline and line:
            uy = min(y + lh + 1, img.height - 1)
            draw.line([(x, uy), (x + tw, uy)], fill=fg, width=1)
        y += step

    logger.debug("rendered text block: %d line(s) -> %dx%d (size=%s)", len(lines), base_width * sx, img.height * sy, block.size)
    return _magnify(img, block.size, width)


def render_separator(block: SeparatorBlock, config: Optional[Mapping[str, object]] = None) -> Image.Image:
    """Render the separator character repeated across the full width, centered."""
    cfg = config or {}
    width, font_size, left_margin, right_margin = _layout(cfg)
    max_text_width = max(1, width - left_margin - right_margin)

    font = resolve_font(cfg, font_size)
    cw, _ = _measure_text(font, block.char)
    count = max(1, max_text_width // cw) if cw > 0 else 0
    rule = block.char * count
    # Kerning or a wider stroke can push the run past the edge
    while count > 1 and _measure_text(font, rule)[0] > max_text_width:
        count -= 1
        rule = block.char * count

    lh = line_height(font)
    img = Image.new("L", (width, lh + LINE_SPACING), 255)
    draw = ImageDraw.Draw(img)
    tw, _ = _measure_text(font, rule)
    draw.text((left_margin + max(0, (max_text_width - tw) // 2), 0), rule, font=font, fill=0)
    return img


__all__ = ["SIZE_SCALE", "line_height", "render_separator", "render_text_block", "resolve_font", "wrap_pixels"]
