"""
Character-grid text layout for native printer fonts.

Widths are counted in user-facing characters (NFC code points, before
transcoding), so a line of "é" or "e" + U+0301 fills the same columns as a
line of "e".
"""

from __future__ import annotations

import unicodedata
from typing import List

from thermal_printer.core.errors import InvalidOption

DOUBLE_WIDTH_SIZES = frozenset({"wide", "big"})


def effective_width(chars_per_line: int, size: str = "normal") -> int:
    """Columns available at a size class; double-width classes get half."""
    if size in DOUBLE_WIDTH_SIZES:
        return max(1, chars_per_line // 2)
    return chars_per_line


def word_wrap(text: str, max_width: int) -> List[str]:
    """
    Greedy word-wrapping on whitespace runs.

    Words longer than max_width are hard-split into max_width chunks; the
    final short chunk stays open for the following words. Empty or blank
    input yields [""] so a blank block still prints one line.

    Raises:
        InvalidOption if max_width < 1.
    """
    if max_width < 1:
        raise InvalidOption(f"wrap width must be at least 1, got {max_width}")

    lines: List[str] = []
    current_line = ""

    for word in unicodedata.normalize("NFC", text or "").split():
        if len(word) > max_width:
            if current_line:
                lines.append(current_line)
            while len(word) > max_width:
                lines.append(word[:max_width])
                word = word[max_width:]
            current_line = word
            continue

        test_line = current_line + (" " if current_line else "") + word
        if len(test_line) <= max_width:
            current_line = test_line
        else:
            if current_line:
                lines.append(current_line)
            current_line = word

    if current_line:
        lines.append(current_line)

    return lines or [""]


__all__ = ["DOUBLE_WIDTH_SIZES", "effective_width", "word_wrap"]
