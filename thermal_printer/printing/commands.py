"""
ESC/POS command emission.

Low-level helpers return the bytes of one control sequence; the emit_*
functions turn a single content block into its complete byte run for the
native-font strategy. Every text block ends with reset_style() so size and
emphasis never leak into the next block.
"""

from __future__ import annotations

import logging
from typing import Union

from thermal_printer.core.errors import InvalidOption
from thermal_printer.printing.charset import CodePage, FallbackPolicy, transcode
from thermal_printer.printing.layout import effective_width, word_wrap
from thermal_printer.printing.models import QR_MAX_PAYLOAD, FeedBlock, QrCodeBlock, SeparatorBlock, TextBlock

logger = logging.getLogger(__name__)

ESC = b"\x1b"
GS = b"\x1d"
LF = b"\n"

INIT = ESC + b"@"

ALIGN = {"left": 0, "center": 1, "right": 2}

# GS ! n: bit 4 doubles the width, bit 0 doubles the height
SIZE = {"normal": 0x00, "wide": 0x10, "tall": 0x01, "big": 0x11}

# GS ( k error-correction levels, fn 69
QR_EC_LEVEL = {"L": 48, "M": 49, "Q": 50, "H": 51}
QR_MODEL_2 = 50


def align(value: str) -> bytes:
    try:
        return ESC + b"a" + bytes([ALIGN[value]])
    except KeyError:
        raise InvalidOption(f"unknown alignment {value!r}") from None


def char_size(size: str) -> bytes:
    try:
        return GS + b"!" + bytes([SIZE[size]])
    except KeyError:
        raise InvalidOption(f"unknown size class {size!r}") from None


def bold(on: bool) -> bytes:
    return ESC + b"E" + (b"\x01" if on else b"\x00")


def underline(on: bool) -> bytes:
    return ESC + b"-" + (b"\x01" if on else b"\x00")


def invert(on: bool) -> bytes:
    return GS + b"B" + (b"\x01" if on else b"\x00")


def reset_style() -> bytes:
    return char_size("normal") + bold(False) + underline(False) + invert(False)


def feed(lines: int = 1) -> bytes:
    if lines < 0:
        raise InvalidOption(f"feed lines must not be negative, got {lines}")
    return LF * lines


def _qr_function(payload: bytes) -> bytes:
    # GS ( k pL pH cn=49 fn [params]
    n = len(payload) + 1
    return GS + b"(k" + bytes([n % 256, n // 256, 49]) + payload


def qr_code(data: Union[str, bytes], module_size: int = 6, error_correction: str = "M") -> bytes:
    """
    Native QR sequence: select model 2, module size, error correction,
    store data, print.

    The store command's length field is (L + 3) where L is the payload byte
    length, split little-endian into pL, pH.
    """
    if not 1 <= module_size <= 16:
        raise InvalidOption(f"qr module size must be within 1..16, got {module_size}")
    try:
        ec = QR_EC_LEVEL[error_correction]
    except KeyError:
        raise InvalidOption(f"unknown qr error correction level {error_correction!r}") from None
    payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    if not payload:
        raise InvalidOption("qr payload must not be empty")
    if len(payload) > QR_MAX_PAYLOAD:
        raise InvalidOption(f"qr payload too long ({len(payload)} > {QR_MAX_PAYLOAD} bytes)")

    store_len = len(payload) + 3
    return (
        _qr_function(b"A" + bytes([QR_MODEL_2, 0]))
        + _qr_function(b"C" + bytes([module_size]))
        + _qr_function(b"E" + bytes([ec]))
        + GS + b"(k" + bytes([store_len % 256, store_len // 256]) + b"1P0" + payload
        + _qr_function(b"Q0")
    )


def emit_text(
    block: TextBlock,
    chars_per_line: int,
    codepage: Union[CodePage, str] = CodePage.ASCII,
    fallback: Union[FallbackPolicy, str, None] = None,
) -> bytes:
    lines = word_wrap(block.content, effective_width(chars_per_line, block.size))
    out = bytearray()
    out += align(block.align)
    out += char_size(block.size)
    out += bold(block.bold)
    out += underline(block.underline)
    out += invert(block.invert)
    for line in lines:
        out += transcode(line, codepage, fallback) + LF
    out += reset_style()
    logger.debug("text block: %d line(s), size=%s align=%s", len(lines), block.size, block.align)
    return bytes(out)


def emit_separator(
    block: SeparatorBlock,
    chars_per_line: int,
    codepage: Union[CodePage, str] = CodePage.ASCII,
    fallback: Union[FallbackPolicy, str, None] = None,
) -> bytes:
    unit = transcode(block.char, codepage, fallback)
    rule = unit * (chars_per_line // len(unit)) if unit else b""
    return align("center") + rule + LF


def emit_qr(block: QrCodeBlock) -> bytes:
    return align(block.align) + qr_code(block.content, block.module_size, block.error_correction)


def emit_feed(block: FeedBlock) -> bytes:
    return feed(block.lines)


__all__ = [
    "ALIGN",
    "ESC",
    "GS",
    "INIT",
    "LF",
    "SIZE",
    "align",
    "bold",
    "char_size",
    "emit_feed",
    "emit_qr",
    "emit_separator",
    "emit_text",
    "feed",
    "invert",
    "qr_code",
    "reset_style",
    "underline",
]
