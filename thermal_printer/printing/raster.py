"""
Raster packing for the ESC/POS "GS v 0" bit image command.

Layout: GS v 0 m xL xH yL yH d1...dk, with x counted in bytes per row and
y in dots. Each data byte carries 8 horizontal pixels, leftmost in the MSB.
The two-byte fields cap one command at 65535 rows, so taller images are sent
as consecutive bands.
"""

from __future__ import annotations

from thermal_printer.core.errors import InvalidImage
from thermal_printer.printing.commands import INIT
from thermal_printer.printing.models import BitMatrix

RASTER_NORMAL = b"\x1d\x76\x30\x00"  # GS v 0, m = 0 (normal density)
TRAILING_FEED = b"\n\n\n"

MAX_BAND_ROWS = 0xFFFF
MAX_WIDTH_BYTES = 0xFFFF


def width_bytes(width: int) -> int:
    return (width + 7) // 8


def raster_header(width: int, height: int) -> bytes:
    """
    GS v 0 header for one band.

    Raises:
        InvalidImage if the band does not fit the 16-bit size fields.
    """
    wb = width_bytes(width)
    if not 1 <= wb <= MAX_WIDTH_BYTES:
        raise InvalidImage(f"raster width {width} dots does not fit a GS v 0 header")
    if not 1 <= height <= MAX_BAND_ROWS:
        raise InvalidImage(f"raster band height {height} outside 1..{MAX_BAND_ROWS}")
    return RASTER_NORMAL + bytes((wb % 256, wb // 256, height % 256, height // 256))


def pack_rows(matrix: BitMatrix) -> bytes:
    """
    Pack the matrix MSB-first, one row after another.

    Padding bits past the real width are white. The result is exactly
    width_bytes(width) * height bytes long.
    """
    width = matrix.width
    wb = width_bytes(width)
    bits = matrix.bits
    out = bytearray(wb * matrix.height)
    for y in range(matrix.height):
        row = y * width
        base = y * wb
        for x in range(width):
            if bits[row + x]:
                out[base + (x >> 3)] |= 0x80 >> (x & 7)
    return bytes(out)


def raster_command(matrix: BitMatrix) -> bytes:
    """
    GS v 0 header(s) followed by the packed rows (no init, no feed).

    Images taller than MAX_BAND_ROWS become several back-to-back commands.
    """
    wb = width_bytes(matrix.width)
    data = pack_rows(matrix)
    out = bytearray()
    for top in range(0, matrix.height, MAX_BAND_ROWS):
        rows = min(MAX_BAND_ROWS, matrix.height - top)
        out += raster_header(matrix.width, rows)
        out += data[top * wb : (top + rows) * wb]
    return bytes(out)


def pack(matrix: BitMatrix) -> bytes:
    """
    Complete raster print job: printer init, the GS v 0 image, then three
    line feeds so the image clears the print head.
    """
    return INIT + raster_command(matrix) + TRAILING_FEED


__all__ = [
    "MAX_BAND_ROWS",
    "TRAILING_FEED",
    "pack",
    "pack_rows",
    "raster_command",
    "raster_header",
    "width_bytes",
]
