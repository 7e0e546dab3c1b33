"""
Grayscale -> 1-bit conversion.

dither() is Floyd-Steinberg error diffusion for photographs; threshold() is a
plain cut used for rasterised text, whose anti-aliased edges would otherwise
scatter stray dots around the glyphs.
"""

from __future__ import annotations

from thermal_printer.printing.models import BitMatrix, GrayBuffer

THRESHOLD = 128


def dither(gray: GrayBuffer) -> BitMatrix:
    """
    Floyd-Steinberg dithering, threshold 128.

    Pixels are visited strictly row-major (left to right, top to bottom); the
    diffusion result depends on that order. Error goes to unvisited
    neighbours only: right 7/16, below-left 3/16, below 5/16, below-right 1/16.
    The input buffer is not modified.
    """
    width, height = gray.width, gray.height
    buf = list(gray.values)
    out = BitMatrix(width, height)
    bits = out.bits

    for y in range(height):
        row = y * width
        below = row + width
        has_below = y + 1 < height
        for x in range(width):
            idx = row + x
            old = buf[idx]
            if old < THRESHOLD:
                new = 0.0
                bits[idx] = 1
            else:
                new = 255.0
            error = old - new
            if error == 0:
                continue
            if x + 1 < width:
                buf[idx + 1] += error * 7 / 16
            if has_below:
                if x > 0:
                    buf[below + x - 1] += error * 3 / 16
                buf[below + x] += error * 5 / 16
                if x + 1 < width:
                    buf[below + x + 1] += error * 1 / 16
    return out


def threshold(gray: GrayBuffer, level: int = THRESHOLD) -> BitMatrix:
    """Black wherever the value is below `level`; no error diffusion."""
    out = BitMatrix(gray.width, gray.height)
    out.bits[:] = bytes(1 if v < level else 0 for v in gray.values)
    return out


__all__ = ["THRESHOLD", "dither", "threshold"]
