"""
Pixel pipeline: raw pixels -> tone-corrected grayscale at printer width.

Steps, in order: alpha flattening, resampling (Pillow), luma grayscale,
contrast, gamma. The result is a float GrayBuffer ready for dithering.
"""

from __future__ import annotations

import logging
import math
from typing import List

from PIL import Image

from thermal_printer.printing.models import GrayBuffer, PrintOptions, RawImage

logger = logging.getLogger(__name__)

_RESAMPLE = {
    "box": Image.BOX,
    "nearest": Image.NEAREST,
}


def contrast_factor(contrast: int) -> float:
    """
    Contrast curve factor for a level in [-100, 100]. Level 0 yields exactly 1.0.
    """
    return (259 * (contrast + 255)) / (255 * (259 - contrast))


def scaled_height(width: int, height: int, target_width: int) -> int:
    """Height that keeps the aspect ratio at target_width, rounded half up (never below 1)."""
    return max(1, math.floor(height * target_width / width + 0.5))


def _flatten_alpha(img: Image.Image) -> Image.Image:
    # Transparent areas print as paper, not ink
    if img.mode != "RGBA":
        return img
    background = Image.new("RGBA", img.size, (255, 255, 255, 255))
    return Image.alpha_composite(background, img).convert("RGB")


def _resample(img: Image.Image, options: PrintOptions) -> Image.Image:
    new_size = (options.width, scaled_height(img.width, img.height, options.width))
    if new_size == img.size:
        return img
    logger.debug("resample %s -> %s (%s)", img.size, new_size, options.resample)
    return img.resize(new_size, _RESAMPLE[options.resample])


def _luma(img: Image.Image) -> List[float]:
    if img.mode == "L":
        return [float(v) for v in img.tobytes()]
    raw = img.tobytes()
    return [0.299 * raw[i] + 0.587 * raw[i + 1] + 0.114 * raw[i + 2] for i in range(0, len(raw), 3)]


def apply_contrast(values: List[float], contrast: int) -> List[float]:
    if contrast == 0:
        return values
    factor = contrast_factor(contrast)
    return [min(255.0, max(0.0, factor * (v - 128) + 128)) for v in values]


def apply_gamma(values: List[float], gamma: float) -> List[float]:
    inv = 1.0 / gamma
    return [255.0 * (v / 255.0) ** inv for v in values]


def process(image: RawImage, options: PrintOptions) -> GrayBuffer:
    """
    Convert a RawImage into a GrayBuffer sized to options.width.

    Raises:
        InvalidImage for zero/negative dimensions or a buffer that does not
        match width x height x channels.
    """
    img = _flatten_alpha(image.to_pil())
    img = _resample(img, options)
    values = _luma(img)
    values = apply_contrast(values, options.contrast)
    values = apply_gamma(values, options.gamma)
    return GrayBuffer(width=img.width, height=img.height, values=values)


__all__ = ["apply_contrast", "apply_gamma", "contrast_factor", "process", "scaled_height"]
