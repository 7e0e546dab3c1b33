"""
Thermal Printer package

Turns print requests into the ESC/POS byte stream a thermal receipt printer
consumes:
- build_image_document: decoded photo pixels -> dithered GS v 0 raster job
- build_text_document: ordered text/separator/QR/feed blocks -> command stream

The package does no device I/O. Callers store or send the returned bytes
as-is. Logging is left to the embedding application; call
configure_logging() for the default handler setup.
"""

from __future__ import annotations

from thermal_printer.core.config import load_config
from thermal_printer.core.errors import InvalidImage, InvalidOption, ThermalPrinterError
from thermal_printer.core.logging import configure_logging
from thermal_printer.printing.charset import CodePage, FallbackPolicy, transcode
from thermal_printer.printing.document import (
    DocumentBuilder,
    build_image_document,
    build_text_document,
    preview_image,
)
from thermal_printer.printing.layout import word_wrap
from thermal_printer.printing.models import (
    FeedBlock,
    PrintOptions,
    QrCodeBlock,
    RawImage,
    SeparatorBlock,
    TextBlock,
    TextRendering,
)

__version__ = "0.1.0"

__all__ = [
    "CodePage",
    "DocumentBuilder",
    "FallbackPolicy",
    "FeedBlock",
    "InvalidImage",
    "InvalidOption",
    "PrintOptions",
    "QrCodeBlock",
    "RawImage",
    "SeparatorBlock",
    "TextBlock",
    "TextRendering",
    "ThermalPrinterError",
    "build_image_document",
    "build_text_document",
    "configure_logging",
    "load_config",
    "preview_image",
    "transcode",
    "word_wrap",
]
