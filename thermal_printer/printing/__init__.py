"""
Printing subsystem for Thermal Printer.

This package groups the ESC/POS encoding pipeline:

- models: pixel buffers, print options and content blocks
- pipeline / dither / raster: photo -> grayscale -> 1-bit -> GS v 0
- charset / layout / commands: text blocks -> native printer commands
- render: text blocks -> Pillow images for the bitmap strategy
- document: the build_* entry points

For convenience, common functions are re-exported for easy import.
"""

from .charset import *
from .commands import *
from .dither import *
from .document import *
from .layout import *
from .models import *
from .pipeline import *
from .raster import *
from .render import *
