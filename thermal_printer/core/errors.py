"""
Error taxonomy for Thermal Printer.

- InvalidImage: the pixel input cannot be processed (bad dimensions, empty or short buffer)
- InvalidOption: a caller-supplied option or block field is out of range

Both derive from ValueError so callers that only care about "bad input" can catch that.
Unmappable characters never raise; the charset layer resolves them with a fallback policy.
"""

from __future__ import annotations

from typing import Any, List, Optional


class ThermalPrinterError(Exception):
    """Base class for all errors raised by this package."""


class InvalidImage(ThermalPrinterError, ValueError):
    """Raised when a RawImage has unusable dimensions or pixel data."""


class InvalidOption(ThermalPrinterError, ValueError):
    """
    Raised when print options or content blocks fail validation.

    When the failure comes from a pydantic model, the structured error list is
    kept on `errors` and the ValidationError is chained as __cause__.
    """

    def __init__(self, message: str, errors: Optional[List[dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors: List[dict[str, Any]] = list(errors or [])


__all__ = ["InvalidImage", "InvalidOption", "ThermalPrinterError"]
