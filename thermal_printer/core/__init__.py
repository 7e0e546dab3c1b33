"""
Core utilities for Thermal Printer.

This package groups helpers that are independent of the ESC/POS encoding:
- config: config path resolution, JSON loading, printer profiles
- errors: the InvalidImage / InvalidOption taxonomy
- logging: document-id aware filters/formatters and root logger config

Exports are explicit to keep static analyzers (e.g., Pyright) happy.
"""

from .config import (
    DEFAULT_PROFILE,
    PRINTER_PROFILES,
    SETTING_DEFAULTS,
    default_config_path,
    get_config_path,
    load_config,
    resolve_profile,
    resolve_settings,
)
from .errors import InvalidImage, InvalidOption, ThermalPrinterError
from .logging import (
    DocumentIdFilter,
    JsonFormatter,
    configure_logging,
    current_document_id,
    document_context,
)

__all__ = [
    # config
    "DEFAULT_PROFILE",
    "PRINTER_PROFILES",
    "SETTING_DEFAULTS",
    "default_config_path",
    "get_config_path",
    "load_config",
    "resolve_profile",
    "resolve_settings",
    # errors
    "InvalidImage",
    "InvalidOption",
    "ThermalPrinterError",
    # logging
    "configure_logging",
    "current_document_id",
    "document_context",
    "DocumentIdFilter",
    "JsonFormatter",
]
