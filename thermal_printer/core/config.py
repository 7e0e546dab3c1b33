"""
Config utilities for Thermal Printer.

Responsibilities:
- Resolve the config path with environment and XDG support
- Load the JSON config (read-only; the core never writes it)
- Provide printer profiles and merge them with config overrides
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

DEFAULT_PROFILE = "58mm"

# Paper width in dots, characters per line in font A, and the gamma that
# compensates each head's darkening of midtones.
PRINTER_PROFILES: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "58mm": MappingProxyType({"printer_width": 384, "chars_per_line": 32, "gamma": 2.8}),
        "80mm": MappingProxyType({"printer_width": 576, "chars_per_line": 48, "gamma": 1.8}),
    }
)

# Keys a config file may override on top of the selected profile.
SETTING_DEFAULTS: Mapping[str, Any] = MappingProxyType(
    {
        "contrast": 30,
        "resample": "box",
        "codepage": "ascii",
        "fallback": None,
        "text_rendering": "native",
        "font_path": None,
        "font_size": 24,
    }
)


def default_config_path() -> str:
    """
    Resolve the default config path using:
    1) $XDG_CONFIG_HOME/thermalprinter/config.json
    2) ~/.config/thermalprinter/config.json
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return str(Path(xdg) / "thermalprinter" / "config.json")
    return str(Path.home() / ".config" / "thermalprinter" / "config.json")


def get_config_path() -> str:
    """
    Return the config path honoring THERMALPRINTER_CONFIG_PATH override.
    """
    return os.environ.get("THERMALPRINTER_CONFIG_PATH", default_config_path())


def load_config(path: Optional[str] = None) -> Optional[dict[str, Any]]:
    """
    Load the JSON config if it exists; return None if missing.

    Raises:
        json.JSONDecodeError if the file exists but contains invalid JSON.
        OSError for I/O errors other than missing file.
    """
    cfg_path = Path(path or get_config_path())
    if not cfg_path.exists():
        return None
    with cfg_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def resolve_profile(config: Optional[Mapping[str, Any]] = None) -> Mapping[str, Any]:
    """
    Return the printer profile named by config["printer_profile"].

    Unknown names raise KeyError listing the known profiles.
    """
    name = str((config or {}).get("printer_profile") or DEFAULT_PROFILE)
    try:
        return PRINTER_PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown printer profile {name!r}; expected one of {sorted(PRINTER_PROFILES)}") from None


def resolve_settings(config: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
    """
    Merge defaults, the selected profile and explicit config values.

    Precedence (lowest to highest): SETTING_DEFAULTS, profile, config.
    THERMALPRINTER_FONT_PATH fills font_path when the config leaves it unset.
    Values are not validated here; the printing models do that.
    """
    cfg = dict(config or {})
    settings: dict[str, Any] = dict(SETTING_DEFAULTS)
    settings.update(resolve_profile(cfg))
    for key, value in cfg.items():
        if key == "printer_profile" or value is None:
            continue
        settings[key] = value
    if not settings.get("font_path"):
        settings["font_path"] = os.environ.get("THERMALPRINTER_FONT_PATH") or None
    return settings


__all__ = [
    "DEFAULT_PROFILE",
    "PRINTER_PROFILES",
    "SETTING_DEFAULTS",
    "default_config_path",
    "get_config_path",
    "load_config",
    "resolve_profile",
    "resolve_settings",
]
