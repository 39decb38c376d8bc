"""Configuration I/O utilities for reading and writing TOML config files.

This module handles serialization/deserialization of PinlockConfig to/from
TOML format.
"""

import os
import platform
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from pinlock.domain.config import PinlockConfig


def get_global_config_path() -> Path:
    """Get the path to the global config file.

    The location is platform-dependent:
    - Linux/macOS: $XDG_CONFIG_HOME/pinlock/config.toml or ~/.config/pinlock/config.toml
    - Windows: %APPDATA%/pinlock/config.toml

    Returns:
        Path to the global config file (may not exist)
    """
    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "pinlock" / "config.toml"
        return Path.home() / ".config" / "pinlock" / "config.toml"

    xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg_config:
        return Path(xdg_config) / "pinlock" / "config.toml"
    return Path.home() / ".config" / "pinlock" / "config.toml"


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw TOML data from a config file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in config file: {e}") from e


def config_to_data(config: PinlockConfig) -> dict[str, Any]:
    """Convert a config into plain TOML-serializable sections."""
    return {
        "workspace": {"path_var": config.workspace.path_var},
        "sync": {
            "max_concurrent": config.sync.max_concurrent,
            "color": config.sync.color,
        },
        "save": {"fetch_attempts": config.save.fetch_attempts},
        "toolchain": {"go": config.toolchain.go},
    }


def dump_config(config: PinlockConfig) -> str:
    """Render a config as TOML text."""
    return tomli_w.dumps(config_to_data(config))


def save_config(config: PinlockConfig, path: Path) -> None:
    """Save configuration to a TOML file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(config_to_data(config), f)
