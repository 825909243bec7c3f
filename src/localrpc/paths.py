"""XDG-compliant path helpers for localrpc configuration."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir


def get_config_dir() -> Path:
    """Get the config directory for localrpc (config.toml)."""
    override = os.environ.get("LOCALRPC_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(user_config_dir("localrpc"))


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    return get_config_dir() / "config.toml"


__all__ = ["get_config_dir", "get_config_path"]
