"""
Runtime configuration access.

Single source of truth: the YAML config file.

The only environment variable consulted here is OHSEER_CONFIG, to locate
that file. API keys inside it are ${ENV_VAR} references resolved by the
config schema.
"""

import os
from pathlib import Path
from typing import Optional

from .schemas import OhseerConfig

DEFAULT_CONFIG_PATH = Path("~/.ohseer/config.yaml")


def get_config_path(explicit: Optional[str] = None) -> Path:
    """Config path from an explicit value, $OHSEER_CONFIG, or the default."""
    raw = explicit or os.getenv("OHSEER_CONFIG") or str(DEFAULT_CONFIG_PATH)
    return Path(raw).expanduser().resolve()


def get_config(explicit: Optional[str] = None) -> OhseerConfig:
    """
    Load the active configuration.

    Returns OhseerConfig with defaults if the config file doesn't exist.
    """
    from .library_config import load_config
    return load_config(get_config_path(explicit))
