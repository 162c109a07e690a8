"""
Configuration management for ohseer.

Single YAML file (default ~/.ohseer/config.yaml, override with --config or
OHSEER_CONFIG) holding API key references, provider definitions and defaults.

Usage:
    from infra.config import ConfigManager, get_config

    config = get_config()
    config.credential_status()   # {"tensorlake": True, "mistral": False, ...}
"""

from .schemas import (
    ProviderConfig,
    DefaultsConfig,
    OhseerConfig,
    resolve_env_vars,
)

from .library_config import (
    ConfigManager,
    load_config,
)

from .runtime import (
    DEFAULT_CONFIG_PATH,
    get_config_path,
    get_config,
)


__all__ = [
    "ProviderConfig",
    "DefaultsConfig",
    "OhseerConfig",
    "resolve_env_vars",
    "ConfigManager",
    "load_config",
    "DEFAULT_CONFIG_PATH",
    "get_config_path",
    "get_config",
]
