"""
Config file loading and management.

The config lives in a single YAML file and contains:
- API keys (with env var expansion)
- Provider definitions
- Default fallback order and timeout
"""

from pathlib import Path
from typing import Optional
import yaml

from .schemas import OhseerConfig, ProviderConfig


class ConfigManager:
    """
    Manages the ohseer configuration file.

    Usage:
        manager = ConfigManager(config_path)
        config = manager.load()  # Returns OhseerConfig
        manager.save(config)     # Persists to disk
    """

    def __init__(self, config_path: Path):
        self.config_path = Path(config_path).expanduser().resolve()

    def exists(self) -> bool:
        return self.config_path.exists()

    def load(self) -> OhseerConfig:
        """
        Load config from disk.

        Returns OhseerConfig with defaults if file doesn't exist.
        """
        if not self.config_path.exists():
            return OhseerConfig.with_defaults()

        with open(self.config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        return OhseerConfig.model_validate(data)

    def save(self, config: OhseerConfig) -> None:
        """Save config to disk, creating the parent directory if needed."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        data = config.model_dump(exclude_none=True)

        with open(self.config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def update(self, updates: dict) -> OhseerConfig:
        """
        Update specific fields in the config.

        Args:
            updates: Dict of fields to update (can be nested)

        Returns:
            Updated OhseerConfig
        """
        config = self.load()
        data = config.model_dump()

        _deep_merge(data, updates)

        new_config = OhseerConfig.model_validate(data)
        self.save(new_config)
        return new_config

    def set_api_key(self, key_name: str, value: str) -> None:
        config = self.load()
        config.api_keys[key_name] = value
        self.save(config)

    def add_provider(
        self,
        name: str,
        provider_type: str,
        model: Optional[str] = None,
        api_key_refs: Optional[list] = None,
        enabled: bool = True,
        **extra
    ) -> None:
        """Add or update a provider in the config."""
        config = self.load()
        config.providers[name] = ProviderConfig(
            type=provider_type,
            model=model,
            api_key_refs=api_key_refs or [],
            enabled=enabled,
            extra=extra,
        )
        self.save(config)


def _deep_merge(base: dict, updates: dict) -> None:
    """
    Deep merge updates into base dict (mutates base).
    """
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def load_config(config_path: Optional[Path] = None) -> OhseerConfig:
    """
    Load the config at config_path, or built-in defaults when there is none.
    """
    if config_path is None:
        return OhseerConfig.with_defaults()
    return ConfigManager(config_path).load()
