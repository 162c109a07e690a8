"""
ohseer config set command - Set configuration values.
"""

import yaml
from pydantic import ValidationError

from infra.config import ConfigManager, get_config_path


def cmd_config_set(args):
    """Set a nested configuration value, e.g. providers.claude.timeout 600."""
    manager = ConfigManager(get_config_path(args.config))

    if not manager.exists():
        print(f"✗ No config found at: {manager.config_path}")
        print("  Run 'ohseer config init' to create one")
        return

    parts = args.key.split('.')
    if len(parts) == 1:
        print(f"✗ Cannot set top-level key '{args.key}' directly")
        print("  Use nested keys like 'defaults.timeout' or 'api_keys.mistral'")
        return

    value = parse_value(args.value)

    updates = value
    for part in reversed(parts):
        updates = {part: updates}

    try:
        config = manager.update(updates)
    except ValidationError as e:
        print(f"✗ Invalid value for {args.key}: {e}")
        return

    current = config.model_dump()
    for part in parts:
        current = current.get(part, {}) if isinstance(current, dict) else None
    print(f"✓ Set {args.key} = {current}")


def parse_value(value: str):
    """
    Parse a command-line value the way the config file would read it.

    "600" -> 600, "true" -> True, '["mistral", "claude"]' -> list,
    "${MY_KEY}" and anything else unparseable stay strings.
    """
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    return value if parsed is None else parsed
