"""
ohseer config show command - Display configuration.
"""

import json

from infra.config import ConfigManager, get_config_path


def cmd_config_show(args):
    """Show configuration."""
    manager = ConfigManager(get_config_path(args.config))

    if not manager.exists():
        print(f"✗ No config found at: {manager.config_path}")
        print("  Run 'ohseer config init' to create one")
        return

    config = manager.load()

    if args.json:
        data = config.model_dump()
        if args.reveal_keys:
            data['api_keys'] = {
                k: config.resolve_api_key(k) for k in data['api_keys']
            }
        print(json.dumps(data, indent=2, default=str))
        return

    print(f"\n📋 ohseer Configuration")
    print(f"   Path: {manager.config_path}\n")

    print("API Keys:")
    for key_name in config.api_keys:
        resolved = config.resolve_api_key(key_name)
        if args.reveal_keys:
            display = resolved or "(not set)"
        else:
            display = _mask_key(resolved)
        print(f"  {key_name}: {display}")

    print("\nProviders:")
    for name, provider in config.providers.items():
        status = "✓" if provider.enabled else "○"
        model_info = f" model={provider.model}" if provider.model else ""
        keys_info = f" keys={','.join(provider.api_key_refs)}" if provider.api_key_refs else ""
        print(f"  {status} {name}: type={provider.type}{model_info}{keys_info} timeout={config.provider_timeout(name):g}s")

    print("\nDefaults:")
    print(f"  providers: {', '.join(config.defaults.providers)}")
    print(f"  timeout: {config.defaults.timeout:g}s")
    print()


def _mask_key(value: str) -> str:
    """Mask an API key for display."""
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "****"
    return value[:4] + "..." + value[-4:]
