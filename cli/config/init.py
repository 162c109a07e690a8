"""
ohseer config init command - Create the config file.
"""

from infra.config import ConfigManager, OhseerConfig, get_config_path


def cmd_init(args):
    """Write a config file with the built-in providers and ${ENV_VAR} key references."""
    manager = ConfigManager(get_config_path(args.config))

    if manager.exists() and not args.force:
        print(f"✗ Config already exists at: {manager.config_path}")
        print("  Use --force to overwrite")
        return

    config = OhseerConfig.with_defaults()
    manager.save(config)
    print(f"✓ Created config at: {manager.config_path}")

    print("\nConfiguration summary:")
    print(f"  Default providers: {', '.join(config.defaults.providers)}")
    print(f"  Default timeout: {config.defaults.timeout:g}s")

    print("\nAPI keys:")
    for key_name, value in config.api_keys.items():
        if config.resolve_api_key(key_name):
            print(f"  ✓ {key_name}: configured")
        else:
            print(f"  ○ {key_name}: not set (using {value})")

    print("\nProviders:")
    for name, provider in config.providers.items():
        status = "enabled" if provider.enabled else "disabled"
        model_info = f" ({provider.model})" if provider.model else ""
        print(f"  {name}: {provider.type}{model_info} [{status}]")
