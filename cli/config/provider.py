"""
ohseer config provider commands - Manage OCR providers.
"""

from infra.config import ConfigManager, get_config_path
from pipeline.ocr_pages.provider import is_type_registered, list_provider_types


def cmd_provider_add(args):
    """Add or update a provider."""
    manager = ConfigManager(get_config_path(args.config))

    if not manager.exists():
        print(f"✗ No config found at: {manager.config_path}")
        print("  Run 'ohseer config init' to create one")
        return

    if not is_type_registered(args.type):
        print(f"✗ Unknown provider type: {args.type}")
        print(f"  Available types: {', '.join(list_provider_types())}")
        return

    config = manager.load()
    is_update = args.name in config.providers
    enabled = not args.disabled

    manager.add_provider(
        name=args.name,
        provider_type=args.type,
        model=args.model,
        api_key_refs=args.api_key_refs,
        enabled=enabled,
    )

    action = "Updated" if is_update else "Added"
    print(f"✓ {action} provider: {args.name}")
    print(f"  Type: {args.type}")
    if args.model:
        print(f"  Model: {args.model}")
    if args.api_key_refs:
        print(f"  Keys: {', '.join(args.api_key_refs)}")
    print(f"  Status: {'enabled' if enabled else 'disabled'}")

    if not is_update:
        print(f"\nTo try this provider first by default, run:")
        print(f"  ohseer config set defaults.providers '[\"{args.name}\", \"tensorlake\", \"mistral\"]'")
