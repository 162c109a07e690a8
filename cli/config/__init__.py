"""
Config CLI commands.

Commands for managing the ohseer config file.
"""

from cli.config.init import cmd_init
from cli.config.show import cmd_config_show
from cli.config.set import cmd_config_set
from cli.config.provider import cmd_provider_add


def setup_parser(subparsers):
    """Setup config command parser."""
    config_parser = subparsers.add_parser(
        'config',
        help='Manage ohseer configuration'
    )
    config_subparsers = config_parser.add_subparsers(
        dest='config_command',
        help='Config command'
    )
    config_subparsers.required = True

    # ohseer config init
    init_parser = config_subparsers.add_parser(
        'init',
        help='Create the config file with the built-in providers'
    )
    init_parser.add_argument(
        '--force',
        action='store_true',
        help='Overwrite existing config'
    )
    init_parser.set_defaults(func=cmd_init)

    # ohseer config show
    show_parser = config_subparsers.add_parser(
        'show',
        help='Show configuration'
    )
    show_parser.add_argument(
        '--json',
        action='store_true',
        help='Output as JSON'
    )
    show_parser.add_argument(
        '--reveal-keys',
        action='store_true',
        help='Show API key values (default: hidden)'
    )
    show_parser.set_defaults(func=cmd_config_show)

    # ohseer config set <key> <value>
    set_parser = config_subparsers.add_parser(
        'set',
        help='Set a configuration value'
    )
    set_parser.add_argument(
        'key',
        help='Config key (e.g., defaults.timeout, api_keys.mistral)'
    )
    set_parser.add_argument(
        'value',
        help='Value to set'
    )
    set_parser.set_defaults(func=cmd_config_set)

    # ohseer config provider add <name> --type <type> [--model <model>] [--key <ref>...]
    provider_parser = config_subparsers.add_parser(
        'provider',
        help='Manage OCR providers'
    )
    provider_subparsers = provider_parser.add_subparsers(
        dest='provider_command',
        help='Provider command'
    )
    provider_subparsers.required = True

    provider_add_parser = provider_subparsers.add_parser(
        'add',
        help='Add or update a provider'
    )
    provider_add_parser.add_argument(
        'name',
        help='Provider name (e.g., my-claude)'
    )
    provider_add_parser.add_argument(
        '--type',
        required=True,
        help='Provider type (tensorlake, mistral-ocr, claude, textract)'
    )
    provider_add_parser.add_argument(
        '--model',
        help='Model identifier (mistral-ocr, claude)'
    )
    provider_add_parser.add_argument(
        '--key',
        dest='api_key_refs',
        action='append',
        help='api_keys entry the provider needs; repeat for several'
    )
    provider_add_parser.add_argument(
        '--disabled',
        action='store_true',
        help='Add provider in disabled state'
    )
    provider_add_parser.set_defaults(func=cmd_provider_add)


__all__ = [
    'setup_parser',
    'cmd_init',
    'cmd_config_show',
    'cmd_config_set',
    'cmd_provider_add',
]
