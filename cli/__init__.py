import argparse
import logging
import sys

import cli.config
import cli.ocr
import cli.providers
from infra.ocr import ConfigurationError, AllProvidersFailedError


def create_parser():
    parser = argparse.ArgumentParser(
        prog='ohseer',
        description='ohseer - Normalized multi-provider document OCR',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Configuration (run first!)
  ohseer config init                       # Create ~/.ohseer/config.yaml
  ohseer config show                       # Show current config
  ohseer config set defaults.providers '["mistral", "claude"]'
  ohseer config provider add my-claude --type claude --model claude-opus-4-1 --key anthropic
  ohseer providers                         # Which providers have credentials

  # OCR
  ohseer ocr paper.pdf
  ohseer ocr paper.pdf -p mistral -p claude --pages 1,3-5
  ohseer ocr paper.pdf --raw --output paper.raw.json
  ohseer ocr paper.pdf --include-types page_footer --log-dir logs/
"""
    )
    parser.add_argument(
        '--config',
        help='Config file (default: $OHSEER_CONFIG or ~/.ohseer/config.yaml)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Show debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command namespace')
    subparsers.required = True

    cli.ocr.setup_parser(subparsers)
    cli.providers.setup_parser(subparsers)
    cli.config.setup_parser(subparsers)

    return parser


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
        stream=sys.stderr,
    )

    try:
        args.func(args)
    except (ConfigurationError, AllProvidersFailedError, FileNotFoundError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)
