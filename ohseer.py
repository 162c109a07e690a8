#!/usr/bin/env python3
"""
ohseer - OCR documents through external providers with automatic fallback

Commands:
    ohseer ocr <file>                 OCR a document (fallback across providers)
    ohseer providers                  List providers and credential status
    ohseer config init                Create the config file
    ohseer config show                Show the active config
    ohseer config set <key> <value>   Set a config value
    ohseer config provider add ...    Add or update a provider
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from cli import main as cli_main


def main():
    load_dotenv()
    cli_main()


if __name__ == "__main__":
    main()
