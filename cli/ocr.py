"""
ohseer ocr command - OCR a document with provider fallback.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from infra.config import get_config
from infra.pipeline import create_logger
from pipeline.ocr_pages import run_ocr


def parse_pages(value: Optional[str]) -> Optional[List[int]]:
    """
    Parse a page selection like "1,3-5" into [1, 3, 4, 5].

    Raises:
        ValueError: On malformed ranges or page numbers below 1
    """
    if not value:
        return None

    pages = set()
    for part in value.split(','):
        part = part.strip()
        if not part:
            continue
        if '-' in part:
            start, end = (int(x) for x in part.split('-', 1))
            if start > end:
                raise ValueError(f"Invalid page range: {part}")
            pages.update(range(start, end + 1))
        else:
            pages.add(int(part))

    if any(page < 1 for page in pages):
        raise ValueError("Page numbers start at 1")
    return sorted(pages)


def cmd_ocr(args):
    """OCR a document and print or save the result."""
    config = get_config(args.config)

    if args.timeout:
        config.defaults.timeout = args.timeout
        for provider in config.providers.values():
            provider.timeout = args.timeout

    try:
        pages = parse_pages(args.pages)
    except ValueError as e:
        print(f"✗ Invalid --pages value: {e}", file=sys.stderr)
        sys.exit(2)

    pipeline_logger = None
    if args.log_dir:
        pipeline_logger = create_logger(Path(args.document).stem, "ocr", log_dir=Path(args.log_dir))

    try:
        result = run_ocr(
            args.document,
            providers=args.providers,
            pages=pages,
            config=config,
            extract_pages=not args.raw,
            include_types=args.include_types,
            pipeline_logger=pipeline_logger,
        )
    finally:
        if pipeline_logger:
            pipeline_logger.close()

    data = result.to_dict()
    output = data if args.raw else {k: v for k, v in data.items() if k != 'raw'}

    if args.output:
        Path(args.output).write_text(json.dumps(output, indent=2, default=str))
    else:
        print(json.dumps(output, indent=2, default=str))

    _print_summary(result, args)


def _print_summary(result, args):
    console = Console(stderr=True)

    table = Table(title=f"OCR: {Path(args.document).name}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Provider", result.provider)
    if result.normalized:
        table.add_row("Pages", str(len(result.pages)))
    else:
        table.add_row("Pages", "raw response")
    table.add_row("Failed attempts", str(len(result.error_log)))
    if args.output:
        table.add_row("Output", str(args.output))
    console.print(table)

    for record in result.error_log:
        console.print(f"  [yellow]○[/yellow] {record.provider}: {record.reason}")


def setup_parser(subparsers):
    """Setup ocr command parser."""
    ocr_parser = subparsers.add_parser(
        'ocr',
        help='OCR a document with automatic provider fallback'
    )
    ocr_parser.add_argument(
        'document',
        help='PDF or image file (or an http(s) URL for providers that accept one)'
    )
    ocr_parser.add_argument(
        '-p', '--provider',
        dest='providers',
        action='append',
        help='Provider to try, in order; repeat for fallback (default: config defaults)'
    )
    ocr_parser.add_argument(
        '--pages',
        help='Pages to extract, e.g. "1,3-5" (default: all)'
    )
    ocr_parser.add_argument(
        '--raw',
        action='store_true',
        help='Output the provider response instead of normalized pages'
    )
    ocr_parser.add_argument(
        '--timeout',
        type=float,
        help='Per-provider timeout in seconds (overrides config)'
    )
    ocr_parser.add_argument(
        '--output', '-o',
        help='Write JSON result to this file (default: stdout)'
    )
    ocr_parser.add_argument(
        '--log-dir',
        help='Write a JSONL attempt log (ocr.jsonl) to this directory'
    )
    ocr_parser.add_argument(
        '--include-types',
        nargs='+',
        metavar='TYPE',
        help='Fragment types to keep even where a provider drops them by default (page_number, page_footer)'
    )
    ocr_parser.set_defaults(func=cmd_ocr)
