"""
ohseer providers command - List providers and whether they can run.
"""

from rich.console import Console
from rich.table import Table

from infra.config import get_config
from pipeline.ocr_pages.provider import list_providers


def cmd_providers(args):
    """List registered providers with their credential status."""
    config = get_config(args.config)
    credentials = config.credential_status()
    console = Console()

    table = Table(title="OCR Providers")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Model")
    table.add_column("Timeout")
    table.add_column("Credentials")

    for name in list_providers(config):
        provider = config.get_provider(name)
        if provider is None:
            table.add_row(name, "-", "-", "-", "[dim]not configured[/dim]")
            continue

        if not provider.enabled:
            status = "[dim]disabled[/dim]"
        elif credentials.get(name):
            status = "[green]✓ available[/green]"
        else:
            status = f"[yellow]○ missing ({config.key_hint(name)})[/yellow]"

        table.add_row(name, provider.type, provider.model or "-", f"{config.provider_timeout(name):g}s", status)

    console.print(table)
    console.print(f"Default fallback order: {', '.join(config.defaults.providers)}")


def setup_parser(subparsers):
    providers_parser = subparsers.add_parser(
        'providers',
        help='List OCR providers and credential status'
    )
    providers_parser.set_defaults(func=cmd_providers)
