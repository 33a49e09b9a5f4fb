"""Updater registry CLI — validate, register, show and remove registrations."""

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from updater_registry import __version__
from updater_registry.errors import RegistrationError

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
@click.option("--store-root", "-s", default=None, help="Override the store root directory")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, store_root: str | None, verbose: bool):
    """Updater registry — manage updater registration descriptors.

    Descriptors are validated against the registration schema before they
    are stored. Registrations are keyed by OEM and updater name.
    """
    from pathlib import Path

    from updater_registry.config import load_settings

    try:
        settings = load_settings(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    if store_root:
        settings.store_root = Path(store_root)

    logging.basicConfig(
        level="DEBUG" if verbose else settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    ctx.obj = settings


def _manager(ctx: click.Context):
    from updater_registry.manager import RegistrationManager

    return RegistrationManager.from_settings(ctx.obj)


def _fail(error: RegistrationError):
    console.print(f"  [red]x[/] [{error.kind.value}] {escape(error.detail)}")
    sys.exit(1)


# ── Validate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("descriptor_path")
@click.pass_context
def validate(ctx: click.Context, descriptor_path: str):
    """Validate a registration descriptor without storing it."""
    console.print(f"\n[bold blue]Updater registry[/] — Validating: {descriptor_path}\n")

    try:
        result = _manager(ctx).validate(descriptor_path)
    except RegistrationError as e:
        _fail(e)

    if not result.passed:
        console.print("[red]Validation FAILED:[/]")
        _fail(RegistrationError(result.error.kind, result.error.message))
    console.print("  [green]v[/] Descriptor is valid")


# ── Register ─────────────────────────────────────────────────────────


@main.command()
@click.argument("descriptor_path")
@click.pass_context
def register(ctx: click.Context, descriptor_path: str):
    """Validate a descriptor and add it to the store."""
    console.print(f"\n[bold blue]Updater registry[/] — Registering: {descriptor_path}\n")

    try:
        summary = _manager(ctx).create(descriptor_path)
    except RegistrationError as e:
        _fail(e)

    console.print(f"  Registered: [cyan]{summary.key}[/]")
    _print_summary(summary)


# ── Show ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--oem", default=None, help="OEM name (requires --updater)")
@click.option("--updater", default=None, help="Updater name (requires --oem)")
@click.option("--json", "as_json", is_flag=True, help="Print summaries as JSON")
@click.pass_context
def show(ctx: click.Context, oem: str | None, updater: str | None, as_json: bool):
    """Show one registration, or list all of them."""
    try:
        found = _manager(ctx).read(oem, updater)
    except RegistrationError as e:
        _fail(e)

    if as_json:
        if isinstance(found, list):
            payload = [s.to_document() for s in found]
        else:
            payload = found.to_document()
        click.echo(json.dumps(payload, indent=2))
        return

    if not isinstance(found, list):
        _print_summary(found)
        return

    if not found:
        console.print("[yellow]No registrations found.[/]")
        return

    table = Table(title=f"Registrations ({len(found)})")
    table.add_column("Key", style="cyan")
    table.add_column("Version", justify="right")
    table.add_column("Source")
    table.add_column("Scenario")
    table.add_column("PFN")

    for summary in found:
        table.add_row(
            summary.key,
            str(summary.registration_version),
            summary.source,
            summary.scenario,
            summary.pfn,
        )

    console.print(table)


# ── Remove ───────────────────────────────────────────────────────────


@main.command()
@click.argument("oem_name")
@click.argument("updater_name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def remove(ctx: click.Context, oem_name: str, updater_name: str, yes: bool):
    """Remove a registration and its directory."""
    if not yes:
        click.confirm(f"Remove registration {oem_name}/{updater_name}?", abort=True)

    try:
        _manager(ctx).delete(oem_name, updater_name)
    except RegistrationError as e:
        _fail(e)

    console.print(f"  [green]Removed[/] {oem_name}/{updater_name}")


# ── Schema ───────────────────────────────────────────────────────────


@main.command(name="schema")
def dump_schema():
    """Print the JSON Schema for registration descriptors."""
    from updater_registry.spec.schema import get_schema

    click.echo(json.dumps(get_schema(), indent=2))


def _print_summary(summary):
    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    for name, value in summary.to_document().items():
        shown = "[dim]null[/]" if value is None else json.dumps(value)
        table.add_row(name, shown)
    console.print(table)


if __name__ == "__main__":
    main()
