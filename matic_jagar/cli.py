"""
CLI commands for matic-jagar configuration.

Provides the `matic-jagar-config` command for checking a config file
before the monitor starts, listing the search directories and the section
names accepted by --exclude.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config.defaults import LOG_FORMAT
from .config.loader import ConfigLoader, LoaderSettings, find_config_file, load_settings
from .errors import ConfigError, NotFoundError, ValidationError
from .models.config import Config

console = Console()


def _setup_logging(verbose: bool, settings: LoaderSettings) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _make_loader(paths: Tuple[Path, ...]) -> ConfigLoader:
    return ConfigLoader(load_settings(), search_paths=list(paths) or None)


@click.group()
@click.version_option(version=__version__, prog_name="matic-jagar-config")
def main():
    """
    matic-jagar configuration CLI.

    Check the monitor's config file and inspect where it is looked up.
    """
    pass


@main.command()
@click.option(
    '--exclude', '-e',
    multiple=True,
    help='Section or field to skip during validation (repeatable), e.g. Telegram'
)
@click.option(
    '--path', '-p', 'paths',
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory to search instead of the defaults (repeatable, first wins)'
)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def check(exclude: Tuple[str, ...], paths: Tuple[Path, ...], verbose: bool):
    """Load and validate the config file."""
    try:
        loader = _make_loader(paths)
        _setup_logging(verbose, loader.settings)
        config_file = loader.locate()
        loader.load(exclude)
    except ValidationError as e:
        table = Table(title=f"Config violations ({len(e.violations)})")
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Rule", style="yellow")
        table.add_column("Value", style="dim")
        for violation in e.violations:
            table.add_row(
                escape(violation.path),
                escape(violation.rule),
                escape(repr(violation.value))
            )
        console.print(table)
        console.print(f"[red]❌ Config validation failed with {len(e.violations)} violation(s)[/red]")
        sys.exit(1)
    except ConfigError as e:
        console.print(f"[red]❌ {escape(e.diagnostic())}[/red]")
        sys.exit(1)

    console.print(f"[green]✅ Config valid:[/green] {escape(str(config_file))}")
    if exclude:
        console.print(f"[yellow]⚠️  Not validated: {escape(', '.join(exclude))}[/yellow]")


@main.command()
@click.option(
    '--path', '-p', 'paths',
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory to search instead of the defaults (repeatable)'
)
def paths(paths: Tuple[Path, ...]):
    """Show the config search directories in precedence order."""
    try:
        loader = _make_loader(paths)
        search_paths = loader.get_search_paths()
    except ConfigError as e:
        console.print(f"[red]❌ {escape(e.diagnostic())}[/red]")
        sys.exit(1)

    table = Table(title="Config search path")
    table.add_column("#", style="cyan", no_wrap=True)
    table.add_column("Directory", style="white")
    table.add_column("Config file", style="dim")

    selected: Optional[Path] = None
    for index, directory in enumerate(search_paths, start=1):
        try:
            found = find_config_file([directory], loader.settings.config_name)
        except NotFoundError:
            table.add_row(str(index), escape(str(directory)), "[dim]none[/dim]")
            continue

        if selected is None:
            selected = found
            table.add_row(str(index), escape(str(directory)), f"[green]{escape(found.name)} (loaded)[/green]")
        else:
            table.add_row(str(index), escape(str(directory)), f"{escape(found.name)} (shadowed)")

    console.print(table)
    if selected is None:
        console.print("[red]❌ No config file found[/red]")
        sys.exit(1)


@main.command()
def sections():
    """List config sections and their file keys."""
    table = Table(title="Config sections")
    table.add_column("Section", style="cyan", no_wrap=True)
    table.add_column("File key", style="white")

    for attr, key in Config.sections():
        table.add_row(attr, key)

    console.print(table)


if __name__ == "__main__":
    main()
