"""Settings CLI commands for Plan Cost.

Manages settings.json - plan data directory and category file paths.
"""

import click
from pathlib import Path

from plancost.sdk import (
    get_plan_years_dir,
    get_setting,
    get_settings_path,
    load_settings,
    set_setting,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - plan_years_dir: directory of <year>.yaml plan catalogs
    - categories: path to a categories YAML file
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective paths:")
    click.echo(f"  plan_years_dir: {get_plan_years_dir()}")


def _set_path_setting(key: str, path, clear: bool, must_be_dir: bool) -> None:
    if clear:
        set_setting(key, None)
        click.echo(f"Cleared {key} (using bundled default)")
        return

    if not path:
        current = get_setting(key)
        click.echo(f"{key}: {current}" if current else f"{key}: not set (using bundled default)")
        return

    resolved = Path(path).expanduser().resolve()
    if must_be_dir and not resolved.is_dir():
        raise click.ClickException(f"Not a directory: {resolved}")
    if not must_be_dir and not resolved.is_file():
        raise click.ClickException(f"Not a file: {resolved}")

    saved = set_setting(key, str(resolved))
    click.echo(f"Set {key} to {resolved}")
    click.echo(f"Saved to {saved}")


@settings.command("plan-years-dir")
@click.argument("path", required=False, type=click.Path())
@click.option("--clear", is_flag=True, help="Clear custom plan_years_dir, revert to bundled data")
def settings_plan_years_dir(path, clear):
    """Set or clear the directory holding <year>.yaml plan catalogs."""
    _set_path_setting("plan_years_dir", path, clear, must_be_dir=True)


@settings.command("categories")
@click.argument("path", required=False, type=click.Path())
@click.option("--clear", is_flag=True, help="Clear custom categories file, revert to bundled data")
def settings_categories(path, clear):
    """Set or clear the categories YAML file."""
    _set_path_setting("categories", path, clear, must_be_dir=False)
