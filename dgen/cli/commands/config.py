"""Settings commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
import yaml
from rich.console import Console

from dgen.config import SETTINGS_FILE, Settings, load_settings, save_settings

console = Console()


@click.group()
def config() -> None:
    """Project settings commands."""
    pass


def _settings_path(project_dir: str) -> Path:
    return Path(project_dir) / SETTINGS_FILE


def _load(path: Path) -> Settings:
    try:
        return load_settings(path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


@config.command("default")
@click.option("--project-dir", default=".", help="Project root directory")
@click.option("--force", is_flag=True, help="Overwrite an existing settings file")
def default(project_dir: str, force: bool) -> None:
    """Write the default settings to the project directory."""
    path = _settings_path(project_dir)
    if path.exists() and not force:
        console.print(f"[red]Error:[/red] Settings file already exists: {path} (use --force)")
        raise SystemExit(1)
    save_settings(Settings(), path)
    console.print(f"[green]Default settings written to[/green] {path}")
    console.print("Edit the file by hand or run `dgen config set KEY VALUE`")


@config.command("get")
@click.argument("key", required=False)
@click.option("--project-dir", default=".", help="Project root directory")
def get(key: Optional[str], project_dir: str) -> None:
    """Print the configured value for KEY (all settings when omitted).

    KEY is dotted, e.g. output.maxColumns.
    """
    settings = _load(_settings_path(project_dir))
    try:
        value = settings.get(key)
    except KeyError:
        console.print(f"[red]Error:[/red] No such key in config file: {key}")
        raise SystemExit(1)

    if isinstance(value, (dict, list)):
        dumped = yaml.dump({key or "config": value}, default_flow_style=False, sort_keys=False)
        console.print(dumped.rstrip(), highlight=False, markup=False)
    else:
        console.print(f"{key}: {yaml.safe_dump(value).splitlines()[0]}", highlight=False, markup=False)


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.option("--project-dir", default=".", help="Project root directory")
def set_value(key: str, value: str, project_dir: str) -> None:
    """Set KEY to VALUE in the project settings file.

    VALUE is read as YAML, so `120`, `true` and `[a, b]` keep their types.
    """
    path = _settings_path(project_dir)
    settings = _load(path)
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        parsed = value
    try:
        settings = settings.with_value(key, parsed)
    except KeyError:
        console.print(f"[red]Error:[/red] No such key in config file: {key}")
        raise SystemExit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    save_settings(settings, path)
    console.print(f"[green]Set[/green] {key} = {settings.get(key)!r}")
