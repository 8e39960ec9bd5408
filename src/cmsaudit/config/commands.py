"""
Configuration management CLI commands.

Manages cmsaudit settings stored in the global config.yaml.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cmsaudit.core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT,
    get_global_config_path,
    load_global_config,
    lookup,
    save_global_config,
)

console = Console()

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def _parse_bool(raw: str) -> bool:
    text = raw.strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(raw)


def _parse_url(raw: str) -> str:
    url = raw.strip()
    if not url.startswith(("http://", "https://")):
        raise ValueError(raw)
    return url


@dataclass(frozen=True)
class Setting:
    """One known key in the config file."""

    key: str
    default: Any
    parse: Callable[[str], Any]
    type_name: str
    description: str
    secret: bool = False

    def display(self, value: Any) -> str:
        """Render a value for the terminal, masking secrets."""
        if value is None:
            return str(self.default)
        if self.secret:
            return mask_secret(value)
        return str(value)


CONFIG_SCHEMA: dict[str, Setting] = {
    s.key: s
    for s in (
        Setting("api.token", None, str.strip, "str", "Read API token (CMSAUDIT_TOKEN overrides)", secret=True),
        Setting("api.base_url", DEFAULT_BASE_URL, _parse_url, "URL", "API root URL"),
        Setting("api.max_retries", DEFAULT_MAX_RETRIES, int, "int", "Attempts per request before a scope fails"),
        Setting("api.timeout", DEFAULT_TIMEOUT, float, "float", "Request timeout in seconds"),
        Setting("scan.max_workers", DEFAULT_MAX_WORKERS, int, "int", "Scopes fetched in parallel"),
        Setting("scan.preview", False, _parse_bool, "bool", "Include draft content by default"),
    )
}


def mask_secret(value: Any) -> str:
    """Show only the last four characters of a secret."""
    text = str(value)
    if len(text) <= 4:
        return "****"
    return "*" * (len(text) - 4) + text[-4:]


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value by dotted key."""
    return lookup(load_global_config(), key, default)


def set_config_value(key: str, value: Any) -> None:
    """Set a configuration value by dotted key, creating sections as needed."""
    config_data = load_global_config()
    *sections, name = key.split(".")

    section = config_data
    for part in sections:
        if not isinstance(section.get(part), dict):
            section[part] = {}
        section = section[part]

    section[name] = value
    save_global_config(config_data)


def unset_config_value(key: str) -> bool:
    """Remove a dotted key from the config file.

    Returns:
        True if the key was present and removed.
    """
    config_data = load_global_config()
    *sections, name = key.split(".")

    section = lookup(config_data, ".".join(sections)) if sections else config_data
    if not isinstance(section, dict) or name not in section:
        return False

    del section[name]
    save_global_config(config_data)
    return True


def _find_setting(key: str) -> Setting | None:
    """Look up a known setting, listing the valid keys when it is unknown."""
    setting = CONFIG_SCHEMA.get(key)
    if setting is None:
        console.print(f"[red]Unknown setting: {escape(key)}[/red]")
        console.print("\nAvailable settings:")
        for name in CONFIG_SCHEMA:
            console.print(f"  - {name}")
    return setting


@click.group()
def config():
    """Manage cmsaudit configuration.

    Settings are stored in ~/.config/cmsaudit/config.yaml.
    """
    pass


@config.command(name="show")
@click.option("--all", "show_all", is_flag=True, help="Show all settings including defaults")
def show_cmd(show_all: bool):
    """Show current configuration.

    Without --all, only shows settings that differ from defaults.
    """
    config_data = load_global_config()
    config_path = get_global_config_path()

    rows = []
    for setting in CONFIG_SCHEMA.values():
        current = lookup(config_data, setting.key)
        if show_all or (current is not None and current != setting.default):
            rows.append((setting, current))

    if not rows:
        console.print("[dim]No custom configuration set. Using defaults.[/dim]")
        console.print(f"[dim]Config file: {config_path}[/dim]")
        console.print("\n[dim]Use 'cmsaudit config show --all' to see all settings.[/dim]")
        return

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value", style="green")
    table.add_column("Type", style="dim")
    table.add_column("Description", style="dim")

    for setting, current in rows:
        value = escape(setting.display(current))
        if current is None:
            value = f"[dim]{value}[/dim]"
        table.add_row(setting.key, value, setting.type_name, setting.description)

    console.print(table)
    console.print(f"\n[dim]Config file: {config_path}[/dim]")


@config.command(name="get")
@click.argument("key")
def get_cmd(key: str):
    """Get a configuration value.

    Examples:
        cmsaudit config get api.max_retries
        cmsaudit config get scan.preview
    """
    setting = _find_setting(key)
    if setting is None:
        return

    value = get_config_value(key)
    suffix = " [dim](default)[/dim]" if value is None else ""
    console.print(f"{key} = {escape(setting.display(value))}{suffix}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
def set_cmd(key: str, value: str):
    """Set a configuration value.

    Examples:
        cmsaudit config set api.token abc123
        cmsaudit config set scan.max_workers 8
        cmsaudit config set scan.preview yes
    """
    setting = _find_setting(key)
    if setting is None:
        return

    try:
        parsed = setting.parse(value)
    except ValueError:
        console.print(f"[red]Invalid value type. Expected {setting.type_name}[/red]")
        return

    set_config_value(key, parsed)
    console.print(f"[green]Set {key} = {escape(setting.display(parsed))}[/green]")


@config.command(name="reset")
@click.argument("key", required=False)
@click.option("--all", "reset_all", is_flag=True, help="Reset all settings to defaults")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
def reset_cmd(key: str | None, reset_all: bool, force: bool):
    """Reset configuration to defaults.

    Examples:
        cmsaudit config reset api.timeout   # Reset single setting
        cmsaudit config reset --all         # Reset all settings
    """
    if reset_all:
        if not force and not click.confirm("Reset all settings to defaults?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

        get_global_config_path().unlink(missing_ok=True)
        console.print("[green]All settings reset to defaults[/green]")
        return

    if not key:
        console.print("[red]Specify a key or use --all to reset all settings[/red]")
        return

    setting = _find_setting(key)
    if setting is None:
        return

    if unset_config_value(key):
        console.print(f"[green]Reset {key} to default ({setting.display(None)})[/green]")
    else:
        console.print(f"[dim]{key} is already at default[/dim]")
