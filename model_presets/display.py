"""Themed terminal output: console, styles and small display helpers."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from model_presets.config import Settings

_THEME = {
    "status": "dark_orange",
    "info": "blue",
    "accent": "bold blue",
    "error": "bold red",
    "success": "green",
    "warning": "orange3",
    "hint": "dim",
}

# -- Console (single instance, themed) --------------------------------------

console = Console(theme=Theme(_THEME))

# -- Indicators ------------------------------------------------------------

BULLET  = "▸"
SUCCESS = "✦"
ERROR   = "✖"
INFO    = "◈"


# -- Display helpers -------------------------------------------------------


def display_status(message: str, style: str | None = None) -> None:
    """Themed bullet + message."""
    s = style or "status"
    console.print(f"[{s}]{BULLET} {message}[/{s}]")


def display_error(message: str, hint: str | None = None) -> None:
    """Red-bordered panel with optional recovery hint."""
    body = f"[bold red]{ERROR} {message}[/bold red]"
    if hint:
        body += f"\n[dim]{hint}[/dim]"
    console.print(Panel(body, border_style="red", title="Error", title_align="left"))


def display_info(message: str) -> None:
    console.print(f"[info]{INFO} {message}[/info]")


def toast_success(message: str, title: str) -> None:
    """Terminal stand-in for the host's success toast."""
    console.print(f"[success]{SUCCESS} {title}: {message}[/success]")


def render_mappings_table(mappings: dict[str, str]) -> Table:
    table = Table(title="Model → Preset", border_style="accent", expand=False)
    table.add_column("Model", style="accent")
    table.add_column("Preset")
    for model, preset in sorted(mappings.items()):
        table.add_row(model, preset)
    return table


def render_settings_table(settings: Settings) -> Table:
    table = Table(title="Models Presets", border_style="accent", expand=False)
    table.add_column("Setting", style="accent")
    table.add_column("Value")
    table.add_row("enabled", "yes" if settings.enabled else "no")
    table.add_row("fallbackPreset", settings.fallback_preset or "[dim](none)[/dim]")
    table.add_row("matchThreshold", f"{settings.match_threshold:.2f}")
    table.add_row("lastMappings", str(len(settings.last_mappings)))
    return table
