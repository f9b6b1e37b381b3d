import asyncio
import logging
from pathlib import Path

import typer

from model_presets._commands import CommandRegistry
from model_presets._debounce import DebouncedSaver
from model_presets.config import SettingsStore, Settings
from model_presets.deps import HostDeps
from model_presets.display import (
    console, display_error, display_info, display_status,
    render_mappings_table, render_settings_table, toast_success,
)
from model_presets.events import CHATCOMPLETION_MODEL_CHANGED, PRESET_CHANGED, EventSource
from model_presets.mapper import PresetMapper
from model_presets.matcher import extract_keywords
from model_presets.panel import JinjaTemplateRenderer, SettingsPanel
from model_presets.presets import PresetManager, make_preset_command

app = typer.Typer(
    help="Model Presets - switch generation presets automatically when the model changes",
    context_settings={"help_option_names": ["--help", "-h"]},
)


def build_host(
    settings_file: Path | None = None,
    presets_dir: Path | None = None,
) -> tuple[HostDeps, Settings, PresetManager]:
    """Wire the reference host: preset dir, /preset command, events, settings file."""
    store = SettingsStore(settings_file)
    settings = store.load()
    manager = PresetManager(presets_dir)
    events = EventSource()
    commands = CommandRegistry()
    commands.register(make_preset_command(manager, events))
    deps = HostDeps(
        presets=manager,
        commands=commands,
        events=events,
        saver=DebouncedSaver(store, settings),
        renderer=JinjaTemplateRenderer(),
    )
    return deps, settings, manager


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log matching decisions"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def keywords(model: str = typer.Argument(..., help="Model name, e.g. claude-sonnet-4-5")):
    """Show the keywords a model name is matched with."""
    words = extract_keywords(model)
    if not words:
        console.print("[dim]No usable keywords.[/dim]")
        return
    console.print(" ".join(words))


@app.command()
def presets():
    """List available presets."""
    _, settings, manager = build_host()
    names = manager.get_all_presets()
    if not names:
        console.print(f"[yellow]No presets found in {manager.presets_dir}[/yellow]")
        return
    for name in names:
        marker = " [dim](fallback)[/dim]" if name == settings.fallback_preset else ""
        console.print(f"  [accent]{name}[/accent]{marker}")


@app.command()
def match(
    model: str = typer.Argument(..., help="Model name to resolve"),
    threshold: float = typer.Option(None, "--threshold", "-t", min=0.0, max=1.0, help="Override matchThreshold"),
):
    """Show which preset a model would get, without applying it."""
    deps, settings, _ = build_host()
    if threshold is not None:
        settings.match_threshold = threshold
    resolution = PresetMapper(deps, settings).resolve(model)
    display_info(f"Keywords: {', '.join(resolution.keywords) or '(none)'}")
    if resolution.matched:
        display_status(f"Matched preset: {resolution.matched}", style="success")
    elif resolution.selected:
        display_status(f"No match, fallback: {resolution.selected}", style="warning")
    else:
        display_status("No match and no fallback preset", style="warning")


async def _switch(deps: HostDeps, settings: Settings, model: str) -> str | None:
    """Emit one model-change event through the reference host; return the applied preset."""
    applied: list[str] = []
    deps.events.on(PRESET_CHANGED, applied.append)
    mapper = PresetMapper(deps, settings)
    await mapper.install()
    await deps.events.emit(CHATCOMPLETION_MODEL_CHANGED, model)
    deps.saver.flush()
    if applied and model in settings.last_mappings:
        return applied[-1]
    return None


@app.command()
def switch(model: str = typer.Argument(..., help="New model name")):
    """Simulate a model change: pick, apply and record a preset."""
    deps, settings, _ = build_host()
    if not settings.enabled:
        console.print("[yellow]Extension is disabled, nothing to do.[/yellow]")
        return
    applied = asyncio.run(_switch(deps, settings, model))
    if applied is None:
        display_error(f"No preset applied for {model}", hint="Check the preset directory and fallback preset.")
        raise typer.Exit(code=1)
    console.print(f"[success]{model} → {applied}[/success]")


@app.command()
def run(command: str = typer.Argument(..., help='Slash command, e.g. "/preset Claude" or "/help"')):
    """Run a host slash command against the reference host."""
    deps, _, _ = build_host()
    handled, _ = asyncio.run(deps.commands.dispatch(command.strip()))
    if not handled:
        display_error(f"Not a slash command: {command}", hint="Commands start with /, try /help.")
        raise typer.Exit(code=1)


@app.command()
def mappings():
    """Show the last preset applied per model."""
    _, settings, _ = build_host()
    if not settings.last_mappings:
        console.print("[dim]No mappings recorded yet.[/dim]")
        return
    console.print(render_mappings_table(settings.last_mappings))


@app.command()
def clear():
    """Clear mapping history."""
    deps, settings, _ = build_host()
    settings.last_mappings = {}
    deps.saver.flush()
    toast_success("Mapping history cleared", "Models Presets")


@app.command()
def config(
    enabled: bool = typer.Option(None, "--enabled/--disabled", help="Turn automatic switching on or off"),
    fallback: str = typer.Option(None, "--fallback", "-f", help="Preset used when nothing matches"),
    threshold: float = typer.Option(None, "--threshold", "-t", help="Match threshold 0.0-1.0 (lower = stricter)"),
):
    """Show settings, or update them with options."""
    deps, settings, manager = build_host()
    panel = SettingsPanel(deps, settings)
    if enabled is not None:
        panel.set_enabled(enabled)
    if fallback is not None:
        if manager.find_preset(fallback) is None:
            console.print(f"[yellow]Warning: no preset named {fallback!r} exists yet.[/yellow]")
        panel.set_fallback_preset(fallback)
    if threshold is not None:
        panel.set_match_threshold(threshold)
    console.print(render_settings_table(settings))


if __name__ == "__main__":
    app()
