"""Directory-backed preset storage and the /preset command.

Each preset is a ``<name>.json`` file holding generation parameters. The
manager only tracks which preset is currently selected; applying the
parameters to a model client is the host's business.
"""

import json
import logging
from pathlib import Path
from typing import Any

from model_presets._commands import SlashCommand
from model_presets.display import console
from model_presets.events import PRESET_CHANGED, EventSource

logger = logging.getLogger(__name__)

PRESET_COMMAND = "preset"


class PresetManager:
    def __init__(self, presets_dir: Path | None = None):
        from model_presets.config import PRESETS_DIR

        self.presets_dir = Path(presets_dir) if presets_dir is not None else PRESETS_DIR
        self.selected: str | None = None

    def get_all_presets(self) -> list[str]:
        """Preset names sorted case-insensitively, so callers see a stable order."""
        if not self.presets_dir.is_dir():
            return []
        return sorted((p.stem for p in self.presets_dir.glob("*.json")), key=str.casefold)

    def find_preset(self, name: str) -> str | None:
        """Exact name first, then a case-insensitive match."""
        names = self.get_all_presets()
        if name in names:
            return name
        folded = name.casefold()
        for candidate in names:
            if candidate.casefold() == folded:
                return candidate
        return None

    def load_preset(self, name: str) -> dict[str, Any]:
        path = self.presets_dir / f"{name}.json"
        with open(path, "r") as f:
            return json.load(f)

    def save_preset(self, name: str, params: dict[str, Any]) -> Path:
        self.presets_dir.mkdir(parents=True, exist_ok=True)
        path = self.presets_dir / f"{name}.json"
        path.write_text(json.dumps(params, indent=2))
        return path

    def select_preset(self, name: str) -> str | None:
        found = self.find_preset(name)
        if found is not None:
            self.selected = found
            logger.info(f"Selected preset {found}")
        return found


def make_preset_command(manager: PresetManager, events: EventSource | None = None) -> SlashCommand:
    """Build the /preset command bound to a PresetManager.

    With no argument it returns the current preset name. Otherwise it selects
    the named preset and returns its name, or "" when it does not exist.
    """

    async def _cmd_preset(args: dict[str, str], value: str) -> str:
        quiet = args.get("quiet", "false").lower() == "true"
        name = value.strip()
        if not name:
            return manager.selected or ""

        found = manager.select_preset(name)
        if found is None:
            if not quiet:
                console.print(f"[bold red]Preset not found:[/bold red] {name}")
            return ""

        if events is not None:
            await events.emit(PRESET_CHANGED, found)
        if not quiet:
            console.print(f"[success]Preset switched to: [accent]{found}[/accent][/success]")
        return found

    return SlashCommand(PRESET_COMMAND, "Select a preset by name, or show the current one", _cmd_preset)
