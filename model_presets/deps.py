from dataclasses import dataclass
from typing import Any, Protocol

from model_presets._commands import CommandRegistry
from model_presets._debounce import DebouncedSaver
from model_presets.events import EventSource


class PresetService(Protocol):
    def get_all_presets(self) -> list[str]: ...


class TemplateRenderer(Protocol):
    def render(self, module: str, template: str, data: dict[str, Any]) -> str: ...


@dataclass
class HostDeps:
    """Host capabilities the extension consumes.

    Flat fields only. The host builds these once and hands them to the
    mapper and the settings panel.
    """

    presets: PresetService | None
    commands: CommandRegistry
    events: EventSource
    saver: DebouncedSaver
    renderer: TemplateRenderer | None = None
