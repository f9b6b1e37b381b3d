"""Settings panel: template rendering and control handlers.

Each handler mutates the shared Settings object and schedules a debounced
save. The rendered HTML is kept on the panel for the host to mount.
"""

import inspect
import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, PrefixLoader, StrictUndefined, select_autoescape

from model_presets.config import Settings
from model_presets.deps import HostDeps
from model_presets.display import toast_success

logger = logging.getLogger(__name__)

MODULE_NAME = "model-presets"
TEMPLATES_DIR = Path(__file__).parent / "templates"


class JinjaTemplateRenderer:
    """Renders ``<module>/<template>.html`` from per-module template dirs."""

    def __init__(self, template_dirs: dict[str, Path] | None = None):
        dirs = template_dirs or {MODULE_NAME: TEMPLATES_DIR}
        self._env = Environment(
            loader=PrefixLoader({module: FileSystemLoader(str(path)) for module, path in dirs.items()}),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
        )

    def render(self, module: str, template: str, data: dict[str, Any]) -> str:
        return self._env.get_template(f"{module}/{template}.html").render(**data)


class SettingsPanel:
    def __init__(self, deps: HostDeps, settings: Settings):
        self.deps = deps
        self.settings = settings
        self.html = ""

    def preset_names(self) -> list[str]:
        if self.deps.presets is None:
            return []
        try:
            return list(self.deps.presets.get_all_presets())
        except Exception as e:
            logger.warning(f"Could not list presets for the panel: {e}")
            return []

    async def render(self) -> str:
        if self.deps.renderer is None:
            return self.html
        data = {
            "enabled": self.settings.enabled,
            "fallbackPreset": self.settings.fallback_preset,
            "matchThreshold": self.settings.match_threshold,
            "mappings": dict(self.settings.last_mappings),
            "presets": self.preset_names(),
        }
        html = self.deps.renderer.render(MODULE_NAME, "settings", data)
        if inspect.isawaitable(html):
            html = await html
        self.html = html
        return html

    # -- Control handlers ------------------------------------------------

    def set_enabled(self, enabled: bool) -> None:
        self.settings.enabled = bool(enabled)
        self.deps.saver.schedule()
        logger.info(f"Enabled: {self.settings.enabled}")

    def set_fallback_preset(self, preset_name: str) -> None:
        self.settings.fallback_preset = preset_name
        self.deps.saver.schedule()
        logger.info(f"Fallback preset changed to: {preset_name}")

    def set_match_threshold(self, value: float | str) -> str:
        """Apply a slider value and return its two-decimal display text."""
        try:
            threshold = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid match threshold: {value!r}")
            return f"{self.settings.match_threshold:.2f}"
        if threshold != threshold:  # NaN
            logger.warning(f"Ignoring invalid match threshold: {value!r}")
            return f"{self.settings.match_threshold:.2f}"
        self.settings.match_threshold = min(max(threshold, 0.0), 1.0)
        self.deps.saver.schedule()
        logger.info(f"Match threshold changed to: {self.settings.match_threshold}")
        return f"{self.settings.match_threshold:.2f}"

    async def clear_mappings(self) -> None:
        self.settings.last_mappings = {}
        self.deps.saver.schedule()
        await self.render()
        toast_success("Mapping history cleared", "Models Presets")
