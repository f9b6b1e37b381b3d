"""Preset mapper: picks and applies a preset whenever the model changes.

Flow per model-change event:
    enabled? -> fuzzy match on model keywords -> fallback if no match
             -> /preset quiet=true <name> -> record mapping on success

Every failure is logged and downgraded to "no match" or False; nothing
raised here reaches the host's event loop.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any

from model_presets._commands import quiet_arguments
from model_presets.config import Settings
from model_presets.deps import HostDeps
from model_presets.events import CHATCOMPLETION_MODEL_CHANGED
from model_presets.matcher import extract_keywords, find_matching_preset
from model_presets.panel import SettingsPanel
from model_presets.presets import PRESET_COMMAND

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a model name, before anything is applied."""

    model: str
    keywords: list[str] = field(default_factory=list)
    matched: str | None = None
    selected: str | None = None

    @property
    def used_fallback(self) -> bool:
        return self.matched is None and bool(self.selected)


class PresetMapper:
    def __init__(self, deps: HostDeps, settings: Settings, *, command_timeout: float | None = None):
        self.deps = deps
        self.settings = settings
        # None = wait for the host command indefinitely.
        self.command_timeout = command_timeout
        self.panel = SettingsPanel(deps, settings)
        self._installed = False
        self._in_flight: set[str] = set()

    def find_matching_preset(self, model_name: Any, keywords: list[str] | None = None) -> str | None:
        return find_matching_preset(
            model_name, self.deps.presets, self.settings.match_threshold, keywords=keywords,
        )

    def resolve(self, model_name: str) -> Resolution:
        keywords = extract_keywords(model_name)
        matched = self.find_matching_preset(model_name, keywords)
        selected = matched or self.settings.fallback_preset or None
        return Resolution(
            model=model_name,
            keywords=keywords,
            matched=matched,
            selected=selected,
        )

    async def apply_preset(self, preset_name: Any) -> bool:
        """Ask the host to switch presets. True only on a truthy command result."""
        if not isinstance(preset_name, str) or not preset_name:
            logger.error(f"Invalid preset name: {preset_name!r}")
            return False

        try:
            command = self.deps.commands.get(PRESET_COMMAND)
            if command is None:
                logger.error("Preset command not found")
                return False

            result = command.handler(quiet_arguments(), preset_name)
            if inspect.isawaitable(result):
                if self.command_timeout is not None:
                    result = await asyncio.wait_for(result, timeout=self.command_timeout)
                else:
                    result = await result
        except asyncio.TimeoutError:
            logger.error(f"Timed out applying preset {preset_name} after {self.command_timeout}s")
            return False
        except Exception as e:
            logger.error(f"Error applying preset {preset_name}: {e}")
            return False

        if result:
            logger.info(f"Successfully applied preset: {preset_name}")
            return True
        logger.warning(f"Failed to apply preset: {preset_name}")
        return False

    async def on_model_changed(self, model_name: Any) -> None:
        if not self.settings.enabled:
            logger.debug("Extension is disabled")
            return

        if not isinstance(model_name, str) or not model_name:
            logger.debug(f"Ignoring model change with invalid name: {model_name!r}")
            return

        # A second event for the same model while the first is still applying
        # would pick the same preset; drop it.
        if model_name in self._in_flight:
            logger.debug(f"Model change for {model_name} already in progress")
            return

        self._in_flight.add(model_name)
        try:
            logger.info(f"Model changed to: {model_name}")
            resolution = self.resolve(model_name)
            if resolution.used_fallback:
                logger.info(f"Using fallback preset: {resolution.selected}")

            if not resolution.selected:
                return

            if await self.apply_preset(resolution.selected):
                self.settings.last_mappings[model_name] = resolution.selected
                self.deps.saver.schedule()
        finally:
            self._in_flight.discard(model_name)

    async def install(self) -> None:
        """Subscribe to model changes (once) and render the settings panel."""
        if self._installed:
            return
        self.deps.events.on(CHATCOMPLETION_MODEL_CHANGED, self.on_model_changed)
        self._installed = True
        logger.info(f"Extension initialized {self.settings.to_json_dict()}")
        await self.panel.render()
        logger.info("Extension loaded successfully")

    def uninstall(self) -> None:
        if self._installed:
            self.deps.events.remove_listener(CHATCOMPLETION_MODEL_CHANGED, self.on_model_changed)
            self._installed = False
