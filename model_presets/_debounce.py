"""Coalescing write-back for extension settings.

Every mutation calls ``schedule()``; the timer is re-armed on each call and
the settings are written once the loop has been quiet for ``delay`` seconds.
"""

import asyncio
import logging

from model_presets.config import Settings, SettingsStore

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 1.0


class DebouncedSaver:
    """Debounced ``SettingsStore.save`` bound to one Settings object."""

    def __init__(self, store: SettingsStore, settings: Settings, delay: float = DEFAULT_DELAY_SECONDS):
        self.store = store
        self.settings = settings
        self.delay = delay
        self.writes = 0
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        """Request a save. Outside an event loop the write happens immediately."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Write now and drop any pending timer."""
        self.cancel()
        self._write()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        try:
            self._write()
        except OSError as e:
            # Timer callbacks have no caller to report to.
            logger.error(f"Debounced settings save failed: {e}")

    def _write(self) -> None:
        self.store.save(self.settings)
        self.writes += 1
