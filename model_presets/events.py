"""Host event names and a minimal async event source."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

# -- Event types -------------------------------------------------------------

CHATCOMPLETION_MODEL_CHANGED = "chatcompletion_model_changed"
PRESET_CHANGED = "preset_changed"

Listener = Callable[..., Awaitable[Any] | Any]


class EventSource:
    """Named-event bus. Listeners run sequentially in subscription order.

    ``emit`` awaits coroutine listeners one at a time; a failing listener is
    logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, event: str) -> list[Listener]:
        return list(self._listeners.get(event, []))

    async def emit(self, event: str, *args: Any) -> None:
        for listener in self.listeners(event):
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Listener {listener!r} for {event} failed: {e}")
