"""Event Bus - synchronous pub/sub registry decoupling callers from engines."""

import logging
from typing import Any, Callable, Dict, List, Optional


Callback = Callable[..., Any]


class EventBus:
    """
    Minimal named-event registry.

    Listeners run in registration order. Registering the same callback twice
    makes it run twice per emit and needs two ``off`` calls to remove.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._listeners: Dict[str, List[Callback]] = {}
        self._logger = logger or logging.getLogger(__name__)

    def on(self, event: str, callback: Callback) -> None:
        """Append ``callback`` to the listener list for ``event``."""
        self._listeners.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Callback) -> None:
        """Remove the first registration of ``callback`` for ``event``.

        Bound methods compare equal when they wrap the same function and
        instance, so ``off(event, obj.handler)`` matches an earlier
        ``on(event, obj.handler)``.
        """
        listeners = self._listeners.get(event)
        if not listeners:
            return
        for index, registered in enumerate(listeners):
            if registered == callback:
                del listeners[index]
                break
        if not listeners:
            del self._listeners[event]

    def emit(self, event: str, data: Any = None) -> None:
        """
        Invoke every listener of ``event`` with ``data``.

        Listeners are called without arguments when ``data`` is None. A
        listener that raises is logged and skipped; the exception never
        reaches the emitter or the remaining listeners.
        """
        # Snapshot so listeners may (un)subscribe while being dispatched
        for index, callback in enumerate(list(self._listeners.get(event, ()))):
            try:
                if data is None:
                    callback()
                else:
                    callback(data)
            except Exception:
                self._logger.exception("Listener %d for event '%s' raised", index, event)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def clear(self) -> None:
        self._listeners.clear()
