"""Engine bridges - one event/capability interface over differently shaped engines.

Rendering engines come in two shapes. Emitter-style engines expose
``on(event, cb)``/``off(event, cb)`` and call listeners with the payload.
DOM-style engines expose ``add_event_listener``/``remove_event_listener``
and call listeners with an event object carrying the payload in ``detail``.
The bridge is chosen once, when a pipeline wires up an engine, so nothing
downstream needs to know which shape it is talking to.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Tuple

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EngineBridge(ABC):
    """Capability interface over a duck-typed rendering engine."""

    def __init__(self, engine: Any):
        self.engine = engine

    @abstractmethod
    def on(self, event: str, callback: Listener) -> None:
        """Subscribe ``callback`` to a native engine event; it receives the payload."""

    @abstractmethod
    def off(self, event: str, callback: Listener) -> None:
        """Remove one subscription of ``callback`` made through ``on``."""

    def has(self, method: str) -> bool:
        return callable(getattr(self.engine, method, None))

    def call(self, method: str, *args: Any, default: Any = None) -> Any:
        """Invoke an optional engine capability, returning ``default`` when it is missing."""
        func = getattr(self.engine, method, None)
        if not callable(func):
            return default
        return func(*args)


class EmitterBridge(EngineBridge):
    def on(self, event: str, callback: Listener) -> None:
        self.engine.on(event, callback)

    def off(self, event: str, callback: Listener) -> None:
        self.engine.off(event, callback)


class DomEventBridge(EngineBridge):
    """Bridge for engines dispatching event objects with a ``detail`` payload."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._wrappers: List[Tuple[str, Listener, Listener]] = []

    def on(self, event: str, callback: Listener) -> None:
        def wrapper(native_event: Any = None) -> Any:
            return callback(unwrap_detail(native_event))

        self._wrappers.append((event, callback, wrapper))
        self.engine.add_event_listener(event, wrapper)

    def off(self, event: str, callback: Listener) -> None:
        for index, (name, original, wrapper) in enumerate(self._wrappers):
            if name == event and original == callback:
                del self._wrappers[index]
                self.engine.remove_event_listener(event, wrapper)
                return


class NullBridge(EngineBridge):
    """Engines without any event surface; only capability calls work."""

    def on(self, event: str, callback: Listener) -> None:
        pass

    def off(self, event: str, callback: Listener) -> None:
        pass


def unwrap_detail(native_event: Any) -> Any:
    """Return the payload of a DOM-style event object (``.detail`` or ``["detail"]``)."""
    if native_event is None:
        return None
    if isinstance(native_event, dict):
        return native_event.get("detail", native_event)
    return getattr(native_event, "detail", native_event)


def create_bridge(engine: Any) -> EngineBridge:
    """Factory selecting the bridge for ``engine`` by introspecting its methods."""
    def has(name: str) -> bool:
        return callable(getattr(engine, name, None))

    if has("on") and has("off"):
        return EmitterBridge(engine)
    if has("add_event_listener") and has("remove_event_listener"):
        return DomEventBridge(engine)
    logger.warning("Engine %s exposes no event API; relying on its load() result only", type(engine).__name__)
    return NullBridge(engine)
