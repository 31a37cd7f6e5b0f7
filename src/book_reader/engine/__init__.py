"""Engine layer - adapters and the load race around external rendering engines."""

from .engine_bridge import DomEventBridge, EmitterBridge, EngineBridge, NullBridge, create_bridge
from .load_protocol import LoadProtocol

__all__ = [
    "EngineBridge",
    "EmitterBridge",
    "DomEventBridge",
    "NullBridge",
    "create_bridge",
    "LoadProtocol",
]
