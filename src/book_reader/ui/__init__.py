"""UI layer - display surfaces and the guard that prepares them."""

from .surface import InMemorySurface, Surface, SurfaceRegistry
from .surface_guard import SurfaceGuard

__all__ = ["Surface", "InMemorySurface", "SurfaceRegistry", "SurfaceGuard"]
