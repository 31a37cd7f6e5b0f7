"""Display surfaces - the targets that pipelines paint documents into."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional

DEFAULT_COMPUTED_STYLE = {
    "display": "block",
    "visibility": "visible",
    "position": "static",
}


class Surface(ABC):
    """
    Interface of a display target as seen by the reading pipelines.

    A surface has inline styles (what the reader sets), computed styles
    (what is in effect after stylesheets), a measured size, injectable HTML
    content and a vertically scrollable viewport.
    """

    def __init__(self, surface_id: str = ""):
        self.surface_id = surface_id

    @abstractmethod
    def is_attached(self) -> bool:
        """Return True while the surface is part of the live document."""

    @abstractmethod
    def get_style(self, name: str) -> str:
        """Return the inline style value for ``name`` ("" when unset)."""

    @abstractmethod
    def set_style(self, name: str, value: str) -> None:
        """Set an inline style value."""

    @abstractmethod
    def computed_style(self, name: str) -> str:
        """Return the effective style value for ``name``."""

    @abstractmethod
    def width(self) -> int:
        """Measured width in pixels."""

    @abstractmethod
    def height(self) -> int:
        """Measured height in pixels."""

    @abstractmethod
    def set_html(self, html: str) -> None:
        """Replace all content of the surface."""

    @abstractmethod
    def html(self) -> str:
        """Current injected content."""

    @abstractmethod
    def scroll_by(self, dy: float) -> None:
        """Scroll the viewport vertically by ``dy`` pixels."""

    @abstractmethod
    def viewport_height(self) -> int:
        """Visible height of the scrollable viewport."""

    def clear(self) -> None:
        self.set_html("")

    def scroll_fraction(self) -> float:
        """Fraction of the scrollable content above the viewport, 0.0 when unknown."""
        return 0.0

    def scroll_to_fraction(self, fraction: float) -> None:
        """Scroll so that ``fraction`` of the scrollable content is above the viewport.

        Surfaces that cannot scroll ignore it.
        """

    def has_size(self) -> bool:
        return self.width() > 0 and self.height() > 0

    async def next_frame(self) -> None:
        """Yield until the next layout pass has happened."""
        await asyncio.sleep(0)


class InMemorySurface(Surface):
    """
    Headless surface with explicit layout.

    Measured size is whatever ``resize`` last set, or zero while the surface
    is hidden. Useful for scripted sessions and for tests that simulate a
    layout settling after a delay.
    """

    def __init__(
        self,
        surface_id: str = "",
        width: int = 0,
        height: int = 0,
        attached: bool = True,
        stylesheet: Optional[Dict[str, str]] = None,
    ):
        super().__init__(surface_id)
        self.attached = attached
        self.stylesheet = dict(stylesheet or {})
        self.styles: Dict[str, str] = {}
        self.content = ""
        self.content_height = 0
        self.scroll_top = 0.0
        self._width = width
        self._height = height

    def attach(self) -> None:
        self.attached = True

    def detach(self) -> None:
        self.attached = False

    def resize(self, width: int, height: int) -> None:
        self._width = width
        self._height = height

    def is_attached(self) -> bool:
        return self.attached

    def get_style(self, name: str) -> str:
        return self.styles.get(name, "")

    def set_style(self, name: str, value: str) -> None:
        self.styles[name] = value

    def computed_style(self, name: str) -> str:
        if self.styles.get(name):
            return self.styles[name]
        return self.stylesheet.get(name, DEFAULT_COMPUTED_STYLE.get(name, ""))

    def _shown(self) -> bool:
        return self.computed_style("display") != "none"

    def width(self) -> int:
        return self._width if self._shown() else 0

    def height(self) -> int:
        return self._height if self._shown() else 0

    def set_html(self, html: str) -> None:
        self.content = html
        self.scroll_top = 0.0

    def html(self) -> str:
        return self.content

    def viewport_height(self) -> int:
        return self.height()

    def scroll_by(self, dy: float) -> None:
        max_top = max(self.content_height - self.viewport_height(), 0)
        self.scroll_top = min(max(self.scroll_top + dy, 0.0), float(max_top))

    def scroll_fraction(self) -> float:
        scrollable = self.content_height - self.viewport_height()
        if scrollable <= 0:
            return 0.0
        return min(self.scroll_top / scrollable, 1.0)

    def scroll_to_fraction(self, fraction: float) -> None:
        scrollable = max(self.content_height - self.viewport_height(), 0)
        self.scroll_top = min(max(fraction, 0.0), 1.0) * scrollable


class SurfaceRegistry:
    """The document: resolves surfaces by identifier for recovery lookups."""

    def __init__(self):
        self._surfaces: Dict[str, Surface] = {}

    def register(self, surface: Surface) -> None:
        if not surface.surface_id:
            raise ValueError("Surface must have an id to be registered")
        self._surfaces[surface.surface_id] = surface

    def unregister(self, surface: Surface) -> None:
        if self._surfaces.get(surface.surface_id) is surface:
            del self._surfaces[surface.surface_id]

    def get(self, surface_id: str) -> Optional[Surface]:
        """Return the attached surface registered as ``surface_id``, if any."""
        surface = self._surfaces.get(surface_id)
        if surface is not None and surface.is_attached():
            return surface
        return None

    def contains(self, surface: Surface) -> bool:
        return surface.is_attached() and self._surfaces.get(surface.surface_id) is surface
