"""Surface Guard - makes a display surface safe to mount a pipeline into.

Sessions are often started right after a UI transition, before layout has
settled. An engine mounted into a detached, hidden or collapsed container
fails to paint without reporting anything, so the guard attaches, unhides,
sizes and positions the surface first.
"""

import asyncio
import logging
from typing import Optional

from book_reader.core import SurfaceNotFoundError
from book_reader.ui.surface import Surface, SurfaceRegistry

logger = logging.getLogger(__name__)

ZERO_SIZES = ("", "0", "0px")


class SurfaceGuard:
    """Validates and repairs surfaces before a pipeline touches them."""

    def __init__(
        self,
        registry: Optional[SurfaceRegistry] = None,
        fallback_id: str = "reader-container",
        max_attempts: int = 30,
        base_delay: float = 0.05,
        settle_delay: float = 0.01,
        min_height: str = "400px",
    ):
        self.registry = registry or SurfaceRegistry()
        self.fallback_id = fallback_id
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.settle_delay = settle_delay
        self.min_height = min_height

    async def prepare(self, surface: Optional[Surface]) -> Surface:
        """
        Return an attached, visible, sized and positioned surface.

        Args:
            surface: The caller's surface; may be None or detached.

        Returns:
            ``surface`` itself, or the registry's fallback surface when the
            given one is not attached.

        Raises:
            SurfaceNotFoundError: If no attached surface can be found.
        """
        surface = self._resolve(surface)

        # Let a pending layout pass run before measuring
        await asyncio.sleep(self.settle_delay)

        self._reveal(surface)
        if not surface.surface_id:
            surface.surface_id = self.fallback_id
        self._apply_layout_styles(surface)

        if not surface.has_size():
            await self._wait_for_size(surface)

        logger.debug("Surface %s ready at %dx%d", surface.surface_id, surface.width(), surface.height())
        return surface

    def _resolve(self, surface: Optional[Surface]) -> Surface:
        if surface is not None and surface.is_attached():
            return surface

        logger.warning("Surface is not attached, looking up '%s'", self.fallback_id)
        fallback = self.registry.get(self.fallback_id)
        if fallback is None:
            raise SurfaceNotFoundError(
                f"Container element is not in the document (id: {self.fallback_id})"
            )
        return fallback

    def _reveal(self, surface: Surface) -> None:
        if surface.computed_style("display") == "none":
            logger.warning("Surface %s is hidden (display: none)", surface.surface_id)
            surface.set_style("display", "block")
        if surface.computed_style("visibility") == "hidden":
            logger.warning("Surface %s is hidden (visibility: hidden)", surface.surface_id)
            surface.set_style("visibility", "visible")

    def _apply_layout_styles(self, surface: Surface, force: bool = False) -> None:
        if force or surface.get_style("position") in ("", "static"):
            surface.set_style("position", "relative")
        if force or surface.get_style("width") in ZERO_SIZES:
            surface.set_style("width", "100%")
        if force or surface.get_style("height") in ZERO_SIZES:
            surface.set_style("height", "100%")
        if force or surface.get_style("min-height") in ZERO_SIZES:
            surface.set_style("min-height", self.min_height)

    async def _wait_for_size(self, surface: Surface) -> None:
        logger.debug("Surface %s has zero size, waiting for layout", surface.surface_id)
        for attempt in range(self.max_attempts):
            await asyncio.sleep(self.base_delay * (attempt + 1))
            if surface.has_size():
                return

        # Not fatal: pipelines must cope with a collapsed surface
        self._apply_layout_styles(surface, force=True)
        await asyncio.sleep(self.base_delay * 2)
        if not surface.has_size():
            logger.warning(
                "Surface %s still has zero size after %d attempts",
                surface.surface_id,
                self.max_attempts,
            )
