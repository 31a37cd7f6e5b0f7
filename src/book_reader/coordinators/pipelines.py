"""Reading pipelines - state objects for the two ways a document gets displayed."""

from __future__ import annotations

import html
import inspect
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

from book_reader.core import (
    EngineError,
    ReaderLocation,
    ReaderSettings,
    SearchResult,
    SessionCancelledError,
    Theme,
)
from book_reader.engine import EngineBridge, LoadProtocol, create_bridge
from book_reader.engine.load_protocol import describe_engine_error
from book_reader.services import DocumentFetcher, DocumentFormat, EventBus, PipelineKind, prepare_document_text
from book_reader.ui import Surface

logger = logging.getLogger(__name__)

# Template directory
TEMPLATES_DIR = Path(__file__).parent.parent / "ui" / "assets"

# Share of the viewport scrolled per next/prev in the fallback pipeline
SCROLL_FRACTION = 0.8
SNIPPET_RADIUS = 40

EngineFactory = Callable[[Surface, ReaderSettings], Any]


class ReadingPipeline(ABC):
    """State interface for a mounted document (rich engine vs plain text)."""

    kind: PipelineKind

    def __init__(self, surface: Surface, settings: ReaderSettings):
        self.surface = surface
        self.settings = settings
        self.closed = False

    @abstractmethod
    async def open(self, document_url: str) -> None:
        """Load the document into the surface; returns once it can be displayed."""

    @abstractmethod
    def close(self) -> None:
        """Release the engine/content; must be safe to call more than once."""

    @abstractmethod
    def next(self) -> None:
        """Advance one page (or one screen)."""

    @abstractmethod
    def prev(self) -> None:
        """Go back one page (or one screen)."""

    def apply_setting(self, key: str, value: Any) -> None:
        """Record a settings change; subclasses push it to what they render with."""
        self.settings = self.settings.merged({key: value})

    def navigate(self, location: str) -> None:
        """Go to an engine location; pipelines without locations ignore it."""

    def get_progress(self) -> float:
        return 0.0

    def get_location(self) -> Optional[ReaderLocation]:
        return None

    async def search(self, text: str) -> List[SearchResult]:
        return []


class RichEnginePipeline(ReadingPipeline):
    """
    Mounts an external rendering engine and runs the load race against it.

    Native ``relocate`` events are forwarded from the start. ``bookready``
    and ``error`` belong to the load race until it settles. Afterwards only
    ``error`` is forwarded: the session emits ``ready`` once per load, so a
    late ``bookready`` is dropped.
    """

    kind = PipelineKind.RICH

    def __init__(
        self,
        engine_factory: Optional[EngineFactory],
        surface: Surface,
        settings: ReaderSettings,
        bus: EventBus,
        timeout: float = 30.0,
        grace_delay: float = 0.1,
    ):
        super().__init__(surface, settings)
        self.engine_factory = engine_factory
        self.bus = bus
        self.timeout = timeout
        self.grace_delay = grace_delay

        self.bridge: Optional[EngineBridge] = None
        self._protocol: Optional[LoadProtocol] = None
        self._forwarding: list[tuple[str, Callable[..., None]]] = []

    async def open(self, document_url: str) -> None:
        if self.engine_factory is None:
            raise EngineError("No rendering engine is configured for this document format")

        self.surface.clear()
        try:
            engine = self.engine_factory(self.surface, self.settings)
        except Exception as e:
            raise EngineError(f"Failed to create rendering engine: {e}", cause=e) from e

        self.bridge = create_bridge(engine)
        self._forward("relocate", self._on_relocate)

        self._protocol = LoadProtocol(
            self.bridge,
            self.surface,
            timeout=self.timeout,
            grace_delay=self.grace_delay,
        )
        await self._protocol.run(document_url)
        if self.closed:
            raise SessionCancelledError("Pipeline closed while loading")

        self._forward("error", self._on_error)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True

        if self._protocol is not None:
            self._protocol.cancel()
        if self.bridge is not None:
            for event, callback in self._forwarding:
                self.bridge.off(event, callback)
            self._forwarding.clear()
            try:
                self.bridge.call("destroy")
            except Exception:
                logger.exception("Rendering engine raised while being destroyed")
            self.bridge = None
        self.surface.clear()

    def _forward(self, event: str, callback: Callable[..., None]) -> None:
        self.bridge.on(event, callback)
        self._forwarding.append((event, callback))

    def _on_relocate(self, location: Any = None, *_rest: Any) -> None:
        if self.closed:
            return
        if location is None and self.bridge is not None:
            location = self.bridge.call("get_location")
        if location is None:
            # relocate listeners always receive a location
            logger.debug("Dropping relocate event without a location")
            return
        self.bus.emit("relocate", location)

    def _on_error(self, payload: Any = None, *_rest: Any) -> None:
        if not self.closed:
            self.bus.emit("error", EngineError(describe_engine_error(payload), cause=payload))

    def navigate(self, location: str) -> None:
        if self.bridge is not None:
            self.bridge.call("go_to", location)

    def next(self) -> None:
        if self.bridge is not None:
            self.bridge.call("next")

    def prev(self) -> None:
        if self.bridge is not None:
            self.bridge.call("prev")

    def apply_setting(self, key: str, value: Any) -> None:
        super().apply_setting(key, value)
        if self.bridge is not None:
            self.bridge.call("set_setting", key, value)

    def get_progress(self) -> float:
        if self.bridge is None:
            return 0.0
        return float(self.bridge.call("get_progress") or 0.0)

    def get_location(self) -> Optional[ReaderLocation]:
        if self.bridge is None:
            return None
        return ReaderLocation(
            current_page=int(self.bridge.call("get_current_page") or 1),
            total_pages=int(self.bridge.call("get_total_pages") or 0),
            progress=float(self.bridge.call("get_progress") or 0.0),
            location=str(self.bridge.call("get_location") or ""),
        )

    async def search(self, text: str) -> List[SearchResult]:
        if self.bridge is None or not self.bridge.has("search"):
            return []
        try:
            results = self.bridge.call("search", text)
            if inspect.isawaitable(results):
                results = await results
        except Exception as e:
            logger.warning("Engine search for %r failed: %s", text, e)
            return []
        return _to_search_results(results or [])


class FallbackPipeline(ReadingPipeline):
    """
    Shows plain text and FictionBook documents without a rendering engine.

    There are no real pages: next/prev scroll by most of a screen, progress
    is the scroll position and no engine location is available.
    """

    kind = PipelineKind.FALLBACK

    def __init__(
        self,
        fetcher: DocumentFetcher,
        surface: Surface,
        settings: ReaderSettings,
        document_format: DocumentFormat = DocumentFormat.TXT,
    ):
        super().__init__(surface, settings)
        self.fetcher = fetcher
        self.document_format = document_format
        self.text: Optional[str] = None

    async def open(self, document_url: str) -> None:
        raw = await self.fetcher.fetch_text(document_url)
        if self.closed:
            raise SessionCancelledError("Pipeline closed while fetching")

        self.text = prepare_document_text(raw, self.document_format)
        logger.debug("Loaded %d characters of %s text", len(self.text), self.document_format.value)
        self._render()

        # Listeners of the ready event measure the injected layout
        await self.surface.next_frame()
        if self.closed:
            raise SessionCancelledError("Pipeline closed while rendering")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.text = None
        self.surface.clear()

    def _render(self) -> None:
        settings = self.settings
        dark = settings.theme is Theme.DARK
        html_content = _load_template("text_template.html").format(
            theme=settings.theme.value,
            margin=settings.margin,
            font_family=html.escape(settings.font_family),
            font_size=settings.font_size,
            line_height=settings.line_height,
            color="#e5e5e5" if dark else "#1a1a1a",
            background="#121212" if dark else "#ffffff",
            content=html.escape(self.text or "", quote=False),
        )
        self.surface.set_html(html_content)

    def next(self) -> None:
        self.surface.scroll_by(self.surface.viewport_height() * SCROLL_FRACTION)

    def prev(self) -> None:
        self.surface.scroll_by(-self.surface.viewport_height() * SCROLL_FRACTION)

    def apply_setting(self, key: str, value: Any) -> None:
        super().apply_setting(key, value)
        if self.text is not None and not self.closed:
            # Re-rendering resets the scroll position; keep the reader's place
            fraction = self.surface.scroll_fraction()
            self._render()
            self.surface.scroll_to_fraction(fraction)

    def get_progress(self) -> float:
        return self.surface.scroll_fraction()

    async def search(self, text: str) -> List[SearchResult]:
        """Case-insensitive substring search returning excerpts around each hit."""
        if not text or not self.text:
            return []
        haystack = self.text.lower()
        needle = text.lower()
        results = []
        start = haystack.find(needle)
        while start != -1:
            lo = max(start - SNIPPET_RADIUS, 0)
            hi = min(start + len(needle) + SNIPPET_RADIUS, len(self.text))
            snippet = " ".join(self.text[lo:hi].split())
            results.append(SearchResult(text=snippet, location=f"offset:{start}"))
            start = haystack.find(needle, start + len(needle))
        return results


def _load_template(filename: str) -> str:
    """
    Load a template file from the assets directory.

    Args:
        filename: Name of the template file

    Returns:
        Template content as string
    """
    template_path = TEMPLATES_DIR / filename
    return template_path.read_text(encoding="utf-8")


def _to_search_results(raw: Iterable[Any]) -> List[SearchResult]:
    results = []
    for item in raw:
        if isinstance(item, SearchResult):
            results.append(item)
        elif isinstance(item, dict):
            results.append(SearchResult(text=str(item.get("text", "")), location=str(item.get("location", ""))))
        else:
            results.append(SearchResult(text=str(item)))
    return results


def create_pipeline(
    kind: PipelineKind,
    *,
    surface: Surface,
    settings: ReaderSettings,
    bus: EventBus,
    fetcher: DocumentFetcher,
    engine_factory: Optional[EngineFactory] = None,
    document_format: DocumentFormat = DocumentFormat.UNKNOWN,
    timeout: float = 30.0,
    grace_delay: float = 0.1,
) -> ReadingPipeline:
    """Factory returning the pipeline for a routing decision.

    Raises:
        ValueError: If an unknown pipeline kind is provided.
    """
    if kind is PipelineKind.RICH:
        return RichEnginePipeline(engine_factory, surface, settings, bus, timeout=timeout, grace_delay=grace_delay)
    if kind is PipelineKind.FALLBACK:
        return FallbackPipeline(fetcher, surface, settings, document_format=document_format)
    raise ValueError(f"Unknown pipeline kind: {kind}")
