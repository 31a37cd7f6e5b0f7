"""Reader Session - the single object callers use to open and drive a document."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Tuple

from book_reader.core import (
    BookmarkData,
    ReaderLocation,
    ReaderSettings,
    SearchResult,
    SessionCancelledError,
)
from book_reader.coordinators.pipelines import EngineFactory, ReadingPipeline, create_pipeline
from book_reader.services import DocumentFetcher, EventBus, ReaderConfig, SettingsStore, route
from book_reader.ui import Surface, SurfaceGuard, SurfaceRegistry


class ReaderSession:
    """
    Central coordinator of a reading session.

    Owns at most one active pipeline at a time and exposes a stable event
    and settings contract regardless of which pipeline renders the document.
    Canonical events: ``ready`` (no payload), ``relocate`` (engine location)
    and ``error`` (a ReaderError).

    Settings belong to the session object, not to a pipeline, so changes
    made between documents carry over to the next ``initialize``.
    """

    def __init__(
        self,
        engine_factory: Optional[EngineFactory] = None,
        fetcher: Optional[DocumentFetcher] = None,
        registry: Optional[SurfaceRegistry] = None,
        guard: Optional[SurfaceGuard] = None,
        config: Optional[ReaderConfig] = None,
        settings: Optional[ReaderSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or ReaderConfig()
        self.logger = logger or logging.getLogger(__name__)

        self.engine_factory = engine_factory
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or DocumentFetcher(timeout=self.config.fetch_timeout)
        self.registry = registry or SurfaceRegistry()
        self.guard = guard or SurfaceGuard(self.registry, fallback_id=self.config.fallback_surface_id)

        self.bus = EventBus(logger=self.logger)
        self.settings_store = SettingsStore(settings or self.config.default_settings())

        # Session state
        self._pipeline: Optional[ReadingPipeline] = None
        self._surface: Optional[Surface] = None
        self._inputs: Optional[Tuple[str, Surface]] = None
        self._initialized = False
        self._pending: Optional[asyncio.Task] = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Events and settings
    # ------------------------------------------------------------------

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        """
        Subscribe to a session event.

        ``ready`` listeners are called with no arguments. ``relocate`` and
        ``error`` listeners always receive exactly one argument: the engine
        location or the ReaderError.
        """
        self.bus.on(event, callback)

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        self.bus.off(event, callback)

    @property
    def settings(self) -> ReaderSettings:
        return self.settings_store.settings

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def pipeline(self) -> Optional[ReadingPipeline]:
        return self._pipeline

    def update_settings(self, partial: Optional[Mapping[str, Any]] = None, **changes: Any) -> None:
        """
        Merge settings and push them to the active pipeline, if any.

        Accepts a mapping, keyword arguments, or both.

        Raises:
            ValueError: If a key is not a ReaderSettings field.
        """
        merged = dict(partial or {})
        merged.update(changes)
        self.settings_store.update(merged)

    def set_font_size(self, size: int) -> None:
        self.settings_store.set_font_size(size)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self, document_url: str, surface: Surface, mime_type: Optional[str] = None) -> None:
        """
        Open ``document_url`` in ``surface`` and wait until it is ready.

        Calling again with the same document and surface while the session
        is ready, or while that same load is in flight, does not start a new
        load. Any other call tears the current session down first.

        Args:
            document_url: URL of the document.
            surface: Where to display it.
            mime_type: Optional declared content type used for routing.

        Raises:
            SurfaceNotFoundError, FetchError, LoadTimeoutError, EngineError,
            SurfaceDetachedError: The load failed; also emitted as ``error``.
            SessionCancelledError: A later initialize() or destroy() replaced
                this load before it finished.
        """
        inputs = (document_url, surface)
        if self._inputs == inputs:
            if self._initialized:
                self.logger.debug("Session for %s already initialized", document_url)
                return
            if self._pending is not None:
                await asyncio.shield(self._pending)
                return

        self._teardown()
        generation = self._generation
        self._inputs = inputs

        task = asyncio.ensure_future(self._open(document_url, surface, mime_type, generation))
        self._pending = task
        try:
            # Callers cannot cancel a load midway; only teardown can
            await asyncio.shield(task)
        finally:
            if self._pending is task:
                self._pending = None

    def destroy(self) -> None:
        """
        Tear the current session down. Safe to call repeatedly or with no session.

        A fetcher created by the session has its HTTP connections closed; it
        reconnects if the session is initialized again.
        """
        self._teardown()
        if self._owns_fetcher:
            self.fetcher.close()

    async def _open(self, document_url: str, surface: Surface, mime_type: Optional[str], generation: int) -> None:
        decision = route(document_url, mime_type)
        self.logger.info("Opening %s with the %s pipeline", document_url, decision.pipeline.value)

        pipeline: Optional[ReadingPipeline] = None
        try:
            prepared = await self.guard.prepare(surface)
            self._ensure_current(generation)

            # Ghost content from a previous engine must not survive
            prepared.clear()
            pipeline = create_pipeline(
                decision.pipeline,
                surface=prepared,
                settings=self.settings,
                bus=self.bus,
                fetcher=self.fetcher,
                engine_factory=self.engine_factory,
                document_format=decision.format,
                timeout=self.config.load_timeout,
                grace_delay=self.config.grace_delay,
            )
            self._pipeline = pipeline
            self._surface = prepared
            self.settings_store.bind(pipeline)

            await pipeline.open(document_url)
            self._ensure_current(generation)
        except SessionCancelledError:
            raise
        except Exception as e:
            if generation != self._generation:
                raise SessionCancelledError("Session was replaced while loading") from e
            self.logger.error("Failed to initialize reader for %s: %s", document_url, e)
            self._teardown()
            self.bus.emit("error", e)
            raise

        self._initialized = True
        self.logger.info("Reader ready for %s", document_url)
        self.bus.emit("ready")

    def _ensure_current(self, generation: int) -> None:
        if generation != self._generation:
            raise SessionCancelledError("Session was replaced while loading")

    def _teardown(self) -> None:
        # Any completion from the previous generation is now stale
        self._generation += 1
        self._pending = None
        self._inputs = None
        self._initialized = False

        self.settings_store.unbind()
        pipeline, self._pipeline = self._pipeline, None
        surface, self._surface = self._surface, None
        if pipeline is not None:
            pipeline.close()
        elif surface is not None:
            surface.clear()

    # ------------------------------------------------------------------
    # Navigation and queries
    # ------------------------------------------------------------------

    def _active(self) -> Optional[ReadingPipeline]:
        return self._pipeline if self._initialized else None

    def navigate(self, location: str) -> None:
        pipeline = self._active()
        if pipeline is not None:
            pipeline.navigate(location)

    def next(self) -> None:
        pipeline = self._active()
        if pipeline is not None:
            pipeline.next()

    def prev(self) -> None:
        pipeline = self._active()
        if pipeline is not None:
            pipeline.prev()

    def get_progress(self) -> float:
        """Reading progress in [0, 1]; 0.0 when there is no session or the engine fails."""
        pipeline = self._active()
        if pipeline is None:
            return 0.0
        try:
            return min(max(pipeline.get_progress(), 0.0), 1.0)
        except Exception as e:
            self.logger.warning("Could not query reading progress: %s", e)
            return 0.0

    def get_current_location(self) -> Optional[ReaderLocation]:
        pipeline = self._active()
        if pipeline is None:
            return None
        try:
            return pipeline.get_location()
        except Exception as e:
            self.logger.warning("Could not query reading location: %s", e)
            return None

    async def search(self, text: str) -> List[SearchResult]:
        pipeline = self._active()
        if pipeline is None:
            return []
        return await pipeline.search(text)

    def add_bookmark(self, book_id: int, chapter_id: int, title: str) -> BookmarkData:
        """
        Build a bookmark for the current position.

        Persisting it is up to the caller; this only creates the value.
        """
        location = self.get_current_location()
        bookmark = BookmarkData(
            id=uuid.uuid4().hex,
            book_id=book_id,
            chapter_id=chapter_id,
            title=title,
            created_at=datetime.now(timezone.utc),
            location=location.location if location else "",
        )
        self.logger.debug("Bookmark %s created at %r", bookmark.id, bookmark.location)
        return bookmark
