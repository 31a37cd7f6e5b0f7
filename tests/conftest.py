"""Shared fakes for reader tests: scriptable engines, fetchers and fast guards."""

import asyncio
from types import SimpleNamespace

import pytest

from book_reader.core import FetchError
from book_reader.services import ReaderConfig
from book_reader.ui import InMemorySurface, SurfaceGuard, SurfaceRegistry


class FakeEngine:
    """
    Emitter-style engine (``on``/``off``) with a scriptable ``load``.

    Modes:
        resolve: load() returns a coroutine that resolves immediately.
        ready: load() returns None and fires ``bookready`` on the next tick.
        never: load() returns a coroutine that never finishes.
        reject: load() returns a coroutine that raises.
        raise: load() raises synchronously.
        none: load() returns None and nothing else happens.
        error_event: load() returns None and fires ``error`` on the next tick.
    """

    def __init__(self, surface=None, settings=None, mode="resolve"):
        self.surface = surface
        self.settings = settings
        self.mode = mode
        self.listeners = {}
        self.loaded_urls = []
        self.applied_settings = []
        self.calls = []
        self.destroyed = False
        self.progress = 0.25
        self.location = "epubcfi(/6/4)"

    # Event surface
    def on(self, event, callback):
        self.listeners.setdefault(event, []).append(callback)

    def off(self, event, callback):
        callbacks = self.listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def fire(self, event, payload=None):
        for callback in list(self.listeners.get(event, [])):
            if payload is None:
                callback()
            else:
                callback(payload)

    def listener_count(self, event=None):
        if event is not None:
            return len(self.listeners.get(event, []))
        return sum(len(callbacks) for callbacks in self.listeners.values())

    # Capabilities
    def load(self, url):
        self.loaded_urls.append(url)
        loop = asyncio.get_running_loop()
        if self.mode == "resolve":
            return self._resolve()
        if self.mode == "ready":
            loop.call_soon(self.fire, "bookready")
            return None
        if self.mode == "never":
            return self._never()
        if self.mode == "reject":
            return self._reject()
        if self.mode == "raise":
            raise RuntimeError("corrupt archive")
        if self.mode == "error_event":
            loop.call_soon(self.fire, "error", {"message": "unsupported format"})
            return None
        return None

    async def _resolve(self):
        return True

    async def _never(self):
        await asyncio.Event().wait()

    async def _reject(self):
        raise RuntimeError("network error")

    def go_to(self, location):
        self.calls.append(("go_to", location))

    def next(self):
        self.calls.append(("next",))

    def prev(self):
        self.calls.append(("prev",))

    def get_location(self):
        return self.location

    def get_current_page(self):
        return 3

    def get_total_pages(self):
        return 120

    def get_progress(self):
        return self.progress

    def set_setting(self, key, value):
        self.applied_settings.append((key, value))

    async def search(self, text):
        return [{"text": f"...{text}...", "location": "epubcfi(/6/8)"}]

    def destroy(self):
        self.destroyed = True


class FakeDomEngine(FakeEngine):
    """Engine exposing only ``add_event_listener`` with payloads under ``detail``."""

    on = None
    off = None

    def add_event_listener(self, event, callback):
        self.listeners.setdefault(event, []).append(callback)

    def remove_event_listener(self, event, callback):
        callbacks = self.listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def fire(self, event, payload=None):
        for callback in list(self.listeners.get(event, [])):
            callback(SimpleNamespace(detail=payload))


class FakeFetcher:
    """Fetcher returning canned text, or failing with a status code."""

    def __init__(self, text="", status_code=None):
        self.text = text
        self.status_code = status_code
        self.urls = []

    async def fetch_text(self, url):
        self.urls.append(url)
        await asyncio.sleep(0)
        if self.status_code is not None:
            raise FetchError(
                f"Failed to fetch text file: {self.status_code}",
                url=url,
                status_code=self.status_code,
            )
        return self.text


class EngineRecorder:
    """Engine factory remembering every engine it built."""

    def __init__(self, engine_cls=FakeEngine, mode="resolve"):
        self.engine_cls = engine_cls
        self.mode = mode
        self.engines = []

    def __call__(self, surface, settings):
        engine = self.engine_cls(surface, settings, mode=self.mode)
        self.engines.append(engine)
        return engine

    @property
    def last(self):
        return self.engines[-1]


@pytest.fixture
def surface():
    return InMemorySurface(surface_id="reader-container", width=800, height=600)


@pytest.fixture
def registry(surface):
    reg = SurfaceRegistry()
    reg.register(surface)
    return reg


@pytest.fixture
def fast_guard(registry):
    return SurfaceGuard(registry, max_attempts=3, base_delay=0.001, settle_delay=0)


@pytest.fixture
def fast_config(tmp_path, monkeypatch):
    """ReaderConfig with short deadlines and no .env file."""
    monkeypatch.setenv("BOOK_READER_LOAD_TIMEOUT", "0.2")
    monkeypatch.setenv("BOOK_READER_GRACE_DELAY", "0.02")
    for name in ("BOOK_READER_FONT_SIZE", "BOOK_READER_FONT_FAMILY", "BOOK_READER_THEME", "BOOK_READER_VIEW_MODE"):
        monkeypatch.delenv(name, raising=False)
    return ReaderConfig(project_root=tmp_path)


@pytest.fixture
def engine_cls():
    return FakeEngine


@pytest.fixture
def dom_engine_cls():
    return FakeDomEngine


@pytest.fixture
def make_recorder():
    def factory(mode="resolve", engine_cls=FakeEngine):
        return EngineRecorder(engine_cls=engine_cls, mode=mode)
    return factory


@pytest.fixture
def make_fetcher():
    return FakeFetcher
