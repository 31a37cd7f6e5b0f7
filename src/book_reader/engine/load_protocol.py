"""Load Protocol - decides exactly once when an engine has finished loading a book.

Three independent signals race to settle a load:

* the engine's native ``bookready`` event (success),
* the ``load()`` awaitable resolving, followed by a short grace delay so an
  in-flight ``bookready`` can still win (success),
* a native ``error`` event, a rejected ``load()`` awaitable, or ``load()``
  raising (failure, pre-empts both success signals).

A hard deadline measured from the ``load()`` call fails the load with
``LoadTimeoutError`` when no signal arrives. Whichever path settles first
removes the temporary listeners and timers; every later signal is ignored.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Optional

from book_reader.core import EngineError, LoadTimeoutError, SessionCancelledError, SurfaceDetachedError
from book_reader.engine.engine_bridge import EngineBridge
from book_reader.ui.surface import Surface

logger = logging.getLogger(__name__)

READY_EVENT = "bookready"
ERROR_EVENT = "error"


def describe_engine_error(payload: Any) -> str:
    if isinstance(payload, BaseException):
        return str(payload) or type(payload).__name__
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    if payload is None:
        return "Unknown engine error"
    return str(payload)


class LoadProtocol:
    """One-shot race between the completion signals of a single ``load()`` call."""

    def __init__(
        self,
        bridge: EngineBridge,
        surface: Surface,
        timeout: float = 30.0,
        grace_delay: float = 0.1,
    ):
        self.bridge = bridge
        self.surface = surface
        self.timeout = timeout
        self.grace_delay = grace_delay

        self._future: Optional[asyncio.Future] = None
        self._timeout_handle: Optional[asyncio.TimerHandle] = None
        self._grace_handle: Optional[asyncio.TimerHandle] = None
        self._load_future: Optional[asyncio.Future] = None
        self._listening = False
        self._cleaned_up = False
        self._cancelled = False

    @property
    def settled(self) -> bool:
        return self._future is not None and self._future.done()

    async def run(self, document_url: str) -> None:
        """
        Start loading ``document_url`` and wait for the race to settle.

        Raises:
            EngineError: The engine reported or raised an error.
            LoadTimeoutError: No signal arrived within ``timeout`` seconds.
            SurfaceDetachedError: The surface left the document before completion.
            SessionCancelledError: ``cancel()`` was called first.
        """
        if self._future is not None:
            raise RuntimeError("LoadProtocol instances are single-use")

        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        if self._cancelled:
            self._fail(SessionCancelledError("Load cancelled before it started"))
            await self._future

        self.bridge.on(READY_EVENT, self._on_ready)
        self.bridge.on(ERROR_EVENT, self._on_error)
        self._listening = True
        self._timeout_handle = loop.call_later(self.timeout, self._on_timeout)

        try:
            logger.debug("Calling engine load() with %s", document_url)
            try:
                result = self.bridge.engine.load(document_url)
            except Exception as e:
                self._fail(EngineError(f"Engine load() raised: {describe_engine_error(e)}", cause=e))
            else:
                self._track_load_result(result)
            await self._future
        finally:
            self._cleanup(failed=not self._succeeded())

    def cancel(self) -> None:
        """Abandon the load; the waiting ``run()`` raises ``SessionCancelledError``."""
        self._cancelled = True
        if self._future is not None:
            self._fail(SessionCancelledError("Load cancelled"))

    def _track_load_result(self, result: Any) -> None:
        if self.settled:
            # A synchronous bookready/error during load() already decided the race
            if inspect.iscoroutine(result):
                result.close()
            return

        if inspect.isawaitable(result):
            self._load_future = asyncio.ensure_future(result)
            self._load_future.add_done_callback(self._on_load_done)
        else:
            # Nothing to wait on; give a native bookready the grace window instead
            logger.debug("Engine load() returned %r, resolving after grace delay", result)
            self._schedule_grace()

    def _on_load_done(self, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if self.settled:
            return
        if error is not None:
            self._fail(EngineError(f"Engine load() failed: {describe_engine_error(error)}", cause=error))
        else:
            logger.debug("Load awaitable resolved, waiting %.3fs for bookready", self.grace_delay)
            self._schedule_grace()

    def _schedule_grace(self) -> None:
        if self._grace_handle is None:
            loop = asyncio.get_running_loop()
            self._grace_handle = loop.call_later(self.grace_delay, self._succeed)

    def _on_ready(self, *_payload: Any) -> None:
        self._succeed()

    def _on_error(self, payload: Any = None, *_rest: Any) -> None:
        self._fail(EngineError(describe_engine_error(payload), cause=payload))

    def _on_timeout(self) -> None:
        logger.warning("Book loading timed out after %s seconds", self.timeout)
        self._fail(LoadTimeoutError(self.timeout))

    def _succeed(self) -> None:
        if self.settled:
            return
        if not self.surface.is_attached():
            self._fail(SurfaceDetachedError("Container is no longer available in the document"))
            return
        self._cleanup(failed=False)
        self._future.set_result(None)

    def _fail(self, error: Exception) -> None:
        if self.settled:
            return
        self._cleanup(failed=True)
        self._future.set_exception(error)

    def _succeeded(self) -> bool:
        return (
            self._future is not None
            and self._future.done()
            and not self._future.cancelled()
            and self._future.exception() is None
        )

    def _cleanup(self, failed: bool) -> None:
        if self._cleaned_up:
            return
        self._cleaned_up = True

        if self._listening:
            self._listening = False
            self.bridge.off(READY_EVENT, self._on_ready)
            self.bridge.off(ERROR_EVENT, self._on_error)
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
        if self._grace_handle is not None:
            self._grace_handle.cancel()
        if failed and self._load_future is not None and not self._load_future.done():
            self._load_future.cancel()
