"""Error taxonomy for reading sessions.

Every failure surfaced by ``ReaderSession.initialize`` is a ``ReaderError``
subclass so callers can render an error state from the specific kind.
"""

from typing import Any, Optional


class ReaderError(Exception):
    """Base class for all reading session failures."""


class SurfaceNotFoundError(ReaderError):
    """The display surface never became attached or resolvable."""


class SurfaceDetachedError(ReaderError):
    """The display surface was removed from the document while loading."""


class FetchError(ReaderError):
    """Raw document bytes could not be fetched."""

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class LoadTimeoutError(ReaderError):
    """No completion signal arrived before the load deadline."""

    def __init__(self, timeout: float):
        super().__init__(f"Book loading timed out after {timeout:g} seconds")
        self.timeout = timeout


class EngineError(ReaderError):
    """The rendering engine reported, returned or raised an error."""

    def __init__(self, message: str, cause: Any = None):
        super().__init__(message)
        self.cause = cause


class SessionCancelledError(ReaderError):
    """An in-flight session was torn down before it became ready."""
