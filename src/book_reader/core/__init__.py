"""Domain layer - value objects and the reader error taxonomy."""

from .bookmark import BookmarkData, SearchResult
from .errors import (
    EngineError,
    FetchError,
    LoadTimeoutError,
    ReaderError,
    SessionCancelledError,
    SurfaceDetachedError,
    SurfaceNotFoundError,
)
from .reader_location import ReaderLocation
from .reader_settings import ReaderSettings, Theme, ViewMode

__all__ = [
    "BookmarkData",
    "SearchResult",
    "ReaderLocation",
    "ReaderSettings",
    "Theme",
    "ViewMode",
    "ReaderError",
    "SurfaceNotFoundError",
    "SurfaceDetachedError",
    "FetchError",
    "LoadTimeoutError",
    "EngineError",
    "SessionCancelledError",
]
