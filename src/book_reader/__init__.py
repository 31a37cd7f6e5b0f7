"""
Book Reader - reading session orchestration for e-book documents.

This package drives a document into a display surface through either an
external rendering engine or a plain-text fallback, and exposes:
- One event/settings contract regardless of the rendering path
- A guarded load race with timeout for engines with unreliable completion
- Bookmark and location value objects for persistence collaborators
"""

__version__ = "0.1.0"

# Make key components available at package level
from book_reader.coordinators import ReaderSession
from book_reader.core import ReaderLocation, ReaderSettings
from book_reader.ui import InMemorySurface, SurfaceRegistry

__all__ = [
    "ReaderSession",
    "ReaderLocation",
    "ReaderSettings",
    "InMemorySurface",
    "SurfaceRegistry",
]
