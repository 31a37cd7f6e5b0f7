"""Bookmark and search-result value objects handed to persistence collaborators."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class BookmarkData:
    id: str
    book_id: int
    chapter_id: int
    title: str
    created_at: datetime
    location: str = ""


@dataclass(frozen=True)
class SearchResult:
    """A single search hit: a text excerpt plus where to navigate for it."""

    text: str
    location: str = field(default="")
