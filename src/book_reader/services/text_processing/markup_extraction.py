"""Light structural extraction for documents shown without a rendering engine."""

import re
from typing import Optional

from bs4 import BeautifulSoup

from book_reader.services.content_router import DocumentFormat

_TITLE_RE = re.compile(r"<book-title[^>]*>(.*?)</book-title>", re.DOTALL)
_BODY_START = "<body"
_BODY_END = "</body>"


def collapse_whitespace(text: str) -> str:
    """Trim and collapse runs of whitespace to single spaces."""
    return re.sub(r"\s+", " ", text).strip()


def strip_markup(markup: str) -> str:
    """Drop every tag, keeping text content with tags acting as word breaks."""
    soup = BeautifulSoup(markup, "html.parser")
    return collapse_whitespace(soup.get_text(" "))


def is_fiction_book(text: str) -> bool:
    return "<?xml" in text and "<FictionBook" in text


def extract_title(text: str) -> Optional[str]:
    match = _TITLE_RE.search(text)
    if not match:
        return None
    title = strip_markup(match.group(1))
    return title or None


def extract_fb2_text(text: str) -> str:
    """
    Extract readable text from a FictionBook 2 document.

    Takes the region between the first ``<body`` tag and the last
    ``</body>`` so that multiple bodies (main text, notes) are all kept.
    Without those markers the whole document is stripped instead. A
    ``<book-title>`` is prepended as a heading when present.

    Args:
        text: Raw FB2 XML.

    Returns:
        Plain text; input that is not FictionBook XML is returned unchanged.
    """
    if not is_fiction_book(text):
        return text

    body_start = text.find(_BODY_START)
    body_end = text.rfind(_BODY_END)
    if body_start != -1 and body_end > body_start:
        content = strip_markup(text[body_start:body_end + len(_BODY_END)])
    else:
        content = strip_markup(text)

    title = extract_title(text)
    if title:
        content = f"# {title}\n\n{content}"
    return content


def prepare_document_text(text: str, document_format: DocumentFormat) -> str:
    """Turn fetched document text into what the fallback pipeline displays."""
    if document_format is DocumentFormat.FB2:
        return extract_fb2_text(text)
    return text
