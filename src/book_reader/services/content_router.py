"""Content-Type Router - picks the rendering pipeline for a document."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class DocumentFormat(str, Enum):
    EPUB = "epub"
    MOBI = "mobi"
    AZW3 = "azw3"
    FB2 = "fb2"
    FBZ = "fbz"
    CBZ = "cbz"
    PDF = "pdf"
    TXT = "txt"
    UNKNOWN = "unknown"


class PipelineKind(str, Enum):
    RICH = "rich"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class RouteDecision:
    format: DocumentFormat
    pipeline: PipelineKind


_EXTENSIONS = {
    ".epub": DocumentFormat.EPUB,
    ".mobi": DocumentFormat.MOBI,
    ".azw": DocumentFormat.MOBI,
    ".azw3": DocumentFormat.AZW3,
    ".fb2": DocumentFormat.FB2,
    ".fbz": DocumentFormat.FBZ,
    ".cbz": DocumentFormat.CBZ,
    ".pdf": DocumentFormat.PDF,
    ".txt": DocumentFormat.TXT,
}

_MIME_TYPES = {
    "application/epub+zip": DocumentFormat.EPUB,
    "application/x-mobipocket-ebook": DocumentFormat.MOBI,
    "application/vnd.amazon.ebook": DocumentFormat.AZW3,
    "application/x-fictionbook+xml": DocumentFormat.FB2,
    "application/x-fictionbook": DocumentFormat.FB2,
    "application/x-zip-compressed-fb2": DocumentFormat.FBZ,
    "application/vnd.comicbook+zip": DocumentFormat.CBZ,
    "application/pdf": DocumentFormat.PDF,
    "text/plain": DocumentFormat.TXT,
}

# Formats shown as plain text instead of through the rendering engine
FALLBACK_FORMATS = frozenset({DocumentFormat.TXT, DocumentFormat.FB2})


def detect_format(document_url: str, mime_type: Optional[str] = None) -> DocumentFormat:
    """
    Infer the document format from a MIME hint or the URL's extension.

    A recognised MIME hint wins over the extension. Query strings and
    fragments are ignored. No document content is inspected.
    """
    if mime_type:
        essence = mime_type.split(";", 1)[0].strip().lower()
        if essence in _MIME_TYPES:
            return _MIME_TYPES[essence]

    path = urlparse(document_url).path or document_url
    suffix = PurePosixPath(path).suffix.lower()
    return _EXTENSIONS.get(suffix, DocumentFormat.UNKNOWN)


def route(document_url: str, mime_type: Optional[str] = None) -> RouteDecision:
    """Decide which pipeline renders ``document_url``."""
    document_format = detect_format(document_url, mime_type)
    if document_format in FALLBACK_FORMATS:
        pipeline = PipelineKind.FALLBACK
    else:
        pipeline = PipelineKind.RICH
    if document_format is DocumentFormat.UNKNOWN:
        logger.info("Unrecognised format for %s, handing it to the rendering engine", document_url)
    logger.debug("Routing %s (%s) to the %s pipeline", document_url, document_format.value, pipeline.value)
    return RouteDecision(format=document_format, pipeline=pipeline)
