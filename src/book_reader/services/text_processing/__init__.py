"""Text processing for the plain-text fallback pipeline."""

from .markup_extraction import (
    collapse_whitespace,
    extract_fb2_text,
    extract_title,
    is_fiction_book,
    prepare_document_text,
    strip_markup,
)

__all__ = [
    "collapse_whitespace",
    "extract_fb2_text",
    "extract_title",
    "is_fiction_book",
    "prepare_document_text",
    "strip_markup",
]
