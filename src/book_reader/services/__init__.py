"""Services layer - event dispatch, settings, configuration and document access."""

from book_reader.services.event_bus import EventBus
from book_reader.services.settings_store import SettingsStore
from book_reader.services.reader_config import ReaderConfig
from book_reader.services.content_router import DocumentFormat, PipelineKind, RouteDecision, detect_format, route
from book_reader.services.document_fetcher import DocumentFetcher

# Text processing services
from book_reader.services.text_processing import extract_fb2_text, prepare_document_text, strip_markup

__all__ = [
	"EventBus",
	"SettingsStore",
	"ReaderConfig",
	"DocumentFormat",
	"PipelineKind",
	"RouteDecision",
	"detect_format",
	"route",
	"DocumentFetcher",
	"extract_fb2_text",
	"prepare_document_text",
	"strip_markup",
]
