"""Coordinators - orchestration layer connecting callers with engines and surfaces."""

from .pipelines import FallbackPipeline, ReadingPipeline, RichEnginePipeline, create_pipeline
from .reader_session import ReaderSession

__all__ = [
    "ReaderSession",
    "ReadingPipeline",
    "RichEnginePipeline",
    "FallbackPipeline",
    "create_pipeline",
]
