"""ReaderLocation entity - a point-in-time snapshot of reading position."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReaderLocation:
    """Position reported by the active engine.

    Produced on demand and never cached, so it is only valid for the call
    that produced it.
    """

    current_page: int
    total_pages: int
    progress: float
    location: str

    def __post_init__(self):
        object.__setattr__(self, "progress", min(max(float(self.progress), 0.0), 1.0))
