"""ReaderSettings entity - presentation configuration for a reading session."""

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class ViewMode(str, Enum):
    PAGINATED = "paginated"
    SCROLLED = "scrolled"


@dataclass(frozen=True)
class ReaderSettings:
    """Typography and layout preferences pushed to the active pipeline.

    Attributes:
        font_size: Font size in CSS pixels.
        font_family: CSS font-family stack.
        line_height: Unitless CSS line height.
        margin: Page margin in CSS pixels.
        theme: Light or dark colour scheme.
        view_mode: Paginated or continuous scrolling layout.
    """

    font_size: int = 18
    font_family: str = "Georgia, serif"
    line_height: float = 1.6
    margin: int = 20
    theme: Theme = Theme.LIGHT
    view_mode: ViewMode = ViewMode.PAGINATED

    def __post_init__(self):
        # Accept plain strings for the enum fields
        object.__setattr__(self, "theme", Theme(self.theme))
        object.__setattr__(self, "view_mode", ViewMode(self.view_mode))

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def merged(self, partial: Mapping[str, Any]) -> "ReaderSettings":
        """
        Return a copy with the given fields replaced.

        ``None`` values are ignored so callers can pass sparse updates.

        Raises:
            ValueError: If a key is not a settings field or an enum value is invalid.
        """
        known = self.field_names()
        unknown = [key for key in partial if key not in known]
        if unknown:
            raise ValueError(f"Unknown reader setting(s): {', '.join(sorted(unknown))}")

        changes = {key: value for key, value in partial.items() if value is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with enum members flattened to their string values."""
        data = asdict(self)
        data["theme"] = self.theme.value
        data["view_mode"] = self.view_mode.value
        return data
