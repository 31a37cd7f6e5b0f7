"""Reader Config - loads tunables and default settings from a .env file."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from book_reader.core import ReaderSettings

logger = logging.getLogger(__name__)

DEFAULT_LOAD_TIMEOUT = 30.0
# Race-tolerance heuristic, not an engine contract; revisit against real engines
DEFAULT_GRACE_DELAY = 0.1
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_SURFACE_ID = "reader-container"


class ReaderConfig:
    """
    Configuration for reading sessions.

    Reads ``BOOK_READER_*`` variables from the process environment after
    loading the project's ``.env`` file. Every value has a default, so a
    missing file simply yields the defaults.
    """

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize the config.

        Args:
            project_root: Directory holding the .env file.
                         If None, uses the repository root above ``src/``.
        """
        if project_root is None:
            current = Path(__file__).resolve()
            project_root = current.parent.parent.parent.parent

        self._project_root = project_root
        load_dotenv(dotenv_path=project_root / ".env")

    def reload_env(self) -> None:
        """Reload environment variables from the .env file."""
        load_dotenv(dotenv_path=self._project_root / ".env", override=True)

    @property
    def load_timeout(self) -> float:
        return self._get_float("BOOK_READER_LOAD_TIMEOUT", DEFAULT_LOAD_TIMEOUT)

    @property
    def grace_delay(self) -> float:
        return self._get_float("BOOK_READER_GRACE_DELAY", DEFAULT_GRACE_DELAY)

    @property
    def fetch_timeout(self) -> float:
        return self._get_float("BOOK_READER_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT)

    @property
    def fallback_surface_id(self) -> str:
        value = os.getenv("BOOK_READER_SURFACE_ID")
        return value.strip() if value and value.strip() else DEFAULT_SURFACE_ID

    def default_settings(self) -> ReaderSettings:
        """Build the initial ReaderSettings, applying any overrides from the environment."""
        overrides = {
            "font_size": self._get_int("BOOK_READER_FONT_SIZE"),
            "font_family": self._get_str("BOOK_READER_FONT_FAMILY"),
            "theme": self._get_str("BOOK_READER_THEME"),
            "view_mode": self._get_str("BOOK_READER_VIEW_MODE"),
        }
        try:
            return ReaderSettings().merged(overrides)
        except ValueError as e:
            logger.warning("Ignoring invalid reader settings in environment: %s", e)
            return ReaderSettings()

    def _get_str(self, name: str) -> Optional[str]:
        value = os.getenv(name)
        return value.strip() if value and value.strip() else None

    def _get_float(self, name: str, default: float) -> float:
        value = self._get_str(name)
        if value is None:
            return default
        try:
            parsed = float(value)
        except ValueError:
            logger.warning("%s=%r is not a number, using %s", name, value, default)
            return default
        if parsed <= 0:
            logger.warning("%s must be positive, using %s", name, default)
            return default
        return parsed

    def _get_int(self, name: str) -> Optional[int]:
        value = self._get_str(name)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            logger.warning("%s=%r is not an integer, ignoring", name, value)
            return None
