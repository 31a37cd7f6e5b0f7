"""Settings Store - owns ReaderSettings and pushes changes to the active pipeline."""

import logging
from typing import Any, Mapping, Optional, Protocol

from book_reader.core import ReaderSettings

logger = logging.getLogger(__name__)


class SettingsTarget(Protocol):
    def apply_setting(self, key: str, value: Any) -> None:
        ...


class SettingsStore:
    """
    Holds the current presentation configuration.

    Updates are merged into the existing settings, never replacing them, so
    the stored value is always the accumulation of every update so far. It
    outlives individual reading sessions: settings changed while no session
    is active are picked up by the next one.
    """

    def __init__(self, defaults: Optional[ReaderSettings] = None):
        self._settings = defaults or ReaderSettings()
        self._target: Optional[SettingsTarget] = None

    @property
    def settings(self) -> ReaderSettings:
        return self._settings

    def bind(self, target: SettingsTarget) -> None:
        """Start pushing changes to ``target`` (the active pipeline)."""
        self._target = target

    def unbind(self) -> None:
        self._target = None

    def update(self, partial: Mapping[str, Any]) -> list[str]:
        """
        Merge ``partial`` into the settings and push changed keys to the target.

        Args:
            partial: Mapping of ReaderSettings field names to new values.

        Returns:
            The keys whose value actually changed.

        Raises:
            ValueError: If ``partial`` names an unknown field or invalid value.
        """
        previous = self._settings
        self._settings = previous.merged(partial)

        changed = [
            key for key in ReaderSettings.field_names()
            if getattr(previous, key) != getattr(self._settings, key)
        ]
        if self._target is not None:
            current = self._settings.to_dict()
            for key in changed:
                try:
                    self._target.apply_setting(key, current[key])
                except Exception:
                    # The local merge stands even when the engine rejects it
                    logger.exception("Failed to push setting %s to the active pipeline", key)
        return changed

    def set_font_size(self, size: int) -> list[str]:
        return self.update({"font_size": size})
