"""Unit tests for reader value objects."""

import pytest

from book_reader.core import LoadTimeoutError, ReaderLocation, ReaderSettings, Theme, ViewMode


class TestReaderSettings:
    def test_defaults(self):
        settings = ReaderSettings()
        assert settings.font_size == 18
        assert settings.font_family == "Georgia, serif"
        assert settings.line_height == 1.6
        assert settings.margin == 20
        assert settings.theme is Theme.LIGHT
        assert settings.view_mode is ViewMode.PAGINATED

    def test_merged_returns_new_instance(self):
        base = ReaderSettings()
        merged = base.merged({"font_size": 22})
        assert merged.font_size == 22
        assert base.font_size == 18

    def test_merged_keeps_unrelated_fields(self):
        merged = ReaderSettings(margin=40).merged({"font_size": 22})
        assert merged.margin == 40

    def test_merged_skips_none_values(self):
        merged = ReaderSettings().merged({"font_size": None, "margin": 10})
        assert merged.font_size == 18
        assert merged.margin == 10

    def test_merged_accepts_enum_strings(self):
        merged = ReaderSettings().merged({"theme": "dark", "view_mode": "scrolled"})
        assert merged.theme is Theme.DARK
        assert merged.view_mode is ViewMode.SCROLLED

    def test_merged_rejects_unknown_key(self):
        with pytest.raises(ValueError, match="letter_spacing"):
            ReaderSettings().merged({"letter_spacing": 2})

    def test_merged_rejects_invalid_theme(self):
        with pytest.raises(ValueError):
            ReaderSettings().merged({"theme": "sepia"})

    def test_to_dict_flattens_enums(self):
        data = ReaderSettings(theme=Theme.DARK).to_dict()
        assert data["theme"] == "dark"
        assert data["view_mode"] == "paginated"
        assert set(data) == set(ReaderSettings.field_names())


class TestReaderLocation:
    def test_progress_is_clamped(self):
        assert ReaderLocation(1, 10, 1.5, "").progress == 1.0
        assert ReaderLocation(1, 10, -0.2, "").progress == 0.0

    def test_progress_in_range_kept(self):
        assert ReaderLocation(5, 10, 0.5, "cfi").progress == 0.5


def test_load_timeout_error_message_mentions_timeout():
    error = LoadTimeoutError(30.0)
    assert error.timeout == 30.0
    assert "30 seconds" in str(error)
