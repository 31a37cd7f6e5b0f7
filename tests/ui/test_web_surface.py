"""Unit tests for WebSurface with a mocked QWebEngineView."""

from unittest.mock import MagicMock, patch

import pytest

from book_reader.ui.web_surface import EMPTY_DOCUMENT, WebSurface, _parse_pixels


@pytest.fixture
def view():
    """Mock QWebEngineView."""
    mock_view = MagicMock()
    mock_view.width.return_value = 800
    mock_view.height.return_value = 600
    mock_view.isHidden.return_value = False
    mock_view.window.return_value.isVisible.return_value = True
    return mock_view


@pytest.fixture
def web_surface(view):
    return WebSurface(view=view)


def test_creates_its_own_view_when_none_given():
    with patch("book_reader.ui.web_surface.QWebEngineView") as MockView:
        surface = WebSurface()
    assert surface.view is MockView.return_value
    assert surface.surface_id == "reader-container"


class TestAttachment:
    def test_attached_when_window_is_visible(self, web_surface):
        assert web_surface.is_attached()

    def test_detached_when_window_is_not_shown(self, web_surface, view):
        view.window.return_value.isVisible.return_value = False
        assert not web_surface.is_attached()


class TestStyles:
    def test_display_none_hides_view(self, web_surface, view):
        web_surface.set_style("display", "none")
        view.hide.assert_called_once()

    def test_display_block_shows_view(self, web_surface, view):
        web_surface.set_style("display", "block")
        view.show.assert_called_once()

    def test_min_height_sets_minimum(self, web_surface, view):
        web_surface.set_style("min-height", "400px")
        view.setMinimumHeight.assert_called_once_with(400)

    def test_percentage_size_expands(self, web_surface, view):
        web_surface.set_style("width", "100%")
        view.setSizePolicy.assert_called_once()

    def test_inline_styles_are_remembered(self, web_surface):
        web_surface.set_style("position", "relative")
        assert web_surface.get_style("position") == "relative"
        assert web_surface.computed_style("position") == "relative"
        assert web_surface.get_style("width") == ""

    def test_computed_display_follows_widget(self, web_surface, view):
        view.isHidden.return_value = True
        assert web_surface.computed_style("display") == "none"


class TestContent:
    def test_set_html_wraps_document(self, web_surface, view):
        web_surface.set_html("<p>text</p>")
        view.setHtml.assert_called_once_with("<html><body><p>text</p></body></html>")
        assert web_surface.html() == "<p>text</p>"

    def test_clear_loads_empty_document(self, web_surface, view):
        web_surface.clear()
        view.setHtml.assert_called_once_with(EMPTY_DOCUMENT)
        assert web_surface.html() == ""

    def test_size_comes_from_view(self, web_surface):
        assert web_surface.width() == 800
        assert web_surface.height() == 600
        assert web_surface.has_size()


class TestScrolling:
    def test_scroll_by_runs_javascript(self, web_surface, view):
        web_surface.scroll_by(480)
        script = view.page.return_value.runJavaScript.call_args[0][0]
        assert "scrollBy" in script
        assert "top: 480" in script

    def test_scroll_fraction(self, web_surface, view):
        page = view.page.return_value
        page.contentsSize.return_value.height.return_value = 2600
        page.scrollPosition.return_value.y.return_value = 1000
        assert web_surface.scroll_fraction() == 0.5

    def test_scroll_fraction_without_overflow(self, web_surface, view):
        view.page.return_value.contentsSize.return_value.height.return_value = 500
        assert web_surface.scroll_fraction() == 0.0

    def test_scroll_to_fraction_runs_immediately_when_loaded(self, web_surface, view):
        web_surface.scroll_to_fraction(0.5)
        script = view.page.return_value.runJavaScript.call_args[0][0]
        assert "scrollTop = 0.500000" in script

    def test_scroll_to_fraction_waits_for_injected_document(self, web_surface, view):
        run_js = view.page.return_value.runJavaScript
        web_surface.set_html("<p>text</p>")

        web_surface.scroll_to_fraction(0.25)
        run_js.assert_not_called()

        web_surface._on_load_finished(True)
        run_js.assert_called_once()
        assert "scrollTop = 0.250000" in run_js.call_args[0][0]

    def test_load_finished_is_connected(self, web_surface, view):
        view.loadFinished.connect.assert_called_once_with(web_surface._on_load_finished)


def test_parse_pixels():
    assert _parse_pixels("400px") == 400
    assert _parse_pixels("12.5px") == 12
    assert _parse_pixels("100%") is None
