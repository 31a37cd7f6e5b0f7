"""Web Surface - a Surface backed by a QWebEngineView."""

import asyncio
import re
from typing import Dict, List, Optional

from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QSizePolicy

from book_reader.ui.surface import Surface

EMPTY_DOCUMENT = "<html><body></body></html>"
FRAME_INTERVAL = 1 / 60


class WebSurface(Surface):
    """
    Paints reader content into a QWebEngineView.

    The view is owned by this surface; embed ``surface.view`` in a layout to
    show it. Inline styles are kept locally and mapped onto the widget where
    Qt has an equivalent (visibility, minimum height, size policy).
    """

    def __init__(self, surface_id: str = "reader-container", view: Optional[QWebEngineView] = None):
        super().__init__(surface_id)
        self.view = view if view is not None else QWebEngineView()
        self._styles: Dict[str, str] = {}
        self._html = ""

        # Scripts that must wait until the injected document has loaded
        self._loading = False
        self._after_load: List[str] = []
        self.view.loadFinished.connect(self._on_load_finished)

    def is_attached(self) -> bool:
        # Attached once the top-level window holding the view is shown
        return bool(self.view.window().isVisible())

    def get_style(self, name: str) -> str:
        return self._styles.get(name, "")

    def set_style(self, name: str, value: str) -> None:
        self._styles[name] = value

        if name in ("display", "visibility"):
            if value in ("none", "hidden"):
                self.view.hide()
            else:
                self.view.show()
        elif name == "min-height":
            pixels = _parse_pixels(value)
            if pixels is not None:
                self.view.setMinimumHeight(pixels)
        elif name in ("width", "height") and value.endswith("%"):
            self.view.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

    def computed_style(self, name: str) -> str:
        if name == "display":
            return "none" if self.view.isHidden() else "block"
        if name == "visibility":
            return self._styles.get("visibility", "visible")
        if name == "position":
            return self._styles.get("position", "static")
        return self._styles.get(name, "")

    def width(self) -> int:
        return int(self.view.width())

    def height(self) -> int:
        return int(self.view.height())

    def set_html(self, html: str) -> None:
        self._html = html
        self._loading = True
        self.view.setHtml(f"<html><body>{html}</body></html>" if html else EMPTY_DOCUMENT)

    def html(self) -> str:
        return self._html

    def scroll_by(self, dy: float) -> None:
        self.view.page().runJavaScript(
            f"(document.getElementById('text-content') || document.scrollingElement)"
            f".scrollBy({{top: {dy:.0f}, behavior: 'smooth'}});"
        )

    def scroll_to_fraction(self, fraction: float) -> None:
        fraction = min(max(fraction, 0.0), 1.0)
        script = (
            "(function() {"
            "var el = document.getElementById('text-content') || document.scrollingElement;"
            f"el.scrollTop = {fraction:.6f} * (el.scrollHeight - el.clientHeight);"
            "})();"
        )
        if self._loading:
            self._after_load.append(script)
        else:
            self.view.page().runJavaScript(script)

    def _on_load_finished(self, ok: bool) -> None:
        self._loading = False
        scripts, self._after_load = self._after_load, []
        for script in scripts:
            self.view.page().runJavaScript(script)

    def viewport_height(self) -> int:
        return int(self.view.height())

    def scroll_fraction(self) -> float:
        page = self.view.page()
        scrollable = page.contentsSize().height() - self.view.height()
        if scrollable <= 0:
            return 0.0
        return min(max(page.scrollPosition().y() / scrollable, 0.0), 1.0)

    async def next_frame(self) -> None:
        await asyncio.sleep(FRAME_INTERVAL)


def _parse_pixels(value: str) -> Optional[int]:
    match = re.fullmatch(r"\s*(\d+(?:\.\d+)?)px\s*", value)
    return int(float(match.group(1))) if match else None
