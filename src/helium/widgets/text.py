"""
Static content widgets: custom label and web page.
"""

from ..config.settings import AppSettings
from .base import BaseWidget, WidgetModule


class TextWidget(BaseWidget):
    """
    Custom label.

    Configuration:
        text: Label text (default: "")
    """

    module = WidgetModule.TEXT
    defaults = {"text": ""}
    text_options = ("text",)

    def render_preview(self, settings: AppSettings) -> str:
        return self.option("text") or "Unknown"


class WebPageWidget(BaseWidget):
    """
    Embedded web page.

    Configuration:
        url: Page address (default: "")
        showUrl: Show the address instead of the page title (default: False)
    """

    module = WidgetModule.WEB_PAGE
    defaults = {"url": "", "showUrl": False}
    text_options = ("url",)

    def render_preview(self, settings: AppSettings) -> str:
        url = self.option("url")
        if url and self.option("showUrl"):
            return url
        return "Web Page"
