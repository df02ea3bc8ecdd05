"""
Markdown Renderer.

Converts note bodies to HTML for the preview pane and note cards, and
projects rendered HTML back to plain text for clipboard copies.
"""

from collections.abc import Sequence
from functools import cached_property
from html import escape
from html.parser import HTMLParser

import markdown

_BLOCK_TAGS = frozenset({
    "p", "div", "pre", "blockquote", "li", "tr", "table",
    "h1", "h2", "h3", "h4", "h5", "h6", "hr", "ul", "ol",
})


class _TextExtractor(HTMLParser):
    """Collects text content, breaking lines at block elements."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._after_break = False

    def handle_starttag(self, tag, attrs):
        if tag == "br":
            self.parts.append("\n")
            self._after_break = True

    def handle_endtag(self, tag):
        if tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_data(self, data):
        if self._after_break and data.startswith("\n"):
            data = data[1:]
        self._after_break = False
        # Whitespace between block tags is markup formatting, not content.
        if not data.strip() and "\n" in data:
            return
        self.parts.append(data)

    def text(self) -> str:
        lines = "".join(self.parts).splitlines()
        return "\n".join(line.rstrip() for line in lines).strip()


class MarkdownRenderer:
    """
    Markdown to HTML with the editor's settings applied.

    Args:
        extensions: Python-Markdown extension names
        hard_line_breaks: Render single newlines as <br /> (nl2br)
        escape_raw_html: Escape HTML embedded in the source instead of passing it through
        placeholder: Message rendered for empty input
    """

    def __init__(
        self,
        extensions: Sequence[str] = ("fenced_code", "tables", "sane_lists"),
        hard_line_breaks: bool = True,
        escape_raw_html: bool = True,
        placeholder: str = "Start writing to see preview",
    ) -> None:
        self.extensions = list(extensions)
        if hard_line_breaks and "nl2br" not in self.extensions:
            self.extensions.append("nl2br")
        self.escape_raw_html = escape_raw_html
        self.placeholder = placeholder

    @cached_property
    def _converter(self) -> markdown.Markdown:
        converter = markdown.Markdown(extensions=self.extensions)
        if self.escape_raw_html:
            # Without these the raw HTML is escaped as ordinary text.
            converter.preprocessors.deregister("html_block")
            converter.inlinePatterns.deregister("html")
        return converter

    def placeholder_html(self) -> str:
        return f'<p class="placeholder">{escape(self.placeholder)}</p>'

    def to_html(self, source: str | None) -> str:
        """Render source, or the placeholder paragraph when it is blank."""
        if not source or not source.strip():
            return self.placeholder_html()
        html = self._converter.reset().convert(source)
        return html

    @staticmethod
    def to_text(html: str) -> str:
        """Plain-text projection of rendered HTML."""
        extractor = _TextExtractor()
        extractor.feed(html)
        extractor.close()
        return extractor.text()
