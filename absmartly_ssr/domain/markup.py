"""
Markup helpers shared by the sanitizer and the change backends.

Parsing uses BeautifulSoup; output uses a minimal-escaping HTML formatter
that writes void elements as ``<br>`` rather than ``<br/>`` and keeps
attributes in source order, so untouched markup survives a
parse/serialize cycle as closely as possible.

Named entities are decoded by the parser and written back as characters:
``&nbsp;`` comes out as U+00A0 and ``&copy;`` as the copyright sign. Only
``&``, ``<`` and ``>`` are re-escaped.
"""

from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.element import PageElement, Tag
from bs4.formatter import HTMLFormatter

DEFAULT_PARSER = "html.parser"


class SourceOrderFormatter(HTMLFormatter):
    """HTMLFormatter that writes attributes in the order they were parsed."""

    def attributes(self, tag: Tag) -> list[tuple[str, Any]]:
        if tag.attrs is None:
            return []
        return [
            (key, None if self.empty_attributes_are_booleans and value == "" else value)
            for key, value in tag.attrs.items()
        ]


HTML_FORMATTER = SourceOrderFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    empty_attributes_are_booleans=True,
)

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
}


def parse_markup(html: str, parser: str = DEFAULT_PARSER) -> BeautifulSoup:
    """Parse a document or fragment into a mutable tree."""
    return BeautifulSoup(html, parser)


def render_markup(node: PageElement) -> str:
    """Serialize a tree (or subtree) back to HTML."""
    return node.decode(formatter=HTML_FORMATTER)


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters."""
    return "".join(_HTML_ESCAPES.get(char, char) for char in str(text))


def escape_attribute(value: str) -> str:
    """Escape a value for a double-quoted attribute, keeping it on one line."""
    return escape_html(value).replace("\n", "&#10;")
