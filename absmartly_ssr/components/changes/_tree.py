"""
Tree backend - applies DOM changes to a parsed document.

The document is parsed once with BeautifulSoup and selectors are resolved
with full CSS semantics (soupsieve): compound selectors, attribute
selectors and pseudo-classes all work. Every matched element is mutated,
not only the first.

Invariants:
- Inserted HTML and attribute values are sanitized first
- One failing change never aborts the rest of the batch
- The shared stylesheet element is found or created per document, never
  cached between documents
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Stylesheet, Tag

from absmartly_ssr.domain.entities import DOMChange
from absmartly_ssr.domain.errors import BackendError
from absmartly_ssr.domain.markup import DEFAULT_PARSER, parse_markup, render_markup
from absmartly_ssr.domain.position import insert_element_at_position, normalize_position
from absmartly_ssr.domain.sanitize import (
    sanitize_attribute_value,
    sanitize_html_content,
    sanitize_style_value,
)
from absmartly_ssr.ports.logger import LoggerPort

from ._common import (
    coerce_text,
    describe_change,
    merge_styles,
    require_valid,
    split_class_names,
)

STYLE_ELEMENT_ID = "absmartly-styles"


class TreeChangeApplier:
    """
    Tree backend (ChangeApplierPort).

    ``parser`` is any BeautifulSoup tree builder name; fragments inserted
    by ``html`` and ``create`` changes are always parsed with the built-in
    ``html.parser`` so they are never wrapped in ``<html><body>``.
    """

    def __init__(
        self,
        logger: LoggerPort | None = None,
        parser: str = DEFAULT_PARSER,
        style_element_id: str = STYLE_ELEMENT_ID,
    ) -> None:
        self._logger = logger
        self._parser = parser
        self._style_element_id = style_element_id

    def apply_changes(self, html: str, changes: Sequence[DOMChange]) -> str:
        try:
            document = parse_markup(html, self._parser)
        except Exception as e:
            self._error(
                "Tree parsing failed",
                {"error": str(e), "html_length": len(html), "html_preview": html[:200]},
            )
            raise BackendError(f"Could not parse document: {e}") from e

        for change in changes:
            try:
                self.apply_change(document, change)
            except Exception as e:
                self._error(
                    "Failed to apply change",
                    {"error": str(e), "change": describe_change(change)},
                )

        try:
            return render_markup(document)
        except Exception as e:
            raise BackendError(f"Could not serialize document: {e}") from e

    def apply_change(self, document: BeautifulSoup, change: DOMChange) -> None:
        """Apply one change to ``document`` in place."""
        require_valid(change)

        if change.type == "javascript":
            self._warn(
                "JavaScript changes are not supported server-side",
                {"selector": change.selector},
            )
            return

        if change.type == "styleRules":
            self.add_style_rules(document, change.rules or "")
            return

        elements = document.select(change.selector)
        if not elements:
            self._warn("No elements found for selector", {"selector": change.selector})
            return

        for element in elements:
            self._apply_to_element(document, element, change)

    def _apply_to_element(self, document: BeautifulSoup, element: Tag, change: DOMChange) -> None:
        if change.type == "text":
            element.string = coerce_text(change.value)
        elif change.type == "html":
            self._set_inner_html(element, coerce_text(change.value))
        elif change.type == "style":
            self._apply_style(element, change.value)
        elif change.type == "class":
            self._apply_class(element, change)
        elif change.type == "attribute":
            self._apply_attribute(element, change)
        elif change.type == "delete":
            element.extract()
        elif change.type == "move":
            self._move_element(document, element, change)
        elif change.type == "create":
            self._create_element(document, element, change)

    # --- Mutations ---

    def _set_inner_html(self, element: Tag, html: str) -> None:
        fragment = parse_markup(sanitize_html_content(html, self._logger))
        element.clear()
        for node in list(fragment.contents):
            element.append(node.extract())

    def _apply_style(self, element: Tag, value: Any) -> None:
        if isinstance(value, Mapping):
            current = coerce_text(element.get("style"))
            style = merge_styles(current, value)
        else:
            style = coerce_text(value)
        element["style"] = sanitize_style_value(style, self._logger)

    def _apply_class(self, element: Tag, change: DOMChange) -> None:
        names = split_class_names(change.value)

        if change.action == "add":
            classes = _class_tokens(element)
            classes.extend(name for name in names if name not in classes)
            element["class"] = classes
        elif change.action == "remove":
            classes = [name for name in _class_tokens(element) if name not in names]
            if classes:
                element["class"] = classes
            else:
                element.attrs.pop("class", None)
        else:
            element["class"] = names

    def _apply_attribute(self, element: Tag, change: DOMChange) -> None:
        name = (change.name or "").strip()

        if change.value is None:
            element.attrs.pop(name, None)
            return

        sanitized = sanitize_attribute_value(name, coerce_text(change.value), self._logger)
        if sanitized == "":
            element.attrs.pop(name, None)
        else:
            element[name] = sanitized

    def _move_element(self, document: BeautifulSoup, element: Tag, change: DOMChange) -> None:
        target = document.select_one(change.target or "")
        if target is None:
            self._warn("Target not found for move", {"target": change.target})
            return

        if target is element or any(parent is element for parent in target.parents):
            self._warn(
                "Cannot move an element relative to itself or its descendant",
                {"selector": change.selector, "target": change.target},
            )
            return

        position = normalize_position(change.position)
        if position in ("before", "after") and target.parent is None:
            self._warn("Target has no parent node", {"target": change.target})
            return

        element.extract()
        insert_element_at_position(position, element, target, self._logger)

    def _create_element(self, document: BeautifulSoup, context: Tag, change: DOMChange) -> None:
        config: Mapping[str, Any] = change.value
        new_element = document.new_tag(str(config.get("tag") or "div"))

        html = config.get("html")
        if html:
            self._set_inner_html(new_element, coerce_text(html))

        for name, value in (config.get("attributes") or {}).items():
            if value is None:
                continue
            sanitized = sanitize_attribute_value(str(name), coerce_text(value), self._logger)
            if sanitized != "":
                new_element[str(name)] = sanitized

        target = context
        if change.target:
            resolved = document.select_one(change.target)
            if resolved is not None:
                target = resolved
            else:
                self._debug(
                    "Create target not found, using matched element",
                    {"target": change.target},
                )

        insert_element_at_position(change.position, new_element, target, self._logger)

    def add_style_rules(self, document: BeautifulSoup, rules: str) -> Tag:
        """
        Append ``rules`` to the document's shared style element.

        The element is created on first use: appended to <head>, else
        prepended to <body>, else prepended to the document root.
        """
        style = document.find("style", attrs={"id": self._style_element_id})

        if style is None:
            style = document.new_tag("style", attrs={"id": self._style_element_id})
            head = document.find("head")
            body = document.find("body")
            root = document.find("html")
            if head is not None:
                head.append(style)
            elif body is not None:
                body.insert(0, style)
            elif root is not None:
                root.insert(0, style)
            else:
                document.insert(0, style)

        # get_text() on <style> only returns Stylesheet strings
        existing = "".join(
            str(child) for child in style.contents if isinstance(child, NavigableString)
        )
        style.string = Stylesheet(f"{existing}\n{sanitize_style_value(rules, self._logger)}")
        return style

    # --- Logging ---

    def _warn(self, message: str, data: dict[str, Any]) -> None:
        if self._logger:
            self._logger.warn(message, data)

    def _error(self, message: str, data: dict[str, Any]) -> None:
        if self._logger:
            self._logger.error(message, data)

    def _debug(self, message: str, data: dict[str, Any]) -> None:
        if self._logger:
            self._logger.debug(message, data)


def _class_tokens(element: Tag) -> list[str]:
    raw = element.get("class")
    if raw is None:
        return []
    if isinstance(raw, list):
        return " ".join(raw).split()
    return str(raw).split()
