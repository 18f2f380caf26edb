"""
Regex backend - applies DOM changes to the raw HTML string.

Availability fallback for when the tree backend cannot run. Selector
support is deliberately narrow: a selector is reduced to a tag name
(default ``div``) plus at most one ``#id`` or ``.class`` token, the first
one that appears. Descendant, compound and pseudo selectors are not
understood, and matching has no awareness of nesting.

Key behaviors:
- text/html/delete/create/move use the tag plus its id/class refinement
- attribute/class/style rewrite every opening tag with the tag name alone
- text inserts are HTML-escaped; html inserts are sanitized, not escaped
- text only rewrites elements whose body contains no markup
"""

from __future__ import annotations

import html as html_lib
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from absmartly_ssr.domain.entities import DOMChange
from absmartly_ssr.domain.markup import escape_attribute, escape_html
from absmartly_ssr.domain.position import insert_at_position
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
from ._tree import STYLE_ELEMENT_ID
from .models import SelectorParts

_FLAGS = re.IGNORECASE | re.DOTALL

_TAG_TOKEN = re.compile(r"^([a-zA-Z][a-zA-Z0-9]*)")
_REFINEMENT_TOKEN = re.compile(r"([#.])([a-zA-Z0-9_-]+)")
_INVALID_CLASS_CHARS = re.compile(r"[^\w-]")

# One attribute inside an opening tag, with its leading whitespace
_ATTRIBUTE = re.compile(
    r"""(?P<lead>\s+)(?P<name>[^\s"'>/=]+)(?:\s*=\s*(?P<value>"[^"]*"|'[^']*'|[^\s"'>]+))?"""
)

_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_OPEN = re.compile(r"<body(?=[\s/>])[^>]*>", re.IGNORECASE)
_HTML_OPEN = re.compile(r"<html(?=[\s/>])[^>]*>", re.IGNORECASE)


# --- Selector decomposition ---


def decompose_selector(selector: str) -> SelectorParts:
    """
    Reduce a selector to a tag name and one optional id/class refinement.

    "h1" -> (h1), "div#main" -> (div, id=main), ".promo" -> (div, class=promo),
    "ul.nav li.item" -> (ul, class=nav).
    """
    text = selector.strip()
    tag_match = _TAG_TOKEN.match(text)
    tag = tag_match.group(1).lower() if tag_match else "div"

    refinement = _REFINEMENT_TOKEN.search(text)
    if refinement is None:
        return SelectorParts(tag=tag)
    if refinement.group(1) == "#":
        return SelectorParts(tag=tag, element_id=refinement.group(2))
    return SelectorParts(tag=tag, class_name=refinement.group(2))


def build_open_tag_pattern(parts: SelectorParts) -> str:
    """Pattern source for the opening tag of elements matching ``parts``."""
    tag = re.escape(parts.tag)
    if not parts.is_refined:
        return rf"<{tag}(?=[\s/>])[^>]*>"

    if parts.element_id:
        value = re.escape(parts.element_id)
        refinement = rf"""\sid\s*=\s*(?:"{value}"|'{value}'|{value}(?=[\s/>]))"""
    else:
        value = re.escape(parts.class_name)
        refinement = (
            rf'\sclass\s*=\s*(?:"(?:[^"]*\s)?{value}(?:\s[^"]*)?"'
            rf"|'(?:[^']*\s)?{value}(?:\s[^']*)?'|{value}(?=[\s/>]))"
        )

    return rf"<{tag}(?=[\s/>])[^>]*?{refinement}[^>]*>"


def build_selector_pattern(parts: SelectorParts, inner: str = r".*?") -> re.Pattern[str]:
    """Element pattern with ``open``, ``inner`` and ``close`` groups."""
    return re.compile(
        rf"(?P<open>{build_open_tag_pattern(parts)})(?P<inner>{inner})"
        rf"(?P<close></{re.escape(parts.tag)}\s*>)",
        _FLAGS,
    )


# --- Attribute list editing ---


def _find_attribute(attrs: str, name: str) -> re.Match[str] | None:
    wanted = name.lower()
    for match in _ATTRIBUTE.finditer(attrs):
        if match.group("name").lower() == wanted:
            return match
    return None


def _attribute_value(match: re.Match[str] | None) -> str:
    if match is None or match.group("value") is None:
        return ""
    value = match.group("value")
    if value[:1] in ('"', "'"):
        value = value[1:-1]
    return html_lib.unescape(value)


def _remove_attribute(attrs: str, name: str) -> str:
    match = _find_attribute(attrs, name)
    if match is None:
        return attrs
    return attrs[: match.start()] + attrs[match.end() :]


def _set_attribute(attrs: str, name: str, value: str) -> str:
    rendered = f'{name}="{escape_attribute(value)}"'
    match = _find_attribute(attrs, name)
    if match is not None:
        return attrs[: match.start("name")] + rendered + attrs[match.end() :]

    stripped = attrs.rstrip()
    if stripped.endswith("/"):
        return f"{stripped[:-1].rstrip()} {rendered} /"
    return f"{stripped} {rendered}"


def _insert_at_match(html: str, match: re.Match[str], position: str, content: str) -> str:
    placed = insert_at_position(
        position,
        content,
        match.group(0),
        match.group("open"),
        match.group("inner"),
        match.group("close"),
    )
    return html[: match.start()] + placed + html[match.end() :]


class RegexChangeApplier:
    """Regex backend (ChangeApplierPort)."""

    def __init__(
        self,
        logger: LoggerPort | None = None,
        style_element_id: str = STYLE_ELEMENT_ID,
    ) -> None:
        self._logger = logger
        self._style_element_id = style_element_id

    def apply_changes(self, html: str, changes: Sequence[DOMChange]) -> str:
        modified = html

        for change in changes:
            try:
                modified = self.apply_change(modified, change)
            except Exception as e:
                if self._logger:
                    self._logger.error(
                        "Failed to apply change",
                        {"error": str(e), "change": describe_change(change)},
                    )

        return modified

    def apply_change(self, html: str, change: DOMChange) -> str:
        """Apply one change and return the new HTML."""
        require_valid(change)

        if change.type == "javascript":
            self._warn(
                "JavaScript changes are not supported server-side",
                {"selector": change.selector},
            )
            return html

        if change.type == "styleRules":
            return self.add_style_rules(html, change.rules or "")

        parts = decompose_selector(change.selector)

        if change.type == "text":
            return self._replace_text(html, parts, change)
        if change.type == "html":
            return self._replace_inner_html(html, parts, change)
        if change.type == "delete":
            return self._delete_elements(html, parts, change)
        if change.type == "create":
            return self._create_element(html, parts, change)
        if change.type == "move":
            return self._move_element(html, parts, change)
        if change.type == "attribute":
            return self._apply_attribute(html, parts, change)
        if change.type == "class":
            return self._apply_class(html, parts, change)
        return self._apply_style(html, parts, change)

    # --- Element body mutations ---

    def _replace_text(self, html: str, parts: SelectorParts, change: DOMChange) -> str:
        pattern = build_selector_pattern(parts, inner=r"[^<]*")
        escaped = escape_html(coerce_text(change.value))
        result, count = pattern.subn(
            lambda m: f"{m.group('open')}{escaped}{m.group('close')}", html
        )
        if count == 0:
            self._selector_miss(change.selector)
        return result

    def _replace_inner_html(self, html: str, parts: SelectorParts, change: DOMChange) -> str:
        pattern = build_selector_pattern(parts)
        sanitized = sanitize_html_content(coerce_text(change.value), self._logger)
        result, count = pattern.subn(
            lambda m: f"{m.group('open')}{sanitized}{m.group('close')}", html
        )
        if count == 0:
            self._selector_miss(change.selector)
        return result

    def _delete_elements(self, html: str, parts: SelectorParts, change: DOMChange) -> str:
        result, count = build_selector_pattern(parts).subn("", html)
        if count == 0:
            self._selector_miss(change.selector)
        return result

    def _create_element(self, html: str, parts: SelectorParts, change: DOMChange) -> str:
        element_html = self._build_element(change.value)
        source = build_selector_pattern(parts)

        matches = list(source.finditer(html))
        if not matches:
            self._selector_miss(change.selector)
            return html

        if change.target:
            target = build_selector_pattern(decompose_selector(change.target)).search(html)
            if target is not None:
                # one new element per matched source element, as the tree backend does
                return _insert_at_match(html, target, change.position, element_html * len(matches))
            self._debug("Create target not found, using matched element", {"target": change.target})

        return source.sub(
            lambda m: insert_at_position(
                change.position,
                element_html,
                m.group(0),
                m.group("open"),
                m.group("inner"),
                m.group("close"),
            ),
            html,
        )

    def _build_element(self, config: Mapping[str, Any]) -> str:
        tag = str(config.get("tag") or "div")
        rendered = [tag]

        for name, value in (config.get("attributes") or {}).items():
            if value is None:
                continue
            sanitized = sanitize_attribute_value(str(name), coerce_text(value), self._logger)
            if sanitized != "":
                rendered.append(f'{name}="{escape_attribute(sanitized)}"')

        inner = ""
        if config.get("html"):
            inner = sanitize_html_content(coerce_text(config.get("html")), self._logger)

        return f"<{' '.join(rendered)}>{inner}</{tag}>"

    def _move_element(self, html: str, parts: SelectorParts, change: DOMChange) -> str:
        source = build_selector_pattern(parts).search(html)
        if source is None:
            self._warn("Source element not found for move", {"selector": change.selector})
            return html

        element_html = source.group(0)
        remaining = html[: source.start()] + html[source.end() :]

        target_parts = decompose_selector(change.target or "")
        target = build_selector_pattern(target_parts).search(remaining)
        if target is None:
            self._warn("Target not found for move", {"target": change.target})
            return html

        return _insert_at_match(remaining, target, change.position, element_html)

    # --- Opening tag mutations ---

    def _rewrite_open_tags(
        self,
        html: str,
        parts: SelectorParts,
        selector: str,
        transform: Callable[[str], str],
    ) -> str:
        # id/class refinement is not applied to attribute-level changes
        pattern = re.compile(
            rf"<(?P<name>{re.escape(parts.tag)})(?=[\s/>])(?P<attrs>[^>]*)>", re.IGNORECASE
        )
        result, count = pattern.subn(
            lambda m: f"<{m.group('name')}{transform(m.group('attrs'))}>", html
        )
        if count == 0:
            self._selector_miss(selector)
        return result

    def _apply_attribute(self, html: str, parts: SelectorParts, change: DOMChange) -> str:
        name = (change.name or "").strip()

        if change.value is None:
            return self._rewrite_open_tags(
                html, parts, change.selector, lambda attrs: _remove_attribute(attrs, name)
            )

        sanitized = sanitize_attribute_value(name, coerce_text(change.value), self._logger)
        if sanitized == "":
            return self._rewrite_open_tags(
                html, parts, change.selector, lambda attrs: _remove_attribute(attrs, name)
            )

        return self._rewrite_open_tags(
            html, parts, change.selector, lambda attrs: _set_attribute(attrs, name, sanitized)
        )

    def _apply_class(self, html: str, parts: SelectorParts, change: DOMChange) -> str:
        names = [
            cleaned
            for cleaned in (_INVALID_CLASS_CHARS.sub("", n) for n in split_class_names(change.value))
            if cleaned
        ]

        def transform(attrs: str) -> str:
            current = _attribute_value(_find_attribute(attrs, "class")).split()
            if change.action == "add":
                updated = current + [name for name in names if name not in current]
            elif change.action == "remove":
                updated = [name for name in current if name not in names]
                if not updated:
                    return _remove_attribute(attrs, "class")
            else:
                updated = names
            return _set_attribute(attrs, "class", " ".join(updated))

        return self._rewrite_open_tags(html, parts, change.selector, transform)

    def _apply_style(self, html: str, parts: SelectorParts, change: DOMChange) -> str:
        value = change.value

        def transform(attrs: str) -> str:
            if isinstance(value, Mapping):
                current = _attribute_value(_find_attribute(attrs, "style"))
                style = merge_styles(current, value)
            else:
                style = coerce_text(value)
            return _set_attribute(attrs, "style", sanitize_style_value(style, self._logger))

        return self._rewrite_open_tags(html, parts, change.selector, transform)

    # --- Document level ---

    def add_style_rules(self, html: str, rules: str) -> str:
        """
        Append ``rules`` to the shared style element, creating it if needed.

        Creation follows the tree backend: end of <head>, else start of
        <body>, else start of <html>, else start of the document.
        """
        sanitized = sanitize_style_value(rules, self._logger)
        element_id = re.escape(self._style_element_id)
        existing = re.compile(
            rf"""(?P<open><style(?=[\s/>])[^>]*\sid\s*=\s*["']?{element_id}["']?(?=[\s/>])[^>]*>)"""
            rf"(?P<inner>.*?)(?P<close></style\s*>)",
            _FLAGS,
        ).search(html)

        if existing is not None:
            updated = f"{existing.group('open')}{existing.group('inner')}\n{sanitized}{existing.group('close')}"
            return html[: existing.start()] + updated + html[existing.end() :]

        style_tag = f'<style id="{escape_attribute(self._style_element_id)}">\n{sanitized}</style>'

        head_close = _HEAD_CLOSE.search(html)
        if head_close is not None:
            return html[: head_close.start()] + style_tag + html[head_close.start() :]

        for opening in (_BODY_OPEN, _HTML_OPEN):
            match = opening.search(html)
            if match is not None:
                return html[: match.end()] + style_tag + html[match.end() :]

        return style_tag + html

    # --- Logging ---

    def _selector_miss(self, selector: str) -> None:
        self._warn("No elements found for selector", {"selector": selector})

    def _warn(self, message: str, data: dict[str, Any]) -> None:
        if self._logger:
            self._logger.warn(message, data)

    def _debug(self, message: str, data: dict[str, Any]) -> None:
        if self._logger:
            self._logger.debug(message, data)
