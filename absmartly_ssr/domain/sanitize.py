"""
HTML sanitization for content inserted into pages.

Blocks:
- script/style/object/embed/link elements, including their bodies
- event handler attributes (``on*``)
- ``javascript:``, ``vbscript:`` and ``data:text/html`` URLs in any attribute

Everything else is preserved, including inline ``style`` values. Scheme
detection ignores case and surrounding whitespace. Nothing in this module
raises; blocked content is reported through the optional logger.
"""

from __future__ import annotations

import re

from absmartly_ssr.domain.markup import parse_markup, render_markup
from absmartly_ssr.ports.logger import LoggerPort

BLOCKED_TAGS: frozenset[str] = frozenset(["script", "style", "object", "embed", "link"])

# Checked against every attribute by the HTML sanitizer
BLOCKED_CONTENT_SCHEMES: tuple[str, ...] = ("javascript:", "vbscript:", "data:text/html")

# Checked against href/src by the single-attribute sanitizer
BLOCKED_URL_SCHEMES: tuple[str, ...] = ("javascript:", "vbscript:", "data:")
URL_ATTRIBUTES: frozenset[str] = frozenset(["href", "src"])

_DANGEROUS_STYLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"expression\s*\(", re.IGNORECASE),
    re.compile(r"@import", re.IGNORECASE),
    re.compile(r"import\s+", re.IGNORECASE),
    re.compile(r"behavior\s*:", re.IGNORECASE),
    re.compile(r"-moz-binding", re.IGNORECASE),
)

# Browsers ignore control characters and whitespace inside a URL scheme
_SCHEME_NOISE = re.compile(r"[\x00-\x20]+")


def has_blocked_scheme(value: str, schemes: tuple[str, ...] = BLOCKED_URL_SCHEMES) -> bool:
    """True if ``value`` starts with one of ``schemes``, ignoring case and whitespace."""
    probe = _SCHEME_NOISE.sub("", str(value)).lower()
    return probe.startswith(schemes)


def is_event_handler(name: str) -> bool:
    return name.strip().lower().startswith("on")


def sanitize_attribute_value(
    name: str,
    value: str,
    logger: LoggerPort | None = None,
) -> str:
    """
    Sanitize a single attribute value.

    Returns '' when the attribute is an event handler or an href/src with a
    blocked scheme; the caller must then omit the attribute. Otherwise the
    value is returned unchanged.
    """
    if is_event_handler(name):
        if logger:
            logger.warn("Blocked event handler attribute", {"attribute": name})
        return ""

    if name.strip().lower() in URL_ATTRIBUTES and has_blocked_scheme(value):
        if logger:
            logger.warn(
                "Blocked dangerous protocol in attribute",
                {"attribute": name, "value": str(value)[:100]},
            )
        return ""

    return value


def sanitize_html_content(html: str, logger: LoggerPort | None = None) -> str:
    """
    Sanitize an HTML fragment before it is inserted into a document.

    Returns '' for empty or whitespace-only input.
    """
    if not html or not html.strip():
        return ""

    soup = parse_markup(html)
    removed_tags: list[str] = []
    removed_attrs: list[str] = []

    for tag in soup.find_all(sorted(BLOCKED_TAGS)):
        if tag.decomposed:
            continue
        removed_tags.append(tag.name)
        tag.decompose()

    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            raw = tag.attrs[attr]
            value = " ".join(raw) if isinstance(raw, list) else str(raw)
            if is_event_handler(attr) or has_blocked_scheme(value, BLOCKED_CONTENT_SCHEMES):
                removed_attrs.append(f"{tag.name}.{attr}")
                del tag[attr]

    if logger and (removed_tags or removed_attrs):
        logger.warn(
            "Sanitized dangerous HTML content",
            {"removed_tags": removed_tags, "removed_attributes": removed_attrs},
        )

    return render_markup(soup)


def sanitize_style_value(styles: str, logger: LoggerPort | None = None) -> str:
    """Strip script-capable constructs from inline style or stylesheet text."""
    sanitized = styles
    for pattern in _DANGEROUS_STYLE_PATTERNS:
        sanitized = pattern.sub("", sanitized)

    if logger and sanitized != styles:
        logger.warn("Removed dangerous constructs from style", {"original": styles[:100]})

    return sanitized
