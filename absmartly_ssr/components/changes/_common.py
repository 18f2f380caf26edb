"""
Helpers shared by the tree and regex backends.

Validation lives here so both backends reject the same malformed changes
with the same messages.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from absmartly_ssr.domain.entities import CHANGE_TYPES, DOMChange
from absmartly_ssr.domain.errors import MalformedChangeError
from absmartly_ssr.domain.sanitize import BLOCKED_TAGS
from absmartly_ssr.domain.strings import camel_to_kebab

# Change types that act on the document rather than on matched elements
DOCUMENT_LEVEL_TYPES: frozenset[str] = frozenset(["styleRules", "javascript"])

TAG_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")
ATTRIBUTE_NAME_PATTERN = re.compile(r"^[A-Za-z_:][-A-Za-z0-9_:.]*$")


def validate_change(change: DOMChange) -> list[str]:
    """
    Check that a change carries the fields its type requires.

    Returns list of error messages; empty when the change is usable.
    """
    errors: list[str] = []

    if not change.type:
        errors.append("change requires a type")
        return errors

    if change.type not in CHANGE_TYPES:
        errors.append(f"Unsupported change type: {change.type}")
        return errors

    if change.type not in DOCUMENT_LEVEL_TYPES and not change.selector.strip():
        errors.append(f"{change.type} change requires a selector")

    if change.type == "attribute" and not (change.name and change.name.strip()):
        errors.append("attribute change requires name property")
    elif change.type == "attribute" and not ATTRIBUTE_NAME_PATTERN.match(change.name.strip()):
        errors.append(f"Invalid attribute name: {change.name}")

    if change.type == "move" and not (change.target and change.target.strip()):
        errors.append("move change requires target selector")

    if change.type == "styleRules" and not (change.rules and change.rules.strip()):
        errors.append("styleRules change requires rules property")

    if change.type == "style" and change.value is None:
        errors.append("style change requires value")

    if change.type == "class" and change.action in ("add", "remove") and not coerce_text(
        change.value
    ).strip():
        errors.append(f"class {change.action} requires a class name")

    if change.type == "create":
        errors.extend(_validate_create_config(change.value))

    return errors


def _validate_create_config(config: Any) -> list[str]:
    if not isinstance(config, Mapping):
        return ["create change requires a {tag, html, attributes} value"]

    errors: list[str] = []
    tag_name = str(config.get("tag") or "div")
    if not TAG_NAME_PATTERN.match(tag_name):
        errors.append(f"Invalid tag name for create: {tag_name}")
    elif tag_name.lower() in BLOCKED_TAGS:
        errors.append(f"Creating <{tag_name.lower()}> elements is not allowed")

    attributes = config.get("attributes")
    if attributes is not None and not isinstance(attributes, Mapping):
        errors.append("create attributes must be a mapping")
    elif attributes:
        for name in attributes:
            if not ATTRIBUTE_NAME_PATTERN.match(str(name)):
                errors.append(f"Invalid attribute name for create: {name}")

    return errors


def require_valid(change: DOMChange) -> None:
    """Raise MalformedChangeError if ``change`` fails validation."""
    errors = validate_change(change)
    if errors:
        raise MalformedChangeError("; ".join(errors), change_type=change.type)


def describe_change(change: DOMChange) -> dict[str, Any]:
    """Compact form of a change for log records."""
    return change.model_dump(exclude_none=True, exclude_defaults=True)


def coerce_text(value: Any) -> str:
    """String form of a change value (None -> '', booleans lower-cased)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# --- Inline styles ---


def parse_style_string(style: str) -> dict[str, str]:
    """Split ``a: b; c: d`` into an ordered mapping. Malformed parts are dropped."""
    styles: dict[str, str] = {}
    if not style:
        return styles

    for declaration in style.split(";"):
        key, sep, value = declaration.partition(":")
        key, value = key.strip(), value.strip()
        if sep and key and value:
            styles[key] = value
    return styles


def style_to_string(styles: Mapping[str, str]) -> str:
    return "; ".join(f"{key}: {value}" for key, value in styles.items())


def merge_styles(current: str, updates: Mapping[str, Any]) -> str:
    """Merge ``updates`` (camelCase or kebab-case keys) into an inline style."""
    styles = parse_style_string(current)
    for key, value in updates.items():
        styles[camel_to_kebab(str(key))] = coerce_text(value)
    return style_to_string(styles)


def split_class_names(value: Any) -> list[str]:
    return coerce_text(value).split()
