"""
Positional insertion relative to a target element.

Two representations share one placement rule:
- before:  immediately preceding the target among its parent's children
- after:   immediately following the target
- prepend: first child of the target
- append:  last child of the target (also used for unknown positions)
"""

from __future__ import annotations

from bs4.element import PageElement, Tag

from absmartly_ssr.domain.entities import InsertPosition
from absmartly_ssr.ports.logger import LoggerPort

POSITIONS: frozenset[str] = frozenset(["before", "after", "prepend", "append"])


def normalize_position(position: str | None) -> InsertPosition:
    if position in POSITIONS:
        return position  # type: ignore[return-value]
    return "append"


def insert_at_position(
    position: str | None,
    content: str,
    match: str,
    open_tag: str,
    inner_content: str,
    close_tag: str,
) -> str:
    """
    Place ``content`` relative to a regex-matched element.

    ``match`` is the whole element; ``open_tag``, ``inner_content`` and
    ``close_tag`` are its three parts.
    """
    pos = normalize_position(position)
    if pos == "before":
        return f"{content}{match}"
    if pos == "after":
        return f"{match}{content}"
    if pos == "prepend":
        return f"{open_tag}{content}{inner_content}{close_tag}"
    return f"{open_tag}{inner_content}{content}{close_tag}"


def insert_element_at_position(
    position: str | None,
    node: PageElement,
    target: Tag,
    logger: LoggerPort | None = None,
) -> None:
    """
    Place ``node`` relative to ``target`` in a parsed tree.

    before/after on a parentless target falls back to append.
    """
    pos = normalize_position(position)

    if pos in ("before", "after") and target.parent is None:
        if logger:
            logger.warn(
                "Target has no parent node, appending instead",
                {"position": pos, "target": target.name},
            )
        target.append(node)
        return

    if pos == "before":
        target.insert_before(node)
    elif pos == "after":
        target.insert_after(node)
    elif pos == "prepend":
        target.insert(0, node)
    else:
        target.append(node)
