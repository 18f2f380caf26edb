"""
Changes component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from absmartly_ssr.domain.entities import DOMChange

Backend = Literal["tree", "regex"]


@dataclass(frozen=True)
class SelectorParts:
    """
    What the regex backend understands of a selector.

    A tag name plus at most one id or class refinement.
    """

    tag: str
    element_id: str | None = None
    class_name: str | None = None

    @property
    def is_refined(self) -> bool:
        return bool(self.element_id or self.class_name)


# --- Input Models ---


@dataclass(frozen=True)
class ApplyChangesInput:
    """Input for applying a batch of changes with one backend."""

    html: str
    changes: tuple[DOMChange, ...]
    backend: Backend = "tree"


# --- Output Models ---


@dataclass(frozen=True)
class ApplyChangesOutput:
    """Output from applying a batch of changes."""

    html: str
    backend: Backend
    errors: list[str] = field(default_factory=list)
    success: bool = True
