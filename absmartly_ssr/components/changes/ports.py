"""
Changes component - Port interfaces.

Both backends implement ChangeApplierPort; the processor composes a primary
and a fallback applier rather than subclassing one from the other.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from absmartly_ssr.domain.entities import DOMChange


class ChangeApplierPort(Protocol):
    """Applies a batch of DOM changes to an HTML document."""

    def apply_changes(self, html: str, changes: Sequence[DOMChange]) -> str:
        """
        Apply ``changes`` in order and return the mutated HTML.

        A failing change is logged and skipped. Raises BackendError only if
        the document as a whole cannot be processed.
        """
        ...
