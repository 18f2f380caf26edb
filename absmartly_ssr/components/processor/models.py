"""
Processor component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from absmartly_ssr.domain.entities import ExperimentData


@dataclass(frozen=True)
class ProcessHtmlInput:
    """Input for rewriting one page for the current request's assignments."""

    html: str
    experiments: tuple[ExperimentData, ...]


@dataclass(frozen=True)
class ProcessHtmlOutput:
    """Output from processing one page."""

    html: str
    errors: list[str] = field(default_factory=list)
    success: bool = True
