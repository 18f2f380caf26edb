"""
Processor component - Page rewriting entry points.

Invariants:
- Treatment tags are resolved before any DOM change runs
- Failures stay inside one experiment; nothing propagates to the caller
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from absmartly_ssr.adapters.logger import MemoryLogger
from absmartly_ssr.domain.entities import ExperimentData
from absmartly_ssr.ports.logger import LoggerPort
from absmartly_ssr.rules.models import EngineSettings

from ._impl import HTMLProcessor
from .models import ProcessHtmlInput, ProcessHtmlOutput

# --- Component Entry Points ---


def run_process(
    inp: ProcessHtmlInput,
    *,
    settings: EngineSettings | None = None,
    logger: LoggerPort | None = None,
) -> ProcessHtmlOutput:
    """
    Process one page and report the errors logged along the way.

    Errors are collected with a recording logger and forwarded to
    ``logger`` when one is given.

    Args:
        inp: Page HTML and the request's experiment assignments.
        settings: Engine settings; defaults apply when None.
        logger: Optional host logger.

    Returns:
        ProcessHtmlOutput with the rewritten HTML.
    """
    recorder = _ForwardingLogger(target=logger)
    processor = HTMLProcessor(settings=settings, logger=recorder)
    html = processor.process_html(inp.html, inp.experiments)

    return ProcessHtmlOutput(html=html, errors=recorder.messages("error"), success=True)


def process_html(
    html: str,
    experiments: Sequence[ExperimentData],
    settings: EngineSettings | None = None,
    logger: LoggerPort | None = None,
) -> str:
    """Convenience wrapper: build a processor and rewrite ``html``."""
    return HTMLProcessor(settings=settings, logger=logger).process_html(html, experiments)


class _ForwardingLogger(MemoryLogger):
    """Records every call and passes it on to ``target``."""

    def __init__(self, target: LoggerPort | None = None) -> None:
        super().__init__()
        self._target = target

    def _record(self, level: str, message: str, data: Mapping[str, Any] | None) -> None:
        super()._record(level, message, data)
        if self._target is not None:
            getattr(self._target, level)(message, data)
