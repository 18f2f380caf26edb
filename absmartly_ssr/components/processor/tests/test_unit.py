"""
Processor component unit tests.

Tests for step order, backend fallback and per-experiment isolation.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from absmartly_ssr.adapters.logger import MemoryLogger, StdlibLogger
from absmartly_ssr.components.changes import RegexChangeApplier, TreeChangeApplier
from absmartly_ssr.components.processor import (
    HTMLProcessor,
    ProcessHtmlInput,
    process_html,
    run_process,
)
from absmartly_ssr.domain.entities import DOMChange, ExperimentData
from absmartly_ssr.domain.errors import BackendError
from absmartly_ssr.rules.models import EngineSettings

PAGE = '<html><head></head><body><h1>Old Title</h1><p class="old">Text</p></body></html>'

HERO = (
    '<Treatment name="hero">'
    '<TreatmentVariant variant="0">Control</TreatmentVariant>'
    '<TreatmentVariant variant="1">Variant</TreatmentVariant>'
    "</Treatment>"
)


def experiment(name: str, treatment: int = 1, *changes: dict[str, object]) -> ExperimentData:
    return ExperimentData.from_dict({"name": name, "treatment": treatment, "changes": list(changes)})


# --- Test Doubles ---


class FailingApplier:
    """Applier that always fails for the whole document."""

    def __init__(self) -> None:
        self.calls = 0

    def apply_changes(self, html: str, changes: Sequence[DOMChange]) -> str:
        self.calls += 1
        raise BackendError("boom")


class SelectiveApplier:
    """Delegates to a real applier unless a change targets ``#boom``."""

    def __init__(self, inner: TreeChangeApplier | RegexChangeApplier) -> None:
        self._inner = inner

    def apply_changes(self, html: str, changes: Sequence[DOMChange]) -> str:
        if any(change.selector == "#boom" for change in changes):
            raise BackendError("boom")
        return self._inner.apply_changes(html, changes)


@pytest.fixture
def logger() -> MemoryLogger:
    return MemoryLogger()


@pytest.fixture
def processor(logger: MemoryLogger) -> HTMLProcessor:
    return HTMLProcessor(logger=logger)


# --- Processing ---


class TestProcessHtml:
    """Test the full pipeline."""

    def test_applies_changes(self, processor: HTMLProcessor) -> None:
        exp = experiment(
            "headline",
            1,
            {"selector": "h1", "type": "text", "value": "New Title"},
            {"selector": "p", "type": "class", "action": "add", "value": "new"},
        )
        result = processor.process_html(PAGE, [exp])

        assert "<h1>New Title</h1>" in result
        assert 'class="old new"' in result

    def test_resolves_treatment_tags(self, processor: HTMLProcessor) -> None:
        result = processor.process_html(f"<div>{HERO}</div>", [experiment("hero", 1)])
        assert result == "<div>Variant</div>"

    def test_unassigned_experiment_renders_control(self, processor: HTMLProcessor) -> None:
        result = processor.process_html(f"<div>{HERO}</div>", [experiment("hero", -1)])
        assert result == "<div>Control</div>"

    def test_tags_without_experiment_render_control(self, processor: HTMLProcessor) -> None:
        assert processor.process_html(HERO, []) == "Control"

    def test_nameless_tag_left_unresolved(
        self, processor: HTMLProcessor, logger: MemoryLogger
    ) -> None:
        nameless = "<Treatment><TreatmentVariant variant=0>x</TreatmentVariant></Treatment>"
        result = processor.process_html(f"<div>{nameless}</div>{HERO}", [experiment("hero", 1)])

        assert result == f"<div>{nameless}</div>Variant"
        assert logger.has("warn", "Treatment tag without a name left unresolved")

    def test_embeds_disabled(self, logger: MemoryLogger) -> None:
        processor = HTMLProcessor(settings=EngineSettings(enable_embeds=False), logger=logger)
        assert processor.process_html(HERO, [experiment("hero", 1)]) == HERO

    def test_variant_mapping_from_settings(self, logger: MemoryLogger) -> None:
        html = (
            '<Treatment name="e"><TreatmentVariant variant="control">c</TreatmentVariant>'
            '<TreatmentVariant variant="promo">p</TreatmentVariant></Treatment>'
        )
        settings = EngineSettings(variant_mapping={"control": 0, "promo": 1})
        processor = HTMLProcessor(settings=settings, logger=logger)
        assert processor.process_html(html, [experiment("e", 1)]) == "p"

    def test_treatment_tags_resolved_before_changes(self, processor: HTMLProcessor) -> None:
        html = f'<div id="slot">{HERO}</div>'
        exp = experiment("hero", 1, {"selector": "#slot", "type": "class", "value": "ready"})
        result = processor.process_html(html, [exp])
        assert result == '<div id="slot" class="ready">Variant</div>'

    def test_experiments_applied_in_order(self, processor: HTMLProcessor) -> None:
        first = experiment("a", 1, {"selector": "h1", "type": "text", "value": "First"})
        second = experiment("b", 1, {"selector": "h1", "type": "text", "value": "Second"})
        result = processor.process_html(PAGE, [first, second])
        assert "<h1>Second</h1>" in result

    def test_experiment_without_changes_is_skipped(
        self, processor: HTMLProcessor, logger: MemoryLogger
    ) -> None:
        assert processor.process_html(PAGE, [experiment("idle", 0)]) == PAGE
        assert not logger.has("debug", "Applying DOM changes")


# --- Backend Fallback ---


class TestBackendFallback:
    """Test tree -> regex fallback."""

    def test_falls_back_to_regex(self, logger: MemoryLogger) -> None:
        primary = FailingApplier()
        processor = HTMLProcessor(logger=logger, primary=primary)
        exp = experiment("e", 1, {"selector": "h1", "type": "text", "value": "New"})

        result = processor.process_html("<h1>Old</h1>", [exp])

        assert result == "<h1>New</h1>"
        assert primary.calls == 1
        assert logger.has("warn", "falling back to regex backend")

    def test_both_backends_fail(self, logger: MemoryLogger) -> None:
        processor = HTMLProcessor(logger=logger, primary=FailingApplier(), fallback=FailingApplier())
        exp = experiment("e", 1, {"selector": "h1", "type": "text", "value": "New"})

        assert processor.process_html("<h1>Old</h1>", [exp]) == "<h1>Old</h1>"
        assert logger.has("error", "Both backends failed")

    def test_tree_backend_disabled(self, logger: MemoryLogger) -> None:
        processor = HTMLProcessor(settings=EngineSettings(use_tree_backend=False), logger=logger)
        exp = experiment("e", 1, {"selector": "h1", "type": "text", "value": "New"})

        assert processor.primary is None
        assert processor.process_html("<h1>Old</h1>", [exp]) == "<h1>New</h1>"

    def test_failure_isolated_per_experiment(self, logger: MemoryLogger) -> None:
        processor = HTMLProcessor(
            logger=logger,
            primary=SelectiveApplier(TreeChangeApplier(logger=logger)),
            fallback=SelectiveApplier(RegexChangeApplier(logger=logger)),
        )
        experiments = [
            experiment("one", 1, {"selector": "h1", "type": "text", "value": "One"}),
            experiment("two", 1, {"selector": "#boom", "type": "delete"}),
            experiment("three", 1, {"selector": "p", "type": "text", "value": "Three"}),
        ]

        result = processor.process_html(PAGE, experiments)

        assert "<h1>One</h1>" in result
        assert ">Three</p>" in result
        assert logger.has("error", "Both backends failed")


# --- Entry Points ---


class TestEntryPoints:
    """Test run_process and process_html."""

    def test_run_process_collects_errors(self) -> None:
        exp = experiment(
            "e",
            1,
            {"selector": "a", "type": "attribute", "value": "x"},
            {"selector": "h1", "type": "text", "value": "New"},
        )
        result = run_process(ProcessHtmlInput(html="<h1>Old</h1>", experiments=(exp,)))

        assert result.success is True
        assert result.html == "<h1>New</h1>"
        assert result.errors == ["Failed to apply change"]

    def test_run_process_forwards_to_logger(self, logger: MemoryLogger) -> None:
        exp = experiment("e", 1, {"selector": ".missing", "type": "delete"})
        run_process(ProcessHtmlInput(html="<p>x</p>", experiments=(exp,)), logger=logger)

        assert logger.has("warn", "No elements found for selector")

    def test_process_html_function(self) -> None:
        exp = experiment("e", 1, {"selector": "h1", "type": "text", "value": "New"})
        assert process_html("<h1>Old</h1>", [exp]) == "<h1>New</h1>"

    def test_default_logger_is_stdlib(self) -> None:
        processor = HTMLProcessor(settings=EngineSettings(enable_debug=True))
        assert isinstance(processor.logger, StdlibLogger)
        assert processor.logger.enable_debug is True
