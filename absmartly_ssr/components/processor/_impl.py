"""
Processor component - Per-request HTML rewriting.

Step order is fixed: Treatment tags first (when embeds are enabled), then
each experiment's DOM changes in list order. Each experiment's batch is
isolated: a failure is logged and the next experiment still runs, keeping
what earlier experiments already changed.
"""

from __future__ import annotations

from collections.abc import Sequence

from absmartly_ssr.adapters.logger import create_logger
from absmartly_ssr.components.changes import ChangeApplierPort, create_applier
from absmartly_ssr.components.treatment_tags import parse_treatment_tags, process_treatment_tags
from absmartly_ssr.domain.entities import DOMChange, ExperimentData
from absmartly_ssr.ports.logger import LoggerPort
from absmartly_ssr.rules.models import DEFAULT_SETTINGS, EngineSettings


class HTMLProcessor:
    """
    Applies experiment assignments to server-rendered HTML.

    ``primary`` defaults to the tree backend (or None when
    ``use_tree_backend`` is off) and ``fallback`` to the regex backend.
    Both can be replaced, e.g. with test doubles.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        logger: LoggerPort | None = None,
        primary: ChangeApplierPort | None = None,
        fallback: ChangeApplierPort | None = None,
    ) -> None:
        self.settings = settings or DEFAULT_SETTINGS
        self.logger = logger or create_logger(enable_debug=self.settings.enable_debug)

        if primary is None and self.settings.use_tree_backend:
            primary = create_applier("tree", logger=self.logger, settings=self.settings)
        self.primary = primary
        self.fallback = fallback or create_applier(
            "regex", logger=self.logger, settings=self.settings
        )

    def process_html(self, html: str, experiments: Sequence[ExperimentData]) -> str:
        """Return ``html`` with Treatment tags resolved and DOM changes applied."""
        processed = html

        if self.settings.enable_embeds:
            processed = self.process_treatment_tags(processed, experiments)

        return self.apply_dom_changes(processed, experiments)

    def process_treatment_tags(self, html: str, experiments: Sequence[ExperimentData]) -> str:
        try:
            tags = parse_treatment_tags(html)
            if not tags:
                self.logger.debug("No Treatment tags found in HTML")
                return html

            self.logger.debug("Found Treatment tags", {"count": len(tags)})

            treatments = {
                experiment.name: experiment.treatment
                for experiment in experiments
                if experiment.is_assigned
            }
            processed = process_treatment_tags(
                html, treatments.get, self.settings.variant_mapping, self.logger
            )

            self.logger.debug("Treatment tags processed successfully")
            return processed
        except Exception as e:
            self.logger.error("Failed to process Treatment tags", {"error": str(e)})
            return html

    def apply_dom_changes(self, html: str, experiments: Sequence[ExperimentData]) -> str:
        processed = html

        for experiment in experiments:
            if not experiment.changes:
                continue

            self.logger.debug(
                "Applying DOM changes",
                {
                    "experiment": experiment.name,
                    "treatment": experiment.treatment,
                    "changes_count": len(experiment.changes),
                },
            )

            try:
                processed = self.apply_changes(processed, experiment.changes)
            except Exception as e:
                self.logger.error(
                    "Failed to apply DOM changes",
                    {"experiment": experiment.name, "error": str(e)},
                )

        return processed

    def apply_changes(self, html: str, changes: Sequence[DOMChange]) -> str:
        """
        Apply one batch with the primary backend, falling back on failure.

        Returns ``html`` unchanged when both backends fail.
        """
        if self.primary is not None:
            try:
                return self.primary.apply_changes(html, changes)
            except Exception as e:
                self.logger.warn(
                    "Tree backend failed, falling back to regex backend",
                    {"error": str(e)},
                )

        try:
            return self.fallback.apply_changes(html, changes)
        except Exception as e:
            self.logger.error(
                "Both backends failed to apply changes",
                {"error": str(e)},
            )
            return html
