"""
Changes component - Applies experiment DOM changes to HTML.

Two interchangeable backends implement ChangeApplierPort:
- tree:  BeautifulSoup document with full CSS selector semantics
- regex: string rewriting with a narrow ``tag[#id|.class]`` selector subset

Invariants:
- Malformed changes are reported and skipped, never applied
- A backend failure leaves the input HTML untouched in the output
"""

from __future__ import annotations

from absmartly_ssr.domain.errors import BackendError
from absmartly_ssr.ports.logger import LoggerPort
from absmartly_ssr.rules.models import DEFAULT_SETTINGS, EngineSettings

from ._common import validate_change
from ._regex import RegexChangeApplier
from ._tree import TreeChangeApplier
from .models import ApplyChangesInput, ApplyChangesOutput, Backend
from .ports import ChangeApplierPort


def create_applier(
    backend: Backend,
    *,
    logger: LoggerPort | None = None,
    settings: EngineSettings | None = None,
) -> ChangeApplierPort:
    """
    Build a change applier for ``backend``.

    Args:
        backend: "tree" or "regex"
        logger: Logger passed to the applier
        settings: Engine settings (parser name, style element id)

    Returns:
        ChangeApplierPort implementation
    """
    settings = settings or DEFAULT_SETTINGS

    if backend == "tree":
        return TreeChangeApplier(
            logger=logger,
            parser=settings.tree_parser,
            style_element_id=settings.style_element_id,
        )
    if backend == "regex":
        return RegexChangeApplier(logger=logger, style_element_id=settings.style_element_id)

    raise ValueError(f"Unknown backend: {backend}")


# --- Component Entry Point ---


def run_apply(
    inp: ApplyChangesInput,
    *,
    logger: LoggerPort | None = None,
    settings: EngineSettings | None = None,
) -> ApplyChangesOutput:
    """
    Apply a batch of changes with the requested backend.

    Malformed changes are listed in ``errors`` and skipped by the backend.
    If the backend fails as a whole, the original HTML is returned with
    ``success=False``.
    """
    errors: list[str] = []
    for index, change in enumerate(inp.changes):
        errors.extend(f"change {index}: {message}" for message in validate_change(change))

    applier = create_applier(inp.backend, logger=logger, settings=settings)

    try:
        html = applier.apply_changes(inp.html, inp.changes)
    except BackendError as e:
        return ApplyChangesOutput(
            html=inp.html,
            backend=inp.backend,
            errors=[*errors, str(e)],
            success=False,
        )

    return ApplyChangesOutput(html=html, backend=inp.backend, errors=errors, success=True)
