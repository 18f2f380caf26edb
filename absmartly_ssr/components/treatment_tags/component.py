"""
Treatment tags component - Inline variant markup resolution.

Resolves <Treatment>/<TreatmentVariant> blocks to the content of the
variant assigned to the current request.

Invariants:
- Each tag is replaced by exact text match, once
- Unassigned experiments render their control variant
- Structural problems are reported, never fatal
"""

from __future__ import annotations

from absmartly_ssr.ports.logger import LoggerPort

from ._impl import (
    UNNAMED_TAG_MESSAGE,
    parse_treatment_tags,
    replace_treatment_tag,
    validate_treatment_tag,
)
from .models import (
    ResolveTreatmentsInput,
    ResolveTreatmentsOutput,
    ValidateTreatmentsInput,
    ValidateTreatmentsOutput,
)

# --- Component Entry Points ---


def run_resolve(
    inp: ResolveTreatmentsInput,
    *,
    logger: LoggerPort | None = None,
) -> ResolveTreatmentsOutput:
    """
    Replace every Treatment tag with its selected variant content.

    Invalid tags are still resolved, except nameless ones which stay in
    place. Their problems are returned in ``errors`` and logged as warnings.

    Args:
        inp: HTML plus the experiment name -> treatment index lookup.
        logger: Optional logger for validation warnings.

    Returns:
        ResolveTreatmentsOutput with the rewritten HTML.
    """
    html = inp.html
    resolved: list[str] = []
    errors: list[str] = []

    for tag in parse_treatment_tags(inp.html):
        validation = validate_treatment_tag(tag)
        if not validation.is_valid:
            errors.extend(validation.errors)
            if logger:
                logger.warn(
                    "Invalid Treatment tag",
                    {"name": tag.name, "errors": validation.errors},
                )

        if not tag.name.strip():
            if logger:
                logger.warn(UNNAMED_TAG_MESSAGE, {"tag": tag.full_match[:100]})
            continue
        html = replace_treatment_tag(html, tag, inp.treatments.get(tag.name), inp.variant_mapping)
        resolved.append(tag.name)

    if resolved and logger:
        logger.debug("Resolved Treatment tags", {"count": len(resolved)})

    return ResolveTreatmentsOutput(html=html, resolved=resolved, errors=errors, success=True)


def run_validate(inp: ValidateTreatmentsInput) -> ValidateTreatmentsOutput:
    """Check every Treatment tag in a document without changing it."""
    tags = parse_treatment_tags(inp.html)
    errors: list[str] = []
    for tag in tags:
        errors.extend(validate_treatment_tag(tag).errors)

    return ValidateTreatmentsOutput(tags=tags, errors=errors, is_valid=not errors)
