"""
Treatment tags component - Inline <Treatment> variant markup.
"""

from ._impl import (
    normalize_variant_id,
    parse_treatment_tags,
    parse_variants,
    process_treatment_tags,
    replace_treatment_tag,
    resolve_variant_content,
    select_variant,
    validate_treatment_tag,
)
from .component import run_resolve, run_validate
from .models import (
    ResolveTreatmentsInput,
    ResolveTreatmentsOutput,
    TreatmentLookup,
    TreatmentTag,
    TreatmentValidationResult,
    ValidateTreatmentsInput,
    ValidateTreatmentsOutput,
    VariantDefinition,
)

__all__ = [
    # Entry points
    "run_resolve",
    "run_validate",
    # Input models
    "ResolveTreatmentsInput",
    "ValidateTreatmentsInput",
    # Output models
    "ResolveTreatmentsOutput",
    "ValidateTreatmentsOutput",
    # Records
    "TreatmentLookup",
    "TreatmentTag",
    "TreatmentValidationResult",
    "VariantDefinition",
    # Functions
    "normalize_variant_id",
    "parse_treatment_tags",
    "parse_variants",
    "process_treatment_tags",
    "replace_treatment_tag",
    "resolve_variant_content",
    "select_variant",
    "validate_treatment_tag",
]
