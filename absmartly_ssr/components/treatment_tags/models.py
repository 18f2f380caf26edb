"""
Treatment tags component - Data models.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

VariantId = str | int

# Experiment name -> selected treatment index (None when not assigned)
TreatmentLookup = Callable[[str], int | None]


@dataclass(frozen=True)
class VariantDefinition:
    """One <TreatmentVariant> block. Digit-only identifiers are ints."""

    variant: VariantId
    content: str


@dataclass(frozen=True)
class TreatmentTag:
    """
    One <Treatment> block found in a document.

    ``full_match`` is the exact source text from the opening tag through the
    closing tag; replacement substitutes that text and nothing else.
    """

    name: str
    trigger_on_view: bool
    variants: tuple[VariantDefinition, ...]
    full_match: str


@dataclass(frozen=True)
class TreatmentValidationResult:
    """Result of checking a Treatment tag's structure."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


# --- Input Models ---


@dataclass(frozen=True)
class ResolveTreatmentsInput:
    """Input for resolving every Treatment tag in a document."""

    html: str
    treatments: Mapping[str, int]
    variant_mapping: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidateTreatmentsInput:
    """Input for checking every Treatment tag in a document."""

    html: str


# --- Output Models ---


@dataclass(frozen=True)
class ResolveTreatmentsOutput:
    """Output from resolving Treatment tags."""

    html: str
    resolved: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ValidateTreatmentsOutput:
    """Output from validating Treatment tags."""

    tags: list[TreatmentTag] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    is_valid: bool = True
