"""
Treatment tags component - Parsing and variant selection.

Markup handled:

    <Treatment name="hero_test" trigger-on-view>
      <TreatmentVariant variant="0">Control</TreatmentVariant>
      <TreatmentVariant variant="B">Treatment</TreatmentVariant>
    </Treatment>

Selection order for an assigned index ``n``: a variant numbered ``n``, then
a variant named by a variant-mapping key whose value is ``n``, then the
``n``-th letter of the alphabet. Anything unresolved falls back to control
(``0``, then ``A``), else to nothing.
"""

from __future__ import annotations

import re
import string
from collections.abc import Iterable, Mapping

from absmartly_ssr.domain.markup import escape_attribute
from absmartly_ssr.ports.logger import LoggerPort

from .models import (
    TreatmentLookup,
    TreatmentTag,
    TreatmentValidationResult,
    VariantDefinition,
    VariantId,
)

_FLAGS = re.IGNORECASE | re.DOTALL

TREATMENT_PATTERN = re.compile(
    r"<Treatment(?P<attrs>(?:\s[^>]*)?)>(?P<inner>.*?)</Treatment\s*>", _FLAGS
)
VARIANT_PATTERN = re.compile(
    r"<TreatmentVariant(?P<attrs>(?:\s[^>]*)?)>(?P<content>.*?)</TreatmentVariant\s*>", _FLAGS
)

UNNAMED_TAG_MESSAGE = "Treatment tag without a name left unresolved"

_NAME_ATTRIBUTE = re.compile(
    r"""(?:^|\s)name\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""", re.IGNORECASE
)
_VARIANT_ATTRIBUTE = re.compile(
    r"""(?:^|\s)variant\s*=\s*["']?([^"'\s>]+)["']?""", re.IGNORECASE
)
_TRIGGER_ON_VIEW = re.compile(r"(?:^|\s)trigger-on-view(?=[\s=/]|$)", re.IGNORECASE)
_DIGITS = re.compile(r"^[0-9]+$")

ALPHABET = string.ascii_uppercase
TRIGGER_ON_VIEW_ATTRIBUTE = "trigger-on-view"


# --- Parsing ---


def normalize_variant_id(value: str) -> VariantId:
    """Digit-only identifiers become ints ("00" -> 0); others stay strings."""
    if _DIGITS.match(value):
        return int(value)
    return value


def parse_variants(inner_html: str) -> list[VariantDefinition]:
    """Extract <TreatmentVariant> blocks from a Treatment body."""
    variants: list[VariantDefinition] = []

    for match in VARIANT_PATTERN.finditer(inner_html):
        found = _VARIANT_ATTRIBUTE.search(match.group("attrs") or "")
        variant: VariantId = normalize_variant_id(found.group(1)) if found else ""
        variants.append(VariantDefinition(variant=variant, content=match.group("content").strip()))

    return variants


def _tag_name(attrs: str) -> str:
    found = _NAME_ATTRIBUTE.search(attrs)
    if found is None:
        return ""
    return next(group for group in found.groups() if group is not None)


def parse_treatment_tags(html: str) -> list[TreatmentTag]:
    """
    Find every <Treatment> block in ``html``, in document order.

    Tags without a name are still returned (with ``name=""``) so that
    validation can report them.
    """
    tags: list[TreatmentTag] = []

    for match in TREATMENT_PATTERN.finditer(html):
        attrs = match.group("attrs") or ""
        tags.append(
            TreatmentTag(
                name=_tag_name(attrs),
                trigger_on_view=bool(_TRIGGER_ON_VIEW.search(attrs)),
                variants=tuple(parse_variants(match.group("inner"))),
                full_match=match.group(0),
            )
        )

    return tags


# --- Selection ---


def _find_numeric(variants: Iterable[VariantDefinition], index: int) -> VariantDefinition | None:
    for variant in variants:
        if isinstance(variant.variant, int) and variant.variant == index:
            return variant
    return None


def _find_named(variants: Iterable[VariantDefinition], name: str) -> VariantDefinition | None:
    wanted = name.lower()
    for variant in variants:
        if isinstance(variant.variant, str) and variant.variant.lower() == wanted:
            return variant
    return None


def select_variant(
    tag: TreatmentTag,
    selected_treatment: int | None,
    variant_mapping: Mapping[str, int] | None = None,
) -> VariantDefinition | None:
    """
    Pick the variant to render for ``selected_treatment``.

    Returns None if neither the selection nor a control variant matches.
    """
    variants = tag.variants

    if selected_treatment is not None and selected_treatment >= 0:
        direct = _find_numeric(variants, selected_treatment)
        if direct is not None:
            return direct

        for name, index in (variant_mapping or {}).items():
            if index == selected_treatment:
                mapped = _find_named(variants, str(name))
                if mapped is not None:
                    return mapped

        if selected_treatment < len(ALPHABET):
            lettered = _find_named(variants, ALPHABET[selected_treatment])
            if lettered is not None:
                return lettered

    control = _find_numeric(variants, 0)
    if control is not None:
        return control
    return _find_named(variants, "A")


def resolve_variant_content(
    tag: TreatmentTag,
    selected_treatment: int | None,
    variant_mapping: Mapping[str, int] | None = None,
) -> str:
    """Content that replaces ``tag``, wrapped for trigger-on-view when flagged."""
    variant = select_variant(tag, selected_treatment, variant_mapping)
    content = variant.content if variant is not None else ""

    if tag.trigger_on_view:
        return f'<span {TRIGGER_ON_VIEW_ATTRIBUTE}="{escape_attribute(tag.name)}">{content}</span>'
    return content


def replace_treatment_tag(
    html: str,
    tag: TreatmentTag,
    selected_treatment: int | None,
    variant_mapping: Mapping[str, int] | None = None,
) -> str:
    """Replace the first occurrence of ``tag.full_match`` with its resolved content."""
    content = resolve_variant_content(tag, selected_treatment, variant_mapping)
    return html.replace(tag.full_match, content, 1)


def process_treatment_tags(
    html: str,
    get_treatment: TreatmentLookup,
    variant_mapping: Mapping[str, int] | None = None,
    logger: LoggerPort | None = None,
) -> str:
    """
    Resolve every named Treatment tag in ``html`` using ``get_treatment`` for the index.

    Tags without a name cannot be tied to an experiment and are left in place.
    """
    processed = html
    for tag in parse_treatment_tags(html):
        if not tag.name.strip():
            if logger:
                logger.warn(UNNAMED_TAG_MESSAGE, {"tag": tag.full_match[:100]})
            continue
        processed = replace_treatment_tag(processed, tag, get_treatment(tag.name), variant_mapping)
    return processed


# --- Validation ---


def _variant_key(variant: VariantId) -> VariantId:
    if isinstance(variant, str):
        return variant.upper()
    return variant


def validate_treatment_tag(tag: TreatmentTag) -> TreatmentValidationResult:
    """
    Check a Treatment tag's structure.

    Rules:
    - name must be non-blank
    - at least one variant
    - no two variants share an identifier (letters compared case-insensitively)
    """
    errors: list[str] = []

    if not tag.name.strip():
        errors.append("Treatment name is required")

    if not tag.variants:
        errors.append("At least one variant is required")

    seen: set[VariantId] = set()
    for variant in tag.variants:
        if variant.variant == "":
            continue
        key = _variant_key(variant.variant)
        if key in seen:
            errors.append(f"Duplicate variant identifier: {variant.variant}")
        seen.add(key)

    return TreatmentValidationResult(is_valid=not errors, errors=errors)
