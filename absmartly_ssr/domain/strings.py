"""String transformation helpers used for CSS property names."""

import re

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_KEBAB_BOUNDARY = re.compile(r"-([a-z])")


def camel_to_kebab(value: str) -> str:
    """backgroundColor -> background-color"""
    return _CAMEL_BOUNDARY.sub(r"\1-\2", value).lower()


def kebab_to_camel(value: str) -> str:
    """background-color -> backgroundColor"""
    return _KEBAB_BOUNDARY.sub(lambda m: m.group(1).upper(), value)
