"""String transform helper tests."""

from __future__ import annotations

from absmartly_ssr.domain.strings import camel_to_kebab, kebab_to_camel


class TestCamelToKebab:
    def test_single_boundary(self) -> None:
        assert camel_to_kebab("backgroundColor") == "background-color"

    def test_multiple_boundaries(self) -> None:
        assert camel_to_kebab("borderTopLeftRadius") == "border-top-left-radius"

    def test_already_kebab(self) -> None:
        assert camel_to_kebab("font-size") == "font-size"

    def test_digit_boundary(self) -> None:
        assert camel_to_kebab("h1Size") == "h1-size"


class TestKebabToCamel:
    def test_single_boundary(self) -> None:
        assert kebab_to_camel("background-color") == "backgroundColor"

    def test_plain_word(self) -> None:
        assert kebab_to_camel("color") == "color"

    def test_inverse_of_camel_to_kebab(self) -> None:
        assert kebab_to_camel(camel_to_kebab("marginBottom")) == "marginBottom"
