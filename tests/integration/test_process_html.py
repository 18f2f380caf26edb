"""
End-to-end page processing.

Settings file -> JSON assignment payload -> HTMLProcessor, on both backends.
"""

from __future__ import annotations

import json

import pytest

from absmartly_ssr import (
    EngineSettings,
    HTMLProcessor,
    deserialize_experiments,
    load_settings,
    process_html,
)

PAGE = """<!DOCTYPE html>
<html>
<head><title>Shop</title></head>
<body>
<h1>Old Title</h1>
<p class="old">Welcome</p>
<div id="banner"><Treatment name="banner_test" trigger-on-view>
  <TreatmentVariant variant="control">Free shipping</TreatmentVariant>
  <TreatmentVariant variant="promo">20% off today</TreatmentVariant>
</Treatment></div>
<ul id="menu"><li>Home</li></ul>
</body>
</html>"""

PAYLOAD = json.dumps(
    {
        "experiments": [
            {
                "name": "headline_test",
                "treatment": 1,
                "changes": [
                    {"selector": "h1", "type": "text", "value": "New Title"},
                    {"selector": "p", "type": "class", "action": "add", "value": "new"},
                    {"type": "styleRules", "rules": ".new { color: green; }"},
                ],
            },
            {"name": "banner_test", "treatment": 1},
            {
                "name": "menu_test",
                "treatment": 0,
                "changes": [
                    {
                        "selector": "ul#menu",
                        "type": "create",
                        "value": {"tag": "li", "html": "Sale"},
                        "position": "append",
                    },
                    {"selector": "ul#menu", "type": "attribute", "name": "onclick", "value": "x()"},
                ],
            },
        ]
    }
)


@pytest.fixture
def experiments(memory_logger):
    return deserialize_experiments(PAYLOAD, memory_logger)


@pytest.mark.parametrize("use_tree_backend", [True, False])
def test_full_page(settings_path, experiments, memory_logger, use_tree_backend):
    settings = load_settings(settings_path).model_copy(update={"use_tree_backend": use_tree_backend})
    processor = HTMLProcessor(settings=settings, logger=memory_logger)

    result = processor.process_html(PAGE, experiments)

    assert "<h1>New Title</h1>" in result
    assert 'class="old new"' in result
    assert '<span trigger-on-view="banner_test">20% off today</span>' in result
    assert "<Treatment" not in result
    assert "<li>Home</li><li>Sale</li>" in result
    assert "onclick" not in result
    assert '<style id="absmartly-styles">\n.new { color: green; }</style></head>' in result
    assert memory_logger.has("debug", "Found Treatment tags")


def test_selector_miss_returns_page_unchanged(memory_logger):
    html = "<html><head></head><body><p>Hi</p></body></html>"
    experiments = deserialize_experiments(
        '[{"name": "e", "treatment": 1, "changes": [{"selector": ".nope", "type": "text", "value": "x"}]}]'
    )

    assert process_html(html, experiments, logger=memory_logger) == html
    assert memory_logger.has("warn", "No elements found for selector")


def test_unassigned_without_control_removes_block(memory_logger):
    html = (
        '<p>a</p><Treatment name="t"><TreatmentVariant variant="1">one</TreatmentVariant>'
        "</Treatment><p>b</p>"
    )
    result = process_html(html, [], settings=EngineSettings(), logger=memory_logger)

    assert result == "<p>a</p><p>b</p>"


def test_bad_payload_leaves_page_alone(memory_logger):
    experiments = deserialize_experiments("not-json", memory_logger)

    assert process_html("<p>x</p>", experiments) == "<p>x</p>"
    assert experiments == []
    assert memory_logger.has("error", "Failed to deserialize experiment data")
