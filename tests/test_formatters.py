"""Tests for schema_explorer.formatters."""

from __future__ import annotations

import json

import pytest
import yaml

from schema_explorer.exceptions import ConfigError
from schema_explorer.formatters import TEXT_PLAIN, create_formatter, format_item, format_results
from schema_explorer.models import OutputFormat, RenderResultItem

PAYLOAD = {"type": "object", "properties": {"név": {"type": "string"}}, "required": ["név"]}


class TestCreateFormatter:
    def test_default_is_json(self) -> None:
        formatter = create_formatter()
        assert formatter.name == OutputFormat.JSON
        assert formatter.mime_type == "application/json"

    @pytest.mark.parametrize(
        ("fmt", "mime_type"),
        [
            ("json", "application/json"),
            ("yaml", "text/yaml"),
            ("json-minified", "application/json"),
            (OutputFormat.YAML, "text/yaml"),
        ],
    )
    def test_mime_types(self, fmt: str, mime_type: str) -> None:
        assert create_formatter(fmt).mime_type == mime_type

    def test_unknown_format(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            create_formatter("xml")
        assert str(exc_info.value) == (
            "Invalid output format. Supported formats: json, yaml, json-minified"
        )


class TestSerialisation:
    def test_json_is_indented(self) -> None:
        text = create_formatter("json").format(PAYLOAD)
        assert text.startswith('{\n  "type": "object"')
        assert json.loads(text) == PAYLOAD

    def test_minified_json_has_no_whitespace(self) -> None:
        text = create_formatter("json-minified").format(PAYLOAD)
        assert "\n" not in text
        assert ", " not in text and ": " not in text
        assert json.loads(text) == PAYLOAD

    def test_yaml_keeps_key_order(self) -> None:
        text = create_formatter("yaml").format(PAYLOAD)
        assert text.index("type:") < text.index("properties:") < text.index("required:")
        assert yaml.safe_load(text) == PAYLOAD

    def test_non_ascii_kept_verbatim(self) -> None:
        assert "név" in create_formatter("json").format(PAYLOAD)
        assert "név" in create_formatter("yaml").format(PAYLOAD)

    def test_shared_subtrees_are_written_in_full(self) -> None:
        money = {"type": "number"}
        payload = {"price": money, "tax": money}
        text = create_formatter("yaml").format(payload)
        assert "&" not in text and "*" not in text
        assert yaml.safe_load(text) == {"price": {"type": "number"}, "tax": {"type": "number"}}

    @pytest.mark.parametrize("fmt", ["json", "json-minified"])
    def test_json_falls_back_to_str(self, fmt: str) -> None:
        text = create_formatter(fmt).format({"raw": b"ab"})
        assert json.loads(text) == {"raw": "b'ab'"}


class TestFormatItem:
    def test_detail_uses_formatter(self) -> None:
        item = RenderResultItem(uri_suffix="components/schemas/Item", payload={"a": 1})
        result = format_item(item, "items-api", create_formatter("json-minified"))
        assert result.uri == "openapi://items-api/components/schemas/Item"
        assert result.mime_type == "application/json"
        assert result.text == '{"a":1}'
        assert not result.is_error

    def test_list_item_is_plain_text(self) -> None:
        item = RenderResultItem(uri_suffix="paths", payload="GET /a", render_as_list=True)
        result = format_item(item, "items-api", create_formatter("yaml"))
        assert result.mime_type == TEXT_PLAIN
        assert result.text == "GET /a"

    def test_error_item_is_plain_text(self) -> None:
        item = RenderResultItem(
            uri_suffix="nope", is_error=True, error_text="missing", render_as_list=True
        )
        result = format_item(item, "items-api", create_formatter("yaml"))
        assert result.mime_type == TEXT_PLAIN
        assert result.text == "missing"
        assert result.is_error

    def test_format_results_without_spec_id(self) -> None:
        items = [RenderResultItem(uri_suffix="specs", payload="## a", render_as_list=True)]
        (result,) = format_results(items, "", create_formatter())
        assert result.uri == "openapi://specs"
