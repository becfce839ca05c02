"""Tests for schema_explorer.models."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from schema_explorer.exceptions import FieldNotFoundError, TransformError
from schema_explorer.models import (
    CANONICAL_METHODS,
    VALID_COMPONENT_TYPES,
    ComponentDetailAddress,
    FormattedResultItem,
    OpenAPIDocument,
    OperationAddress,
    ResolutionResult,
)

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TestEnumerations:
    def test_canonical_method_order(self) -> None:
        assert CANONICAL_METHODS == (
            "get", "post", "put", "delete", "patch", "options", "head", "trace"
        )

    def test_component_types_allow_list(self) -> None:
        assert VALID_COMPONENT_TYPES == {
            "schemas", "responses", "parameters", "examples", "requestBodies",
            "headers", "securitySchemes", "links", "callbacks",
        }


# ---------------------------------------------------------------------------
# OpenAPIDocument
# ---------------------------------------------------------------------------


class TestOpenAPIDocument:
    """Test the v3 guard and top-level field access."""

    def test_from_dereferenced_accepts_v3(self, items_raw: dict[str, Any]) -> None:
        doc = OpenAPIDocument.from_dereferenced(items_raw)
        assert doc.title == "Items API"
        assert doc.version == "1.2.0"
        assert set(doc.paths) == {"/items", "/users/{id}", "/empty"}

    @pytest.mark.parametrize(
        "data",
        [
            {"swagger": "2.0", "info": {"title": "Legacy"}},
            {"openapi": "2.0"},
            {"info": {"title": "No version"}},
        ],
    )
    def test_rejects_non_v3(self, data: dict[str, Any]) -> None:
        with pytest.raises(TransformError, match="Only OpenAPI v3 specifications are supported"):
            OpenAPIDocument.from_dereferenced(data)

    def test_numeric_version_is_coerced(self) -> None:
        doc = OpenAPIDocument.from_dereferenced({"openapi": 3.1, "info": {"title": "T"}})
        assert doc.openapi == "3.1"

    def test_wrong_section_shape_raises_transform_error(self) -> None:
        with pytest.raises(TransformError, match="Invalid OpenAPI document"):
            OpenAPIDocument.from_dereferenced({"openapi": "3.0.0", "paths": ["not", "a", "map"]})

    def test_title_defaults_when_missing(self) -> None:
        doc = OpenAPIDocument.from_dereferenced({"openapi": "3.0.0"})
        assert doc.title == "Untitled API"
        assert doc.description == ""

    def test_get_field_typed_and_extra(self, make_spec) -> None:
        doc = OpenAPIDocument.from_dereferenced(
            make_spec(externalDocs={"url": "https://docs.example.com"}, **{"x-logo": "a.png"})
        )
        assert doc.get_field("info")["title"] == "Demo API"
        assert doc.get_field("externalDocs") == {"url": "https://docs.example.com"}
        assert doc.get_field("x-logo") == "a.png"

    def test_get_field_is_case_sensitive(self, make_spec) -> None:
        doc = OpenAPIDocument.from_dereferenced(make_spec())
        with pytest.raises(FieldNotFoundError, match='Field "Info" not found'):
            doc.get_field("Info")

    def test_get_field_rejects_absent_defaulted_field(self, make_spec) -> None:
        doc = OpenAPIDocument.from_dereferenced(make_spec())
        with pytest.raises(FieldNotFoundError):
            doc.get_field("servers")

    def test_top_level_keys(self, make_spec) -> None:
        doc = OpenAPIDocument.from_dereferenced(make_spec(tags=[]))
        assert set(doc.top_level_keys()) == {"openapi", "info", "paths", "tags"}

    def test_document_is_frozen(self, make_spec) -> None:
        doc = OpenAPIDocument.from_dereferenced(make_spec())
        with pytest.raises(ValidationError):
            doc.openapi = "3.1.0"


# ---------------------------------------------------------------------------
# Address models
# ---------------------------------------------------------------------------


class TestAddressModels:
    def test_operation_methods_are_lowercased(self) -> None:
        address = OperationAddress(spec_id="x", path="/items", methods=("GET", "Post"))
        assert address.methods == ("get", "post")

    def test_raw_selector_defaults_to_joined_values(self) -> None:
        address = ComponentDetailAddress(
            spec_id="x", component_type="schemas", names=("User", "Task")
        )
        assert address.raw_selector == "User,Task"

    def test_explicit_raw_selector_is_kept(self) -> None:
        address = OperationAddress(
            spec_id="x", path="/items", methods=("get",), raw_selector="GET,,"
        )
        assert address.raw_selector == "GET,,"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class TestResults:
    def test_resolution_result_valid_keys(self) -> None:
        result = ResolutionResult(valid=[("get", {}), ("post", {})], invalid=["put"])
        assert result.valid_keys == ["get", "post"]

    def test_formatted_item_dumps_with_aliases(self) -> None:
        item = FormattedResultItem(uri="openapi://specs", mime_type="text/plain", text="x")
        assert item.model_dump(by_alias=True) == {
            "uri": "openapi://specs",
            "mimeType": "text/plain",
            "text": "x",
            "isError": False,
        }
