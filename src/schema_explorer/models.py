"""Canonical Pydantic models shared across all schema_explorer modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Enumerations** -- closed variant sets fixed by the OpenAPI specification or
by this tool: :class:`HTTPMethod`, :class:`ComponentType`,
:class:`SourceFormat`, :class:`OutputFormat`.

**Documents and registry** -- :class:`OpenAPIDocument` (a dereferenced,
validated OpenAPI v3 document), :class:`RegistryEntry`, and
:class:`ExplorerConfig`.

**Addresses** -- the parsed form of an ``openapi://`` URI, one model per
shape, combined into the discriminated union :data:`Address`.

**Resolution and rendering** -- :class:`ResolutionResult`, the resolved
node models produced by :mod:`schema_explorer.engine`, and the
:class:`RenderResultItem` / :class:`FormattedResultItem` pair consumed by the
formatters and the CLI.

Everything is frozen: documents and registry entries are built once at
start-up and only read afterwards.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from schema_explorer.exceptions import FieldNotFoundError, TransformError


# --- Enumerations ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on OpenAPI path-item objects.

    Declaration order is the canonical order used for listings and for the
    ``Available methods`` part of error messages.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    OPTIONS = "options"
    HEAD = "head"
    TRACE = "trace"


CANONICAL_METHODS: tuple[str, ...] = tuple(m.value for m in HTTPMethod)
"""Lower-case method names in canonical order."""


class ComponentType(str, enum.Enum):
    """Component categories allowed under ``components`` in OpenAPI 3.x."""

    SCHEMAS = "schemas"
    RESPONSES = "responses"
    PARAMETERS = "parameters"
    EXAMPLES = "examples"
    REQUEST_BODIES = "requestBodies"
    HEADERS = "headers"
    SECURITY_SCHEMES = "securitySchemes"
    LINKS = "links"
    CALLBACKS = "callbacks"


VALID_COMPONENT_TYPES: frozenset[str] = frozenset(t.value for t in ComponentType)


class SourceFormat(str, enum.Enum):
    """Source formats with a registered reference transformer."""

    OPENAPI = "openapi"


class OutputFormat(str, enum.Enum):
    """Serialisation formats for detail payloads."""

    JSON = "json"
    YAML = "yaml"
    JSON_MINIFIED = "json-minified"


# --- Documents ---


class OpenAPIDocument(BaseModel):
    """A dereferenced OpenAPI v3 document.

    The well-known top-level sections are typed; any other top-level key
    (``externalDocs``, ``security``, ``webhooks``, ``x-*`` extensions) is kept
    as an extra so that it stays addressable as a top-level field. Leaf
    objects (operations, schemas, parameters) are left as JSON mappings
    because they are passed through to the formatter unmodified.

    Build instances with :meth:`from_dereferenced`, which applies the
    OpenAPI v3 guard and converts validation failures into
    :class:`~schema_explorer.exceptions.TransformError`.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    openapi: str
    info: dict[str, Any] = Field(default_factory=dict)
    servers: list[dict[str, Any]] = Field(default_factory=list)
    # Both objects admit ``x-*`` extensions with arbitrary values; use
    # path_items() and component_sections() to iterate the real members.
    paths: dict[str, Any] = Field(default_factory=dict)
    components: Optional[dict[str, Any]] = None
    tags: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("openapi", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:  # noqa: ANN401
        # YAML turns an unquoted ``openapi: 3.0`` into a float.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def from_dereferenced(cls, data: dict[str, Any]) -> OpenAPIDocument:
        """Validate a dereferenced spec dict into an :class:`OpenAPIDocument`.

        Args:
            data: Output of :func:`~schema_explorer.parser.resolver.resolve`.

        Returns:
            The typed, frozen document.

        Raises:
            TransformError: If the document is not OpenAPI 3.x or one of the
                typed sections has the wrong shape.
        """
        version = data.get("openapi")
        if version is None or not str(version).startswith("3."):
            raise TransformError("Only OpenAPI v3 specifications are supported")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise TransformError(f"Invalid OpenAPI document: {exc}") from exc

    @property
    def title(self) -> str:
        return str(self.info.get("title") or "Untitled API")

    @property
    def version(self) -> str:
        return str(self.info.get("version") or "")

    @property
    def description(self) -> str:
        return str(self.info.get("description") or "")

    def top_level_keys(self) -> list[str]:
        """Return the top-level keys present in the source document."""
        declared = [name for name in type(self).model_fields if name in self.model_fields_set]
        return declared + list(self.model_extra or {})

    def path_items(self) -> dict[str, dict[str, Any]]:
        """Path items keyed by path, skipping ``x-*`` extensions."""
        return _object_members(self.paths)

    def component_sections(self) -> dict[str, dict[str, Any]]:
        """Component maps keyed by category, skipping ``x-*`` extensions."""
        return _object_members(self.components or {})

    def get_field(self, name: str) -> Any:  # noqa: ANN401
        """Return the value of a top-level field, matched case-sensitively.

        Raises:
            FieldNotFoundError: If the document does not contain *name*.
        """
        if name in type(self).model_fields and name in self.model_fields_set:
            return getattr(self, name)
        extra = self.model_extra or {}
        if name in extra:
            return extra[name]
        raise FieldNotFoundError(name)


def _object_members(mapping: dict[str, Any]) -> dict[str, dict[str, Any]]:
    return {
        key: value
        for key, value in mapping.items()
        if not key.startswith("x-") and isinstance(value, dict)
    }


class RegistryEntry(BaseModel):
    """One loaded document and the metadata shown in the ``openapi://specs`` listing."""

    model_config = ConfigDict(frozen=True)

    slug: str
    title: str
    description: str = ""
    version: str = ""
    path_count: int = 0
    source: str = Field(default="", description="File path or URL the document came from")
    document: OpenAPIDocument


class ExplorerConfig(BaseModel):
    """Effective configuration after precedence resolution."""

    spec_paths: list[str] = Field(description="Files, URLs, or '-' to load specs from")
    output_format: OutputFormat = Field(
        default=OutputFormat.JSON, description="Format for detail payloads"
    )


# --- Addresses ---


class SpecsListAddress(BaseModel):
    """``openapi://specs`` -- the registry listing."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["specs"] = "specs"


class TopLevelFieldAddress(BaseModel):
    """``openapi://{specId}/{field}``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["field"] = "field"
    spec_id: str
    field: str


class PathItemAddress(BaseModel):
    """``openapi://{specId}/paths/{encodedPath}``. ``path`` is decoded, with one leading slash."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["path_item"] = "path_item"
    spec_id: str
    path: str


class OperationAddress(BaseModel):
    """``openapi://{specId}/paths/{encodedPath}/{method}[,{method}...]``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["operation"] = "operation"
    spec_id: str
    path: str
    methods: tuple[str, ...] = ()
    raw_selector: str = Field(default="", description="Method segment as received")

    @field_validator("methods", mode="before")
    @classmethod
    def _lower_methods(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, (list, tuple)):
            return tuple(str(method).lower() for method in value)
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_raw_selector(cls, data: Any) -> Any:  # noqa: ANN401
        return _with_raw_selector(data, "methods")


class ComponentMapAddress(BaseModel):
    """``openapi://{specId}/components/{type}``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["component_map"] = "component_map"
    spec_id: str
    component_type: str


class ComponentDetailAddress(BaseModel):
    """``openapi://{specId}/components/{type}/{name}[,{name}...]``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["component_detail"] = "component_detail"
    spec_id: str
    component_type: str
    names: tuple[str, ...] = ()
    raw_selector: str = Field(default="", description="Name segment as received")

    @model_validator(mode="before")
    @classmethod
    def _default_raw_selector(cls, data: Any) -> Any:  # noqa: ANN401
        return _with_raw_selector(data, "names")


def _with_raw_selector(data: Any, values_key: str) -> Any:  # noqa: ANN401
    """Fill ``raw_selector`` from the selector values when it was not given."""
    if isinstance(data, dict) and not data.get("raw_selector"):
        values = data.get(values_key) or ()
        if isinstance(values, (list, tuple)):
            return {**data, "raw_selector": ",".join(str(v) for v in values)}
    return data


Address = Annotated[
    Union[
        SpecsListAddress,
        TopLevelFieldAddress,
        PathItemAddress,
        OperationAddress,
        ComponentMapAddress,
        ComponentDetailAddress,
    ],
    Field(discriminator="kind"),
]


# --- Resolution ---


class ResolutionResult(BaseModel):
    """Requested selector keys partitioned against the keys that exist.

    ``valid`` keeps the order of the request and pairs each key with the
    object it resolved to; ``invalid`` lists the keys that matched nothing.
    """

    model_config = ConfigDict(frozen=True)

    valid: list[tuple[str, Any]] = Field(default_factory=list)
    invalid: list[str] = Field(default_factory=list)

    @property
    def valid_keys(self) -> list[str]:
        return [key for key, _ in self.valid]


class SpecsListing(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["specs"] = "specs"
    entries: list[RegistryEntry] = Field(default_factory=list)


class FieldValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["field_value"] = "field_value"
    spec_id: str
    field: str
    value: Any = None


class PathsListing(BaseModel):
    """Every declared path with its methods in canonical order."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["paths"] = "paths"
    spec_id: str
    paths: list[tuple[str, list[str]]] = Field(default_factory=list)


class ComponentsListing(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["components"] = "components"
    spec_id: str
    component_types: list[str] = Field(default_factory=list)


class PathItemListing(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["path_item"] = "path_item"
    spec_id: str
    path: str
    operations: list[tuple[str, Any]] = Field(default_factory=list)


class OperationDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["operations"] = "operations"
    spec_id: str
    path: str
    operations: list[tuple[str, Any]] = Field(default_factory=list)


class ComponentMapListing(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["component_map"] = "component_map"
    spec_id: str
    component_type: str
    names: list[str] = Field(default_factory=list)


class ComponentDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["component_details"] = "component_details"
    spec_id: str
    component_type: str
    components: list[tuple[str, Any]] = Field(default_factory=list)


ResolvedNode = Union[
    SpecsListing,
    FieldValue,
    PathsListing,
    ComponentsListing,
    PathItemListing,
    OperationDetails,
    ComponentMapListing,
    ComponentDetails,
]


# --- Rendering ---


class RenderResultItem(BaseModel):
    """One result item before text encoding.

    List-mode items carry their finished plain text in ``payload``; detail
    items carry the resolved object, which the formatter serialises. Error
    items have no payload and put the message in ``error_text``.
    """

    model_config = ConfigDict(frozen=True)

    uri_suffix: str
    payload: Any = None
    is_error: bool = False
    error_text: Optional[str] = None
    render_as_list: bool = False


class FormattedResultItem(BaseModel):
    """The ``(uri, mimeType, text, isError)`` tuple handed to consumers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uri: str
    mime_type: str = Field(alias="mimeType")
    text: str
    is_error: bool = Field(default=False, alias="isError")
