"""The ``openapi://`` address grammar: parsing, building, and path encoding.

Six address shapes are recognised::

    openapi://specs
    openapi://{specId}/{field}
    openapi://{specId}/paths/{encodedPath}
    openapi://{specId}/paths/{encodedPath}/{method}[,{method}...]
    openapi://{specId}/components/{type}
    openapi://{specId}/components/{type}/{name}[,{name}...]

An API path travels as one opaque segment: leading slashes are stripped and
the rest is percent-encoded with ``encodeURIComponent`` rules, so
``/users/{id}`` becomes ``users%2F%7Bid%7D``. The method and name segments
are *exploded*: a comma-separated list of plain tokens.

:func:`parse_address` turns a URI into one of the address models from
:mod:`schema_explorer.models`; :func:`build_uri` is its exact inverse.
Suffix builders (no scheme, no spec id) name the result items produced by
:mod:`schema_explorer.rendering`.
"""

from __future__ import annotations

import enum
import re
from typing import Iterable, Union
from urllib.parse import quote, unquote

from pydantic import TypeAdapter

from schema_explorer.exceptions import EmptySelectorError, InvalidAddressError
from schema_explorer.models import (
    Address,
    ComponentDetailAddress,
    ComponentMapAddress,
    OperationAddress,
    PathItemAddress,
    SpecsListAddress,
    TopLevelFieldAddress,
)

SCHEME = "openapi://"
SPECS_SUFFIX = "specs"

# Characters encodeURIComponent leaves alone, beyond those quote() always keeps.
_COMPONENT_SAFE = "!*'()"

_TEMPLATE_VAR_RE = re.compile(r"\{(\w+)(\*?)\}")

_address_adapter: TypeAdapter[Address] = TypeAdapter(Address)


class ResourceTemplate(str, enum.Enum):
    """URI templates for the addressable resources.

    A trailing ``*`` marks an exploded (comma-separated) variable.
    """

    SPECS = "openapi://specs"
    FIELD = "openapi://{specId}/{field}"
    PATH_ITEM = "openapi://{specId}/paths/{path}"
    OPERATION = "openapi://{specId}/paths/{path}/{method*}"
    COMPONENT_MAP = "openapi://{specId}/components/{type}"
    COMPONENT_DETAIL = "openapi://{specId}/components/{type}/{name*}"

    @property
    def variables(self) -> list[str]:
        """Variable names in template order, without the explode marker."""
        return [name for name, _ in _TEMPLATE_VAR_RE.findall(self.value)]

    @property
    def exploded(self) -> list[str]:
        """Variables that accept a comma-separated list."""
        return [name for name, star in _TEMPLATE_VAR_RE.findall(self.value) if star]


# --- Path encoding ---


def normalize_path(path: str) -> str:
    """Return *path* with exactly one leading slash."""
    return "/" + path.lstrip("/")


def encode_path(path: str) -> str:
    """Encode an API path as a single URI segment, without a leading ``%2F``."""
    return quote(path.lstrip("/"), safe=_COMPONENT_SAFE)


def decode_path(encoded: str) -> str:
    """Decode a path segment back to its normalized form.

    ``decode_path(encode_path(p)) == normalize_path(p)`` for every ``p``.
    """
    return normalize_path(unquote(encoded))


# --- Exploded selectors ---


def split_selector(raw: str, lower: bool = False) -> tuple[str, ...]:
    """Split a comma-separated selector, trimming and dropping empty elements."""
    values = (part.strip() for part in raw.split(","))
    if lower:
        values = (value.lower() for value in values)
    return tuple(value for value in values if value)


def join_selector(values: Union[str, Iterable[str]], lower: bool = False) -> str:
    if isinstance(values, str):
        values = [values]
    return ",".join(value.lower() if lower else value for value in values)


def require_selector(values: Iterable[str], message: str) -> list[str]:
    """Return *values* as a list, or raise :class:`EmptySelectorError` if there are none."""
    selected = list(values)
    if not selected:
        raise EmptySelectorError(message)
    return selected


# --- URI suffix builders (no scheme, no spec id) ---


def field_suffix(field: str) -> str:
    return field


def path_item_suffix(path: str) -> str:
    return f"paths/{encode_path(path)}"


def operation_suffix(path: str, methods: Union[str, Iterable[str]]) -> str:
    return f"{path_item_suffix(path)}/{join_selector(methods, lower=True)}"


def component_map_suffix(component_type: str) -> str:
    return f"components/{component_type}"


def component_detail_suffix(component_type: str, names: Union[str, Iterable[str]]) -> str:
    return f"{component_map_suffix(component_type)}/{join_selector(names)}"


# --- Full URI builders ---


def full_uri(spec_id: str, suffix: str) -> str:
    """Prefix *suffix* with the scheme and, when given, the spec id."""
    if not spec_id:
        return f"{SCHEME}{suffix}"
    return f"{SCHEME}{spec_id}/{suffix}"


def build_specs_uri() -> str:
    return full_uri("", SPECS_SUFFIX)


def build_field_uri(spec_id: str, field: str) -> str:
    return full_uri(spec_id, field_suffix(field))


def build_path_item_uri(spec_id: str, path: str) -> str:
    return full_uri(spec_id, path_item_suffix(path))


def build_operation_uri(spec_id: str, path: str, methods: Union[str, Iterable[str]]) -> str:
    return full_uri(spec_id, operation_suffix(path, methods))


def build_component_map_uri(spec_id: str, component_type: str) -> str:
    return full_uri(spec_id, component_map_suffix(component_type))


def build_component_detail_uri(
    spec_id: str, component_type: str, names: Union[str, Iterable[str]]
) -> str:
    return full_uri(spec_id, component_detail_suffix(component_type, names))


def build_uri(address: Address) -> str:
    """Build the URI that :func:`parse_address` maps back to *address*."""
    if isinstance(address, SpecsListAddress):
        return build_specs_uri()
    if isinstance(address, TopLevelFieldAddress):
        return build_field_uri(address.spec_id, address.field)
    if isinstance(address, PathItemAddress):
        return build_path_item_uri(address.spec_id, address.path)
    if isinstance(address, OperationAddress):
        return build_operation_uri(address.spec_id, address.path, address.methods)
    if isinstance(address, ComponentMapAddress):
        return build_component_map_uri(address.spec_id, address.component_type)
    return build_component_detail_uri(address.spec_id, address.component_type, address.names)


def error_suffix(address: Address) -> str:
    """Best-available URI suffix for an error about *address*.

    Multi-value shapes keep the selector exactly as it was requested so the
    caller can see what was asked for.
    """
    if isinstance(address, SpecsListAddress):
        return SPECS_SUFFIX
    if isinstance(address, TopLevelFieldAddress):
        return field_suffix(address.field)
    if isinstance(address, (PathItemAddress, OperationAddress)):
        suffix = path_item_suffix(address.path)
    else:
        suffix = component_map_suffix(address.component_type)
    raw_selector = getattr(address, "raw_selector", "")
    return f"{suffix}/{raw_selector}" if raw_selector else suffix


# --- Parsing ---


def parse_address(uri: str) -> Address:
    """Parse an ``openapi://`` URI into its address model.

    Selector segments are split but not checked for emptiness here; the
    resolution engine raises :class:`EmptySelectorError` so the failure is
    reported against the address that carried it.

    Raises:
        InvalidAddressError: If *uri* does not match one of the six shapes.

    Examples:
        >>> parse_address("openapi://specs")
        SpecsListAddress(kind='specs')
        >>> parse_address("openapi://pets/paths/pets%2F%7Bid%7D/GET,post").methods
        ('get', 'post')
    """
    if not uri.startswith(SCHEME):
        raise InvalidAddressError(uri, f"expected the {SCHEME} scheme")

    segments = uri[len(SCHEME):].split("/")
    if segments == [SPECS_SUFFIX]:
        return SpecsListAddress()

    spec_id = segments[0]
    if not spec_id:
        raise InvalidAddressError(uri, "missing spec id")
    if len(segments) < 2 or not segments[1]:
        raise InvalidAddressError(uri, "missing field name")

    collection, rest = segments[1], segments[2:]
    data: dict[str, object]
    if not rest:
        data = {"kind": "field", "spec_id": spec_id, "field": collection}
    elif collection == "paths" and len(rest) <= 2:
        data = {"kind": "path_item", "spec_id": spec_id, "path": decode_path(rest[0])}
        if len(rest) == 2:
            data.update(
                kind="operation",
                methods=split_selector(rest[1], lower=True),
                raw_selector=rest[1],
            )
    elif collection == "components" and len(rest) <= 2:
        if not rest[0]:
            raise InvalidAddressError(uri, "missing component type")
        data = {"kind": "component_map", "spec_id": spec_id, "component_type": rest[0]}
        if len(rest) == 2:
            data.update(
                kind="component_detail",
                names=split_selector(rest[1]),
                raw_selector=rest[1],
            )
    else:
        raise InvalidAddressError(uri, "unrecognised resource path")

    return _address_adapter.validate_python(data)
