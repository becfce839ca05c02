"""Resolution engine -- turn a parsed address into a resolved node.

:func:`resolve_address` looks up a handler by the address ``kind`` and runs
it against the registry. Handlers return one of the resolved node models
from :mod:`schema_explorer.models`, or raise a
:class:`~schema_explorer.exceptions.ResolutionError` subclass. Nothing here
formats text; that is the job of :mod:`schema_explorer.rendering`.

Checks that need no document run before the registry is consulted, so an
invalid component type or an empty selector never triggers a document
lookup.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from schema_explorer.addressing import require_selector
from schema_explorer.exceptions import (
    ComponentTypeNotFoundError,
    InvalidComponentTypeError,
    NoComponentsOfTypeError,
    NoValidMethodsError,
    NoValidNamesError,
    PathNotFoundError,
)
from schema_explorer.models import (
    CANONICAL_METHODS,
    VALID_COMPONENT_TYPES,
    Address,
    ComponentDetailAddress,
    ComponentDetails,
    ComponentMapAddress,
    ComponentMapListing,
    ComponentsListing,
    FieldValue,
    OpenAPIDocument,
    OperationAddress,
    OperationDetails,
    PathItemAddress,
    PathItemListing,
    PathsListing,
    ResolutionResult,
    ResolvedNode,
    SpecsListAddress,
    SpecsListing,
    TopLevelFieldAddress,
)
from schema_explorer.registry import SpecRegistry

NO_METHOD_MESSAGE = "No valid HTTP method specified."
NO_NAME_MESSAGE = "No valid component name specified."


def partition(requested: Iterable[str], available: Mapping[str, Any]) -> ResolutionResult:
    """Split *requested* keys into those present in *available* and the rest.

    Order follows *requested*; a key requested twice is resolved once.
    """
    valid: list[tuple[str, Any]] = []
    invalid: list[str] = []
    seen: set[str] = set()
    for key in requested:
        if key in seen:
            continue
        seen.add(key)
        if key in available:
            valid.append((key, available[key]))
        else:
            invalid.append(key)
    return ResolutionResult(valid=valid, invalid=invalid)


def declared_methods(path_item: Mapping[str, Any]) -> dict[str, Any]:
    """Operations of a path item, keyed by lower-case method in canonical order."""
    return {
        method: path_item[method]
        for method in CANONICAL_METHODS
        if isinstance(path_item.get(method), dict)
    }


def check_component_type(component_type: str) -> None:
    """Raise :class:`InvalidComponentTypeError` unless *component_type* is an OpenAPI category."""
    if component_type not in VALID_COMPONENT_TYPES:
        raise InvalidComponentTypeError(component_type)


def component_map(document: OpenAPIDocument, component_type: str) -> dict[str, Any]:
    """Return ``components.{type}`` of *document*.

    Raises:
        ComponentTypeNotFoundError: If the document has no such key.
        NoComponentsOfTypeError: If the key exists but maps to nothing.
    """
    components = document.component_sections()
    if component_type not in components:
        raise ComponentTypeNotFoundError(component_type, list(components))
    members = components[component_type]
    if not members:
        raise NoComponentsOfTypeError(component_type)
    return members


def _find_path_item(document: OpenAPIDocument, path: str) -> dict[str, Any]:
    path_item = document.path_items().get(path)
    if path_item is None:
        raise PathNotFoundError(path)
    return path_item


# --- Handlers ---


def _resolve_specs(address: SpecsListAddress, registry: SpecRegistry) -> SpecsListing:
    return SpecsListing(entries=registry.entries())


def _resolve_field(address: TopLevelFieldAddress, registry: SpecRegistry) -> ResolvedNode:
    document = registry.get(address.spec_id)
    value = document.get_field(address.field)

    if address.field == "paths":
        return PathsListing(
            spec_id=address.spec_id,
            paths=[
                (path, list(declared_methods(item)))
                for path, item in document.path_items().items()
            ],
        )
    if address.field == "components":
        return ComponentsListing(
            spec_id=address.spec_id, component_types=list(document.component_sections())
        )
    return FieldValue(spec_id=address.spec_id, field=address.field, value=value)


def _resolve_path_item(address: PathItemAddress, registry: SpecRegistry) -> PathItemListing:
    document = registry.get(address.spec_id)
    methods = declared_methods(_find_path_item(document, address.path))
    return PathItemListing(
        spec_id=address.spec_id, path=address.path, operations=list(methods.items())
    )


def _resolve_operation(address: OperationAddress, registry: SpecRegistry) -> OperationDetails:
    requested = require_selector(address.methods, NO_METHOD_MESSAGE)
    document = registry.get(address.spec_id)
    methods = declared_methods(_find_path_item(document, address.path))

    result = partition(requested, methods)
    if not result.valid:
        raise NoValidMethodsError(requested, list(methods), address.path)
    return OperationDetails(spec_id=address.spec_id, path=address.path, operations=result.valid)


def _resolve_component_map(
    address: ComponentMapAddress, registry: SpecRegistry
) -> ComponentMapListing:
    check_component_type(address.component_type)
    document = registry.get(address.spec_id)
    members = component_map(document, address.component_type)
    return ComponentMapListing(
        spec_id=address.spec_id,
        component_type=address.component_type,
        names=list(members),
    )


def _resolve_component_detail(
    address: ComponentDetailAddress, registry: SpecRegistry
) -> ComponentDetails:
    check_component_type(address.component_type)
    requested = require_selector(address.names, NO_NAME_MESSAGE)
    document = registry.get(address.spec_id)
    members = component_map(document, address.component_type)

    result = partition(requested, members)
    if not result.valid:
        raise NoValidNamesError(requested, list(members), address.component_type)
    return ComponentDetails(
        spec_id=address.spec_id,
        component_type=address.component_type,
        components=result.valid,
    )


Handler = Callable[[Any, SpecRegistry], ResolvedNode]

_HANDLERS: dict[str, Handler] = {
    "specs": _resolve_specs,
    "field": _resolve_field,
    "path_item": _resolve_path_item,
    "operation": _resolve_operation,
    "component_map": _resolve_component_map,
    "component_detail": _resolve_component_detail,
}


def resolve_address(address: Address, registry: SpecRegistry) -> ResolvedNode:
    """Resolve *address* against *registry*.

    Invalid keys in a multi-value selector are dropped when at least one key
    is valid; only an all-invalid selector is an error.

    Raises:
        ResolutionError: Any of its subclasses, describing what could not be found.
    """
    return _HANDLERS[address.kind](address, registry)
