"""Render projection -- resolved nodes to result items.

Listings become plain-text items (``render_as_list=True``) ending with a
navigation hint; details pass the resolved object through untouched so the
formatter can serialise it. A multi-value request renders one detail item
per resolved key, each with its own URI suffix.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from schema_explorer.addressing import (
    SCHEME,
    SPECS_SUFFIX,
    component_detail_suffix,
    component_map_suffix,
    field_suffix,
    full_uri,
    operation_suffix,
    path_item_suffix,
)
from schema_explorer.models import (
    ComponentDetails,
    ComponentMapListing,
    ComponentsListing,
    FieldValue,
    OperationDetails,
    PathItemListing,
    PathsListing,
    RenderResultItem,
    ResolvedNode,
    SpecsListing,
)

DESCRIPTION_LIMIT = 200


def list_hint(pattern: str, item_name: str, example: Optional[str] = None) -> str:
    """Navigation hint appended to every listing.

    The example, when given, is the URI of the first listed item.
    """
    hint = f"\nHint: Use '{pattern}' to view details for a specific {item_name}."
    if example:
        hint += f" (e.g., {example})"
    return hint


def error_item(uri_suffix: str, message: str) -> RenderResultItem:
    return RenderResultItem(
        uri_suffix=uri_suffix, payload=None, is_error=True, error_text=message, render_as_list=True
    )


def operation_summary(operation: Any) -> Optional[str]:  # noqa: ANN401
    """Return the operation's ``summary``, else its ``operationId``, else ``None``."""
    if not isinstance(operation, dict):
        return None
    return operation.get("summary") or operation.get("operationId") or None


def singular(component_type: str) -> str:
    if component_type.endswith("ies"):
        return component_type[:-3] + "y"
    return component_type[:-1] if component_type.endswith("s") else component_type


def truncate(text: str, limit: int = DESCRIPTION_LIMIT) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _list_item(uri_suffix: str, text: str) -> list[RenderResultItem]:
    return [RenderResultItem(uri_suffix=uri_suffix, payload=text, render_as_list=True)]


# --- List renderers ---


def _render_specs(node: SpecsListing) -> list[RenderResultItem]:
    blocks = []
    for entry in node.entries:
        lines = [f"## {entry.slug}", f"Title: {entry.title}"]
        if entry.description:
            lines.append(f"Description: {truncate(entry.description)}")
        if entry.version:
            lines.append(f"Version: {entry.version}")
        lines.append(f"Paths: {entry.path_count} endpoints")
        blocks.append("\n".join(lines))

    example = full_uri(node.entries[0].slug, "info") if node.entries else None
    text = "\n\n".join(blocks) + "\n" + list_hint(f"{SCHEME}{{specId}}/{{field}}", "spec", example)
    return _list_item(SPECS_SUFFIX, text)


def _render_paths(node: PathsListing) -> list[RenderResultItem]:
    lines = []
    for path, methods in node.paths:
        methods_text = " ".join(method.upper() for method in methods)
        lines.append(f"{methods_text} {path}".strip())

    base = full_uri(node.spec_id, "paths")
    text = "\n".join(lines) + (
        f"\n\nHint: Use '{base}/{{encoded_path}}' to list methods for a specific path,"
        f" or '{base}/{{encoded_path}}/{{method}}' to view details for a specific operation."
    )
    if node.paths:
        first_path, first_methods = node.paths[0]
        example = path_item_suffix(first_path)
        if first_methods:
            example = operation_suffix(first_path, first_methods[0])
        text += f" (e.g., {full_uri(node.spec_id, example)})"
    return _list_item("paths", text)


def _render_components(node: ComponentsListing) -> list[RenderResultItem]:
    lines = ["Available Component Types:"]
    lines.extend(f"- {component_type}" for component_type in node.component_types)

    example = None
    if node.component_types:
        example = full_uri(node.spec_id, component_map_suffix(node.component_types[0]))
    pattern = full_uri(node.spec_id, component_map_suffix("{type}"))
    return _list_item("components", "\n".join(lines) + "\n" + list_hint(pattern, "component type", example))


def _render_path_item(node: PathItemListing) -> list[RenderResultItem]:
    suffix = path_item_suffix(node.path)
    if not node.operations:
        return _list_item(suffix, f"No standard HTTP methods found for path: {node.path}")

    lines = []
    for method, operation in node.operations:
        summary = operation_summary(operation)
        lines.append(f"{method.upper()}: {summary}" if summary else method.upper())

    pattern = f"{full_uri(node.spec_id, suffix)}/{{method}}"
    example = full_uri(node.spec_id, operation_suffix(node.path, node.operations[0][0]))
    return _list_item(suffix, "\n".join(lines) + "\n" + list_hint(pattern, "operation", example))


def _render_component_map(node: ComponentMapListing) -> list[RenderResultItem]:
    names = sorted(node.names)
    lines = [f"Available {node.component_type}:"]
    lines.extend(f"- {name}" for name in names)

    pattern = full_uri(node.spec_id, f"{component_map_suffix(node.component_type)}/{{name}}")
    example = None
    if names:
        example = full_uri(node.spec_id, component_detail_suffix(node.component_type, names[0]))
    hint = list_hint(pattern, singular(node.component_type), example)
    return _list_item(component_map_suffix(node.component_type), "\n".join(lines) + "\n" + hint)


# --- Detail renderers ---


def _render_field(node: FieldValue) -> list[RenderResultItem]:
    return [RenderResultItem(uri_suffix=field_suffix(node.field), payload=node.value)]


def _render_operations(node: OperationDetails) -> list[RenderResultItem]:
    return [
        RenderResultItem(uri_suffix=operation_suffix(node.path, method), payload=operation)
        for method, operation in node.operations
    ]


def _render_component_details(node: ComponentDetails) -> list[RenderResultItem]:
    return [
        RenderResultItem(
            uri_suffix=component_detail_suffix(node.component_type, name), payload=component
        )
        for name, component in node.components
    ]


_RENDERERS: dict[str, Callable[[Any], list[RenderResultItem]]] = {
    "specs": _render_specs,
    "paths": _render_paths,
    "components": _render_components,
    "path_item": _render_path_item,
    "component_map": _render_component_map,
    "field_value": _render_field,
    "operations": _render_operations,
    "component_details": _render_component_details,
}


def render(node: ResolvedNode) -> list[RenderResultItem]:
    """Project a resolved node into its result items."""
    return _RENDERERS[node.kind](node)

