"""Completion of URI template variables.

:func:`complete` suggests values for one variable of a
:class:`~schema_explorer.addressing.ResourceTemplate`, given the values
already bound to its sibling variables. Every call recomputes its answer
from the registry; nothing is cached between calls.

Spec-dependent variables (``path``, ``type``, ``name``) look at the spec
bound to ``specId``, or at the first loaded spec when ``specId`` is unbound.
Component names are only offered when that spec has exactly one non-empty
component category, because a bare name is ambiguous otherwise.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

from schema_explorer.addressing import ResourceTemplate, encode_path
from schema_explorer.models import HTTPMethod, OpenAPIDocument
from schema_explorer.registry import SpecRegistry

FIELD_COMPLETIONS: tuple[str, ...] = (
    "info",
    "servers",
    "paths",
    "components",
    "tags",
    "externalDocs",
)

METHOD_COMPLETIONS: tuple[str, ...] = tuple(method.name for method in HTTPMethod)

TEMPLATE_NAMES: dict[str, ResourceTemplate] = {
    template.name.lower().replace("_", "-"): template
    for template in ResourceTemplate
    if template.variables
}
"""Templates that declare variables, keyed by their CLI name (``operation``, ``component-detail``)."""


def lookup_template(name: str) -> Optional[ResourceTemplate]:
    """Find a template by CLI name or by its URI template string."""
    if name in TEMPLATE_NAMES:
        return TEMPLATE_NAMES[name]
    try:
        template = ResourceTemplate(name)
    except ValueError:
        return None
    return template if template.variables else None


def _bound_document(
    bindings: Mapping[str, str], registry: SpecRegistry
) -> Optional[OpenAPIDocument]:
    spec_id = bindings.get("specId")
    if spec_id:
        return registry.get(spec_id) if spec_id in registry else None
    slugs = registry.slugs()
    return registry.get(slugs[0]) if slugs else None


def _non_empty_categories(document: OpenAPIDocument) -> dict[str, dict]:
    return {name: members for name, members in document.component_sections().items() if members}


def _complete_spec_id(bindings: Mapping[str, str], registry: SpecRegistry) -> list[str]:
    return registry.slugs()


def _complete_field(bindings: Mapping[str, str], registry: SpecRegistry) -> list[str]:
    return list(FIELD_COMPLETIONS)


def _complete_path(bindings: Mapping[str, str], registry: SpecRegistry) -> list[str]:
    document = _bound_document(bindings, registry)
    if document is None:
        return []
    return [encode_path(path) for path in document.path_items()]


def _complete_method(bindings: Mapping[str, str], registry: SpecRegistry) -> list[str]:
    return list(METHOD_COMPLETIONS)


def _complete_type(bindings: Mapping[str, str], registry: SpecRegistry) -> list[str]:
    document = _bound_document(bindings, registry)
    if document is None:
        return []
    return list(_non_empty_categories(document))


def _complete_name(bindings: Mapping[str, str], registry: SpecRegistry) -> list[str]:
    document = _bound_document(bindings, registry)
    if document is None:
        return []
    categories = _non_empty_categories(document)
    if len(categories) != 1:
        return []
    (members,) = categories.values()
    return list(members)


_COMPLETERS: dict[str, Callable[[Mapping[str, str], SpecRegistry], list[str]]] = {
    "specId": _complete_spec_id,
    "field": _complete_field,
    "path": _complete_path,
    "method": _complete_method,
    "type": _complete_type,
    "name": _complete_name,
}


def complete(
    template: ResourceTemplate | str,
    variable: str,
    bindings: Mapping[str, str],
    registry: SpecRegistry,
    prefix: str = "",
) -> list[str]:
    """Return completion candidates for *variable* of *template*.

    Args:
        template: A :class:`ResourceTemplate`, its CLI name, or its URI string.
        variable: Variable to complete. Exploded variables may carry their
            trailing ``*``; on any other variable the marker matches nothing.
        bindings: Values already chosen for other variables of the template.
        registry: The loaded specs.
        prefix: Keep only candidates starting with this string.

    Returns:
        Candidates in a stable order; empty when the template is unknown or
        does not declare *variable*.
    """
    resolved = template if isinstance(template, ResourceTemplate) else lookup_template(template)
    name = variable.rstrip("*")
    if resolved is None or name not in resolved.variables:
        return []
    if name != variable and name not in resolved.exploded:
        return []
    candidates = _COMPLETERS[name](bindings, registry)
    return [candidate for candidate in candidates if candidate.startswith(prefix)]
