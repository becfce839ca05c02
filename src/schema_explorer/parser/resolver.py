"""Dereference ``$ref`` pointers so every later stage sees a reference-free tree.

The entry point :func:`resolve` dispatches on :class:`~schema_explorer.models.SourceFormat`
through a lookup table of pure transformer functions. Only one format is
registered today, OpenAPI, handled by :func:`dereference_openapi`.

Only internal references (``#/...`` JSON pointers, RFC 6901 escaping) are
inlined. External file or URL references and dangling pointers raise
:class:`~schema_explorer.exceptions.TransformError`, which keeps the document
out of the registry.

A circular reference cannot be inlined into a finite tree. References are
grouped into cycles first (strongly connected components of the reference
graph). Inlining a target replaces every reference that leaves its cycle and
keeps every reference back into it, so the target appears once::

    TreeNode.properties.children.items            -> inlined TreeNode
    TreeNode.properties.children.items.properties
        .children.items                           -> {"$ref": "#/components/schemas/TreeNode"}

Each pointer is expanded once and the expansion is shared by every place
that refers to it, so densely cross-referenced schemas stay linear in the
number of references.
"""

from __future__ import annotations

import copy
from collections import deque
from typing import Any, Callable, Iterator, Optional

from schema_explorer.exceptions import TransformError
from schema_explorer.models import SourceFormat

Transformer = Callable[[dict[str, Any]], dict[str, Any]]


def resolve(
    raw: dict[str, Any], source_format: SourceFormat | str = SourceFormat.OPENAPI
) -> dict[str, Any]:
    """Return a dereferenced copy of *raw* using the transformer for *source_format*.

    Args:
        raw: The document as returned by :func:`~schema_explorer.parser.loader.load_spec`.
            It is not modified.
        source_format: Which transformer to use.

    Returns:
        A new dictionary with every resolvable internal ``$ref`` inlined.

    Raises:
        TransformError: If no transformer is registered for the format, or
            the transformer fails.
    """
    try:
        fmt = SourceFormat(source_format)
    except ValueError:
        fmt = None
    transformer = _TRANSFORMERS.get(fmt) if fmt is not None else None
    if transformer is None:
        raise TransformError(f"No transformer registered for format: {source_format}")
    return transformer(raw)


def dereference_openapi(spec: dict[str, Any]) -> dict[str, Any]:
    """Inline every internal ``$ref`` of an OpenAPI document.

    Example::

        raw = load_spec("petstore.yaml")
        spec = dereference_openapi(raw)
        # spec["paths"]["/pets"]["get"]["responses"]["200"]["content"]
        # now holds the Pet schema itself instead of a $ref.
    """
    return _Dereferencer(copy.deepcopy(spec)).run()


_TRANSFORMERS: dict[SourceFormat, Transformer] = {
    SourceFormat.OPENAPI: dereference_openapi,
}


def _follow_pointer(ref: str, root: dict[str, Any]) -> Any:  # noqa: ANN401
    """Return the value *ref* points at inside *root*.

    Raises:
        TransformError: If *ref* is external or any segment is missing.
    """
    if not ref.startswith("#/"):
        raise TransformError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for raw_segment in ref[2:].split("/"):
        segment = raw_segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise TransformError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise TransformError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise TransformError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )

    return current



def _collect_refs(node: Any) -> Iterator[str]:  # noqa: ANN401
    """Yield every ``$ref`` under *node* without following any of them."""
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            yield ref
            return
        for value in node.values():
            yield from _collect_refs(value)
    elif isinstance(node, list):
        for item in node:
            yield from _collect_refs(item)


def _strongly_connected(edges: dict[str, list[str]]) -> dict[str, int]:
    """Map each pointer to the id of its strongly connected component.

    Iterative Tarjan, so long reference chains do not hit the recursion limit.
    """
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    component: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()

    for start in edges:
        if start in index:
            continue
        index[start] = lowlink[start] = len(index)
        stack.append(start)
        on_stack.add(start)
        work = [(start, iter(edges[start]))]

        while work:
            node, successors = work[-1]
            for successor in successors:
                if successor not in index:
                    index[successor] = lowlink[successor] = len(index)
                    stack.append(successor)
                    on_stack.add(successor)
                    work.append((successor, iter(edges[successor])))
                    break
                if successor in on_stack:
                    lowlink[node] = min(lowlink[node], index[successor])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])
                if lowlink[node] == index[node]:
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component[member] = index[node]
                        if member == node:
                            break

    return component


class _Dereferencer:
    """Inlines the references of one document, expanding each pointer once."""

    def __init__(self, root: dict[str, Any]) -> None:
        self._root = root
        self._edges: dict[str, list[str]] = {}
        self._cycle_of: dict[str, int] = {}
        self._expanded: dict[str, Any] = {}

    def run(self) -> dict[str, Any]:
        pending = deque(dict.fromkeys(_collect_refs(self._root)))
        while pending:
            ref = pending.popleft()
            if ref in self._edges:
                continue
            targets = list(dict.fromkeys(_collect_refs(_follow_pointer(ref, self._root))))
            self._edges[ref] = targets
            pending.extend(targets)

        self._cycle_of = _strongly_connected(self._edges)
        return self._walk(self._root, None)

    def _walk(self, node: Any, cycle: Optional[int]) -> Any:  # noqa: ANN401
        # *cycle* is the component being expanded; references back into it stay.
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                if cycle is not None and self._cycle_of[ref] == cycle:
                    return node
                return self._expand(ref)
            return {key: self._walk(value, cycle) for key, value in node.items()}

        if isinstance(node, list):
            return [self._walk(item, cycle) for item in node]

        return node

    def _expand(self, ref: str) -> Any:  # noqa: ANN401
        if ref not in self._expanded:
            target = _follow_pointer(ref, self._root)
            self._expanded[ref] = self._walk(target, self._cycle_of[ref])
        return self._expanded[ref]
