"""OpenAPI document intake -- load raw documents and dereference ``$ref`` pointers.

This sub-package turns a spec source (local file, URL, or stdin; JSON or
YAML) into a reference-free dictionary ready to be validated into an
:class:`~schema_explorer.models.OpenAPIDocument`.

Typical usage::

    from schema_explorer.parser import load_spec, resolve

    raw = load_spec("openapi.yaml")
    dereferenced = resolve(raw, "openapi")

Sub-modules:

* :mod:`~schema_explorer.parser.loader` -- I/O and JSON/YAML detection.
* :mod:`~schema_explorer.parser.resolver` -- per-format reference
  transformers with circular-reference handling.
"""

from schema_explorer.parser.loader import load_spec, source_stem
from schema_explorer.parser.resolver import dereference_openapi, resolve

__all__ = ["load_spec", "source_stem", "resolve", "dereference_openapi"]
