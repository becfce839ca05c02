"""Read raw OpenAPI documents from a local file, an HTTP(S) URL, or stdin.

This is the only module that performs I/O on spec sources. It returns plain
dictionaries; ``$ref`` dereferencing and OpenAPI validation happen later in
:mod:`schema_explorer.parser.resolver` and
:meth:`~schema_explorer.models.OpenAPIDocument.from_dereferenced`.

Public functions:

* :func:`load_spec` -- Load and parse a spec from any supported source.
* :func:`source_stem` -- File-name stem of a source, used as the slug
  fallback when a document has no usable title.
"""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import yaml

from schema_explorer.exceptions import SpecLoadError

_FETCH_TIMEOUT = 30.0
_SPEC_SUFFIX_RE = re.compile(r"\.(json|yaml|yml)$", re.IGNORECASE)


class _SpecYamlLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as the strings they were written as.

    An unquoted ``example: 2024-01-15`` would otherwise become a
    :class:`datetime.date`, which JSON cannot represent.
    """


_SpecYamlLoader.add_constructor(
    "tag:yaml.org,2002:timestamp", yaml.SafeLoader.construct_yaml_str
)


def load_spec(source: str) -> dict[str, Any]:
    """Load a spec from a URL, a file path, or stdin (``-``).

    JSON and YAML are both accepted; the format is guessed from the file
    extension or the response content type, then from the content itself.

    Args:
        source: ``http(s)://`` URL, file path, or ``-`` for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecLoadError: If the source cannot be read or parsed.
    """
    if source == "-":
        return _read_stdin()
    if source.startswith(("http://", "https://")):
        return _fetch_url(source)
    return _read_file(source)


def source_stem(source: str) -> str:
    """Return the file name of *source* without a ``.json``/``.yaml``/``.yml`` suffix.

    Works for file paths and URLs; returns ``""`` for stdin.
    """
    if source == "-":
        return ""
    if source.startswith(("http://", "https://")):
        name = urlparse(source).path.rstrip("/").split("/")[-1]
    else:
        name = Path(source).name
    return _SPEC_SUFFIX_RE.sub("", name)


def _read_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecLoadError(f"Failed to read spec from stdin: {exc}") from exc

    if not content.strip():
        raise SpecLoadError("No spec received on stdin")

    return _parse_document(content)


def _fetch_url(url: str) -> dict[str, Any]:
    """Fetch a spec over HTTP, using the response content type as a format hint."""
    try:
        response = httpx.get(url, timeout=_FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecLoadError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_document(response.text, hint=hint)


def _read_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecLoadError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecLoadError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
    return _parse_document(content, hint=hint)


def _parse_document(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML.

    JSON is attempted first unless *hint* is ``"yaml"``; a ``"json"`` hint
    disables the YAML fallback.

    Raises:
        SpecLoadError: If neither parser accepts the content, or the root is
            not a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecLoadError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.load(content, Loader=_SpecYamlLoader))  # noqa: S506
    except yaml.YAMLError as exc:
        msg = "Failed to parse spec as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecLoadError(msg) from exc


def _require_mapping(document: Any) -> dict[str, Any]:  # noqa: ANN401
    if not isinstance(document, dict):
        kind = type(document).__name__ if document is not None else "empty document"
        raise SpecLoadError(f"Spec must be a JSON/YAML object (got {kind})")
    return document
