"""Configuration with XDG paths and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.schema-explorer/`` on macOS and Windows. Only a data directory is
  used, for crash logs. See :func:`get_data_dir`.
* **Project config** -- ``./schema-explorer.json`` may pin the specs to
  load and the output format for a repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and defaults, then
  :func:`load_config` validates the result into an
  :class:`~schema_explorer.models.ExplorerConfig`.
* **Glob expansion** -- spec paths containing glob characters or
  ``{a,b}`` alternatives are expanded by :func:`expand_spec_paths`; URLs and
  plain paths pass through.
"""

from __future__ import annotations

import glob
import json
import os
import platform
import re
from pathlib import Path
from typing import Any, Optional, Sequence

from schema_explorer.exceptions import ConfigError
from schema_explorer.models import ExplorerConfig, OutputFormat

_APP_NAME = "schema-explorer"
_PROJECT_CONFIG_FILENAME = "schema-explorer.json"

ENV_SPECS = "SCHEMA_EXPLORER_SPECS"
ENV_OUTPUT_FORMAT = "SCHEMA_EXPLORER_OUTPUT_FORMAT"

_GLOB_CHARS = ("*", "?", "[")
# Innermost brace group holding at least one comma: {a,b}, but not {id}.
_BRACE_GROUP_RE = re.compile(r"\{([^{}]*,[^{}]*)\}")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/schema-explorer/`` (default
    ``~/.local/share/schema-explorer/``). On macOS/Windows:
    ``~/.schema-explorer/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./schema-explorer.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Glob expansion ---


def _is_url(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


def _is_glob_pattern(path: str) -> bool:
    return any(char in path for char in _GLOB_CHARS)


def _expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives, which :mod:`glob` does not understand.

    ``specs/{orders,users}/*.{json,yaml}`` becomes four patterns. Nested
    groups are expanded innermost first; braces without a comma stay literal.
    """
    match = _BRACE_GROUP_RE.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    return [
        expanded
        for option in match.group(1).split(",")
        for expanded in _expand_braces(head + option + tail)
    ]


def expand_spec_paths(patterns: Sequence[str]) -> list[str]:
    """Expand glob patterns among *patterns*, keeping everything else as given.

    Matches of one pattern are files only, made absolute, and sorted.

    Raises:
        ConfigError: If a pattern matches no files.
    """
    expanded: list[str] = []
    for pattern in patterns:
        alternatives = _expand_braces(pattern)
        if _is_url(pattern) or (len(alternatives) < 2 and not _is_glob_pattern(pattern)):
            expanded.append(pattern)
            continue
        matches = sorted(
            {
                os.path.abspath(match)
                for alternative in alternatives
                for match in glob.glob(os.path.expanduser(alternative), recursive=True)
                if os.path.isfile(match)
            }
        )
        if not matches:
            raise ConfigError(f"No files matched pattern: {pattern}")
        expanded.extend(matches)
    return expanded


# --- Validation and precedence resolution ---


def load_config(
    spec_paths: Optional[Sequence[str]] = None,
    output_format: Optional[str] = None,
) -> ExplorerConfig:
    """Validate already-resolved settings into an :class:`ExplorerConfig`.

    Raises:
        ConfigError: If no spec path is given or the output format is unknown.
    """
    if not spec_paths:
        raise ConfigError(
            "At least one OpenAPI spec path is required. "
            "Usage: schema-explorer --spec <spec1> [--spec <spec2> ...] "
            "[--format json|yaml|json-minified] <command>"
        )
    try:
        fmt = OutputFormat(output_format or OutputFormat.JSON.value)
    except ValueError:
        raise ConfigError(
            "Invalid output format. Supported formats: json, yaml, json-minified"
        ) from None
    return ExplorerConfig(spec_paths=list(spec_paths), output_format=fmt)


def resolve_config(
    cli_specs: Optional[Sequence[str]] = None,
    cli_format: Optional[str] = None,
) -> ExplorerConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``--spec``, ``--format``)
        2. Environment variables (``SCHEMA_EXPLORER_SPECS``, separated by
           ``os.pathsep``, and ``SCHEMA_EXPLORER_OUTPUT_FORMAT``)
        3. Project config (``./schema-explorer.json``)
        4. Defaults

    Glob patterns in the winning spec list are expanded before validation.
    """
    specs: Optional[list[str]] = None
    output_format: Optional[str] = None

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        project_specs = project.get("specs")
        if isinstance(project_specs, str):
            project_specs = [project_specs]
        if project_specs:
            specs = [str(spec) for spec in project_specs]
        if project.get("output_format"):
            output_format = str(project["output_format"])

    # 2. Environment variables
    env_specs = os.environ.get(ENV_SPECS)
    if env_specs:
        specs = [spec for spec in env_specs.split(os.pathsep) if spec]
    env_format = os.environ.get(ENV_OUTPUT_FORMAT)
    if env_format:
        output_format = env_format

    # 1. CLI flags
    if cli_specs:
        specs = list(cli_specs)
    if cli_format is not None:
        output_format = cli_format

    return load_config(expand_spec_paths(specs or []), output_format)
