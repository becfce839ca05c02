"""Shared test fixtures for schema_explorer.

Provides reusable fixtures for loading spec fixtures, building registries
and services, creating isolated config environments, managing output
state, and running CLI commands. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from schema_explorer.output import DisplayMode, OutputManager, reset_output, set_output
from schema_explorer.registry import SpecRegistry
from schema_explorer.service import ResourceService


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict[str, Any]:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


def minimal_spec(title: str = "Demo API", **extra: Any) -> dict[str, Any]:
    """A small valid OpenAPI 3.0 document; keyword arguments become top-level keys."""
    spec: dict[str, Any] = {
        "openapi": "3.0.3",
        "info": {"title": title, "version": "1.0.0"},
        "paths": {},
    }
    spec.update(extra)
    return spec


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and package log handlers after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test, the cached references become stale once the test finishes.
    The same holds for the Rich log handler installed by the root callback.
    """
    yield
    reset_output()
    package_logger = logging.getLogger("schema_explorer")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def items_raw() -> dict[str, Any]:
    """Raw Items API spec: two paths with operations, one without, three component types."""
    return load_fixture("items.json")


@pytest.fixture
def complex_raw() -> dict[str, Any]:
    """Raw spec with a deeply nested path and a single component category."""
    return load_fixture("complex_endpoint.json")


# ---------------------------------------------------------------------------
# Spec factory
# ---------------------------------------------------------------------------


@pytest.fixture
def make_spec():
    """Factory for small valid OpenAPI 3.0 documents (see :func:`minimal_spec`)."""
    return minimal_spec


# ---------------------------------------------------------------------------
# Registry and service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def items_registry(items_raw: dict[str, Any]) -> SpecRegistry:
    return SpecRegistry.from_documents([("items.json", items_raw)])


@pytest.fixture
def complex_registry(complex_raw: dict[str, Any]) -> SpecRegistry:
    return SpecRegistry.from_documents([("complex_endpoint.json", complex_raw)])


@pytest.fixture
def multi_registry(items_raw: dict[str, Any], complex_raw: dict[str, Any]) -> SpecRegistry:
    """Both fixture specs, Items API first."""
    return SpecRegistry.from_documents(
        [("items.json", items_raw), ("complex_endpoint.json", complex_raw)]
    )


@pytest.fixture
def items_service(items_registry: SpecRegistry) -> ResourceService:
    return ResourceService(items_registry)


@pytest.fixture
def multi_service(multi_registry: SpecRegistry) -> ResourceService:
    return ResourceService(multi_registry)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME at tmp_path, clears the SCHEMA_EXPLORER_*
    environment variables, and changes the working directory to tmp_path
    so no project config file leaks in.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["SCHEMA_EXPLORER_SPECS", "SCHEMA_EXPLORER_OUTPUT_FORMAT"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def spec_files(isolated_config: Path) -> dict[str, str]:
    """Copy the fixture specs into the isolated directory and return their paths."""
    paths = {}
    for name in (
        "items.json", "complex_endpoint.json", "tree.yaml", "dated.yaml", "swagger2.json"
    ):
        target = isolated_config / name
        target.write_text((FIXTURES_DIR / name).read_text(encoding="utf-8"), encoding="utf-8")
        paths[name] = str(target)
    return paths


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-mode OutputManager as the global output."""
    output = OutputManager(mode=DisplayMode.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-mode OutputManager as the global output."""
    output = OutputManager(mode=DisplayMode.JSON, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
