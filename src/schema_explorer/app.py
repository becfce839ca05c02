"""Typer application and CLI entry point for schema-explorer.

The root callback stores the global flags and installs output and logging;
each command then resolves the configuration, loads the spec registry, and
reads resources through :class:`~schema_explorer.service.ResourceService`.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`schema_explorer.config`: Configuration precedence resolution.
    :mod:`schema_explorer.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from schema_explorer import __version__
from schema_explorer.addressing import ResourceTemplate, build_specs_uri
from schema_explorer.exceptions import ExplorerError
from schema_explorer.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_INVALID_USAGE,
)

app = typer.Typer(
    name="schema-explorer",
    help="Browse OpenAPI v3 specs through openapi:// resource URIs.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

TEMPLATE_DESCRIPTIONS: dict[ResourceTemplate, str] = {
    ResourceTemplate.SPECS: "List all available API specifications",
    ResourceTemplate.FIELD: "Top-level field of a spec (e.g., openapi://my-api/info)",
    ResourceTemplate.PATH_ITEM: "Methods for a path (e.g., openapi://my-api/paths/users%2F%7Bid%7D)",
    ResourceTemplate.OPERATION: "Operation details (e.g., openapi://my-api/paths/users/get,post)",
    ResourceTemplate.COMPONENT_MAP: "Component names of a type (e.g., openapi://my-api/components/schemas)",
    ResourceTemplate.COMPONENT_DETAIL: "Component details (e.g., openapi://my-api/components/schemas/User,Task)",
}

USAGE_GUIDE = """\
OpenAPI Schema Explorer - Access multiple API specifications.

Start by reading openapi://specs to see all available APIs and their specIds.

For each API, use these URI patterns:
- openapi://{specId}/info - API metadata
- openapi://{specId}/paths - List all endpoints
- openapi://{specId}/paths/{encoded_path}/{method} - Operation details
- openapi://{specId}/components/schemas - List schemas
- openapi://{specId}/components/schemas/{name} - Schema details

The {specId} is derived from each API's title (e.g., "Catalog API" becomes "catalog-api").
Path segments must be URL-encoded (e.g., /users/{id} becomes users%2F%7Bid%7D)."""

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"schema-explorer {__version__}")
        raise typer.Exit()


def _configure_logging(quiet: bool, verbose: bool, no_color: bool) -> None:
    """Route the package's log records to stderr through Rich."""
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    handler = RichHandler(
        console=Console(file=sys.stderr, stderr=True, no_color=no_color),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("schema_explorer")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    spec: Optional[list[str]] = typer.Option(
        None,
        "--spec",
        "-s",
        help="OpenAPI spec file, URL, glob pattern, or '-' for stdin. Repeatable.",
    ),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Detail format: json, yaml, or json-minified."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print result items as a JSON array."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~schema_explorer.output.OutputManager` and
    logging from CLI flags, and stores the spec and format options in
    ``ctx.obj`` for the sub-commands.
    """
    from schema_explorer.output import DisplayMode, OutputManager, set_output

    output = OutputManager(
        mode=DisplayMode.JSON if json_output else DisplayMode.AUTO,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    _configure_logging(quiet, verbose, output.no_color)

    ctx.ensure_object(dict)
    ctx.obj["specs"] = list(spec or [])
    ctx.obj["format"] = output_format


def _build_service(ctx: typer.Context):  # noqa: ANN202
    """Resolve configuration and load the registry for a command.

    Raises:
        typer.Exit: With the error's exit code when configuration fails or
            no spec can be loaded.
    """
    from schema_explorer.config import resolve_config
    from schema_explorer.formatters import create_formatter
    from schema_explorer.output import debug, error
    from schema_explorer.registry import SpecRegistry
    from schema_explorer.service import ResourceService

    obj = ctx.obj or {}
    try:
        config = resolve_config(cli_specs=obj.get("specs"), cli_format=obj.get("format"))
        debug(f"Loading {len(config.spec_paths)} spec(s) as {config.output_format.value}")
        registry = SpecRegistry.load(config.spec_paths)
    except ExplorerError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    return ResourceService(registry, create_formatter(config.output_format))


def _parse_bindings(bind: Optional[list[str]]) -> dict[str, str]:
    bindings: dict[str, str] = {}
    for pair in bind or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected name=value, got '{pair}'", param_hint="--bind")
        bindings[name.strip()] = value.strip()
    return bindings


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("specs")
def specs_command(ctx: typer.Context) -> None:
    """List the loaded API specifications and their specIds."""
    from schema_explorer.output import print_items

    service = _build_service(ctx)
    print_items(service.read(build_specs_uri()))


@app.command("read")
def read_command(
    ctx: typer.Context,
    uri: str = typer.Argument(..., help="Resource URI, e.g. openapi://my-api/paths."),
) -> None:
    """Read an openapi:// resource and print every result item.

    Exits with status 1 when any returned item is an error.

    Example::

        schema-explorer -s petstore.yaml read 'openapi://swagger-petstore/paths/pets/get'
    """
    from schema_explorer.output import print_items, suggest

    service = _build_service(ctx)
    items = service.read(uri)
    print_items(items)
    if any(item.is_error for item in items):
        suggest("Run 'schema-explorer templates' to see the supported URI patterns.")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)


@app.command("complete")
def complete_command(
    ctx: typer.Context,
    template: str = typer.Argument(
        ..., help="Template name (field, path-item, operation, component-map, component-detail)."
    ),
    variable: str = typer.Argument(..., help="Variable to complete, e.g. specId, path, name."),
    bind: Optional[list[str]] = typer.Option(
        None, "--bind", "-b", help="Already-chosen variable value as name=value. Repeatable."
    ),
    prefix: str = typer.Option("", "--prefix", "-p", help="Only show values with this prefix."),
) -> None:
    """Print completion candidates for a template variable, one per line."""
    from schema_explorer.completion import TEMPLATE_NAMES, complete, lookup_template
    from schema_explorer.output import error, print_lines

    resolved = lookup_template(template)
    if resolved is None:
        error(f"Unknown template '{template}'. Choose from: {', '.join(TEMPLATE_NAMES)}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    bindings = _parse_bindings(bind)
    service = _build_service(ctx)
    print_lines(complete(resolved, variable, bindings, service.registry, prefix=prefix))


@app.command("templates")
def templates_command() -> None:
    """Show the resource URI templates and a short usage guide."""
    from schema_explorer.output import DisplayMode, get_output

    output = get_output()
    rows = [
        [template.name.lower().replace("_", "-"), template.value, TEMPLATE_DESCRIPTIONS[template]]
        for template in ResourceTemplate
    ]
    output.print_table(["name", "template", "description"], rows, title="Resource templates")
    if output.mode != DisplayMode.JSON:
        output.print_data("")
        output.print_data(USAGE_GUIDE)


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from schema_explorer.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``schema-explorer`` console script.

    :class:`~schema_explorer.exceptions.ExplorerError` instances that reach
    this point exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from schema_explorer.output import error

        if isinstance(exc, ExplorerError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        logger.debug("Unhandled exception", exc_info=exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
