"""Terminal output for result items and diagnostics.

Result items, completion candidates and template tables go to stdout so
they can be piped; every diagnostic goes to stderr. Structured payloads are
syntax-highlighted with Rich when stdout is a terminal and printed verbatim
otherwise. ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all turn colour
off (see `clig.dev <https://clig.dev/>`_).

:class:`OutputManager` is created once by
:func:`~schema_explorer.app.main_callback` and installed with
:func:`set_output`; commands reach it through the module-level functions
(:func:`print_items`, :func:`error`, ...).
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Optional, Sequence

from rich.console import Console
from rich.rule import Rule
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from schema_explorer.models import FormattedResultItem

_SYNTAX_LEXERS = {
    "application/json": "json",
    "text/yaml": "yaml",
}


class DisplayMode(str, Enum):
    """How result items are written to stdout.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise. ``JSON`` prints the items as
    an array of ``{uri, mimeType, text, isError}`` objects.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all CLI output.

    Args:
        mode: Desired display mode. ``AUTO`` resolves based on TTY detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential messages on stderr.
        verbose: Enable debug messages on stderr.
    """

    def __init__(
        self,
        mode: DisplayMode = DisplayMode.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if mode == DisplayMode.AUTO:
            self._mode = (
                DisplayMode.RICH if _is_tty() and not self._no_color else DisplayMode.PLAIN
            )
        else:
            self._mode = mode

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._mode == DisplayMode.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def mode(self) -> DisplayMode:
        return self._mode

    @property
    def no_color(self) -> bool:
        return self._no_color

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_items(self, items: Sequence[FormattedResultItem]) -> None:
        """Write result items to stdout in the active display mode.

        When more than one item is printed in plain or rich mode, each is
        preceded by its URI so the items stay distinguishable.
        """
        if self._mode == DisplayMode.JSON:
            records = [item.model_dump(by_alias=True) for item in items]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return

        show_uri = len(items) > 1
        for item in items:
            if self._mode == DisplayMode.PLAIN:
                if show_uri:
                    self.print_data(f"# {item.uri}")
                self.print_data(item.text)
            else:
                self._print_rich_item(item, show_uri)

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_lines(self, lines: Sequence[str]) -> None:
        """Print one value per line; a JSON array in JSON mode."""
        if self._mode == DisplayMode.JSON:
            self.print_data(json.dumps(list(lines), indent=2, ensure_ascii=False))
            return
        for line in lines:
            self.print_data(line)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active display mode."""
        if self._mode == DisplayMode.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))

        elif self._mode == DisplayMode.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))

        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def error(self, message: str) -> None:
        """Bold red error. Never suppressed."""
        self._diagnostic("Error: ", "bold red", message)

    def suggest(self, message: str) -> None:
        """Dimmed next-step suggestion. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic("→ ", "dim", message, dim_message=True)

    def debug(self, message: str) -> None:
        """Only shown with ``--verbose``."""
        if self._verbose:
            self._diagnostic("[debug] ", "dim", message, dim_message=True)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _diagnostic(
        self, label: str, style: str, message: str, dim_message: bool = False
    ) -> None:
        # Messages often quote URIs and templates; they are never parsed as markup.
        if self._no_color:
            sys.stderr.write(f"{label}{message}\n")
            sys.stderr.flush()
            return
        text = Text(label, style=style)
        text.append(message, style="dim" if dim_message else "")
        self._stderr.print(text, highlight=False)

    def _print_rich_item(self, item: FormattedResultItem, show_uri: bool) -> None:
        if show_uri:
            self._stdout.print(Rule(item.uri, style="dim"))
        if item.is_error:
            self._stdout.print(item.text, style="red", markup=False, highlight=False)
            return
        lexer = _SYNTAX_LEXERS.get(item.mime_type)
        if lexer is None:
            self._stdout.print(item.text, markup=False, highlight=False)
        else:
            self._stdout.print(Syntax(item.text, lexer, theme="monokai", word_wrap=True))


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (any value) or TERM=dumb."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``. Used by the test suite."""
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def print_items(items: Sequence[FormattedResultItem]) -> None:
    get_output().print_items(items)


def print_lines(lines: Sequence[str]) -> None:
    get_output().print_lines(lines)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
