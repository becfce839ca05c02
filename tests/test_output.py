"""Tests for the output system.

Covers:
- DisplayMode resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- print_items in JSON, plain and rich modes
- print_lines and print_table
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from schema_explorer.models import FormattedResultItem
from schema_explorer.output import (
    DisplayMode,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)
from schema_explorer import output as output_module


def _item(uri: str, text: str, mime_type: str = "text/plain", is_error: bool = False) -> FormattedResultItem:
    return FormattedResultItem(uri=uri, mime_type=mime_type, text=text, is_error=is_error)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("schema_explorer.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("schema_explorer.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# DisplayMode resolution
# ------------------------------------------------------------------ #


class TestDisplayModeResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        mgr = OutputManager(mode=DisplayMode.AUTO)
        assert mgr.mode == DisplayMode.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(mode=DisplayMode.AUTO)
        assert mgr.mode == DisplayMode.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        mgr = OutputManager(mode=DisplayMode.AUTO, no_color=True)
        assert mgr.mode == DisplayMode.PLAIN
        assert mgr.no_color is True

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(mode=DisplayMode.JSON).mode == DisplayMode.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert "hello world" in captured.out
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True)
        getattr(mgr, method)("diagnostic text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic text" in captured.err

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(mode=DisplayMode.PLAIN, no_color=True).error("broke")
        assert capfd.readouterr().err == "Error: broke\n"


class TestQuietAndVerbose:
    def test_quiet_suppresses_suggestions(self, capfd, non_tty):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True, quiet=True)
        assert mgr.is_quiet
        mgr.suggest("should not appear")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_errors(self, capfd, non_tty):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True, quiet=True)
        mgr.error("important")
        assert "important" in capfd.readouterr().err

    def test_debug_only_when_verbose(self, capfd, non_tty):
        OutputManager(mode=DisplayMode.PLAIN, no_color=True).debug("hidden")
        assert capfd.readouterr().err == ""

        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True, verbose=True)
        assert mgr.is_verbose
        mgr.debug("shown")
        assert "[debug] shown" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# print_items
# ------------------------------------------------------------------ #


class TestPrintItems:
    def test_json_mode_uses_protocol_names(self, capfd):
        mgr = OutputManager(mode=DisplayMode.JSON, no_color=True)
        mgr.print_items([_item("openapi://specs", "## a")])
        records = json.loads(capfd.readouterr().out)
        assert records == [
            {"uri": "openapi://specs", "mimeType": "text/plain", "text": "## a", "isError": False}
        ]

    def test_plain_single_item_has_no_header(self, capfd):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True)
        mgr.print_items([_item("openapi://x/info", '{"title": "X"}', "application/json")])
        assert capfd.readouterr().out == '{"title": "X"}\n'

    def test_plain_multiple_items_have_uri_headers(self, capfd):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True)
        mgr.print_items(
            [
                _item("openapi://x/paths/a/get", "{}", "application/json"),
                _item("openapi://x/paths/a/post", "{}", "application/json"),
            ]
        )
        assert capfd.readouterr().out == (
            "# openapi://x/paths/a/get\n{}\n# openapi://x/paths/a/post\n{}\n"
        )

    def test_rich_mode_writes_text(self, capfd, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        mgr = OutputManager(mode=DisplayMode.RICH)
        mgr.print_items(
            [
                _item("openapi://x/info", '{"title": "X"}', "application/json"),
                _item("openapi://x/nope", "Field missing", is_error=True),
            ]
        )
        out = capfd.readouterr().out
        assert "title" in out
        assert "Field missing" in out


class TestLinesAndTables:
    def test_print_lines_plain(self, capfd):
        OutputManager(mode=DisplayMode.PLAIN, no_color=True).print_lines(["a", "b"])
        assert capfd.readouterr().out == "a\nb\n"

    def test_print_lines_json(self, capfd):
        OutputManager(mode=DisplayMode.JSON, no_color=True).print_lines(["a", "b"])
        assert json.loads(capfd.readouterr().out) == ["a", "b"]

    def test_print_table_plain(self, capfd):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True)
        mgr.print_table(["name", "template"], [["field", "openapi://{specId}/{field}"]])
        assert capfd.readouterr().out == "name\ttemplate\nfield\topenapi://{specId}/{field}\n"

    def test_print_table_json(self, capfd):
        mgr = OutputManager(mode=DisplayMode.JSON, no_color=True)
        mgr.print_table(["name"], [["field"], ["operation"]])
        assert json.loads(capfd.readouterr().out) == [{"name": "field"}, {"name": "operation"}]


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_is_used_by_convenience_functions(self, capfd):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True)
        set_output(mgr)
        assert get_output() is mgr
        output_module.print_lines(["x"])
        output_module.error("y")
        captured = capfd.readouterr()
        assert captured.out == "x\n"
        assert "Error: y" in captured.err

    def test_reset_output(self):
        set_output(OutputManager(mode=DisplayMode.PLAIN, no_color=True))
        reset_output()
        assert output_module._output is None
