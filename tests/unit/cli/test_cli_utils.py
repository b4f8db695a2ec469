"""Unit tests for CLI utilities."""

import logging
from pathlib import Path

import pytest

from jbuild.build.compiler import Diagnostic, Severity
from jbuild.cli_utils import ErrorFormatter, PathValidator, setup_logging


class TestErrorFormatter:
    """Tests for ErrorFormatter class."""

    def test_format_diagnostics(self):
        diagnostics = [
            Diagnostic(Severity.ERROR, "cannot find symbol", Path("App.java"), 3, 9, ("  symbol: class Strin",)),
            Diagnostic(Severity.NOTE, "recompile with -Xlint:unchecked"),
        ]

        lines = ErrorFormatter.format_diagnostics(diagnostics).split("\n")

        assert lines == [
            "[ERROR] App.java:[3,9] cannot find symbol",
            "      symbol: class Strin",
            "[NOTE] recompile with -Xlint:unchecked",
        ]

    def test_format_no_diagnostics(self):
        assert ErrorFormatter.format_diagnostics([]) == ""

    def test_print_error(self, capsys):
        ErrorFormatter.print_error("Compilation failure", "details here")

        out = capsys.readouterr().out
        assert "Compilation failure" in out
        assert "details here" in out

    def test_keyboard_interrupt_exit_code(self):
        with pytest.raises(SystemExit) as exc_info:
            ErrorFormatter.handle_keyboard_interrupt()
        assert exc_info.value.code == 130

    def test_unexpected_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            ErrorFormatter.handle_unexpected_error(ValueError("bad"), verbose=False)

        assert exc_info.value.code == 1
        assert "ValueError: bad" in capsys.readouterr().out


class TestPathValidator:
    """Tests for PathValidator class."""

    def test_valid_dir(self, tmp_path):
        PathValidator.validate_project_dir(tmp_path)

    def test_file_is_rejected(self, tmp_path):
        path = tmp_path / "jbuild.ini"
        path.write_text("")
        with pytest.raises(SystemExit) as exc_info:
            PathValidator.validate_project_dir(path)
        assert exc_info.value.code == 2


def test_setup_logging_levels():
    root = logging.getLogger()
    handlers = list(root.handlers)
    try:
        setup_logging(verbose=True)
        assert root.level == logging.INFO
        setup_logging(verbose=False)
        assert root.level == logging.WARNING
    finally:
        root.handlers = handlers
