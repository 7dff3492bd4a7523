from __future__ import annotations

import sys
from typing import Generator
from unittest.mock import patch

import pytest
from rich.console import Console
from rich.table import Table

from ngkeeper.utils.console import (
    NGKEEPER_THEME,
    _get_console,
    _should_use_color,
    colorize_risk,
    colorize_update_type,
    confirm,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)


@pytest.fixture(autouse=True)
def reset_console() -> Generator[None, None, None]:
    """Reset the console singleton around each test."""
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.mark.unit
class TestThemeAndConsole:
    """Tests for the shared Console instance."""

    @pytest.mark.parametrize("style", ["success", "error", "warning", "info", "dim"])
    def test_theme_styles(self, style: str) -> None:
        assert style in NGKEEPER_THEME.styles

    def test_singleton(self) -> None:
        assert _get_console() is get_raw_console()
        assert isinstance(_get_console(), Console)

    def test_reconfigure_creates_new_console(self) -> None:
        first = _get_console()
        reconfigure_console()

        assert _get_console() is not first

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")

        assert _should_use_color() is False

    def test_tty_enables_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)

        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is True


@pytest.mark.unit
class TestStatusMessages:
    """Tests for the print_* helpers."""

    @pytest.mark.parametrize(
        "func, prefix, style",
        [
            (print_success, "[OK]", "success"),
            (print_error, "[ERROR]", "error"),
            (print_warning, "[WARNING]", "warning"),
            (print_info, "[INFO]", "info"),
        ],
    )
    def test_prefix_and_style(self, func, prefix: str, style: str) -> None:  # type: ignore[no-untyped-def]
        with patch.object(Console, "print") as mock_print:
            func("Done")

        mock_print.assert_called_once_with(f"{prefix} Done", style=style)

    def test_custom_prefix(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_success("Done", prefix="✓")

        mock_print.assert_called_once_with("✓ Done", style="success")


@pytest.mark.unit
class TestPrintTable:
    """Tests for print_table."""

    def test_empty_data_prints_nothing(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_table([])

        mock_print.assert_not_called()

    def test_builds_table_from_rows(self) -> None:
        rows = [
            {"Package": "rxjs", "Current": "7.5.0"},
            {"Package": "tslib", "Current": "2.3.0"},
        ]

        with patch.object(Console, "print") as mock_print:
            print_table(
                rows,
                title="Upgrades",
                column_styles={"Package": {"style": "bold cyan", "no_wrap": True}},
            )

        table = mock_print.call_args[0][0]
        assert isinstance(table, Table)
        assert table.title == "Upgrades"
        assert [c.header for c in table.columns] == ["Package", "Current"]
        assert table.columns[0].no_wrap is True
        assert table.row_count == 2

    def test_explicit_headers(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_table([{"a": 1, "b": 2}], headers=["b"])

        table = mock_print.call_args[0][0]
        assert [c.header for c in table.columns] == ["b"]


@pytest.mark.unit
class TestConfirm:
    """Tests for confirm prompt parsing."""

    @pytest.mark.parametrize(
        "answer, default, expected",
        [
            ("y", False, True),
            ("YES", False, True),
            ("n", True, False),
            ("no", True, False),
            ("", False, False),
            ("", True, True),
            ("maybe", False, False),
        ],
    )
    def test_answers(self, answer: str, default: bool, expected: bool) -> None:
        with patch.object(Console, "print"), patch("builtins.input", return_value=answer):
            assert confirm("Proceed?", default=default) is expected

    def test_eof_declines(self) -> None:
        with patch.object(Console, "print"), patch("builtins.input", side_effect=EOFError):
            assert confirm("Proceed?", default=True) is False


@pytest.mark.unit
class TestColorize:
    @pytest.mark.parametrize(
        "risk, expected",
        [
            ("low", "[green]low[/green]"),
            ("medium", "[yellow]medium[/yellow]"),
            ("high", "[red]high[/red]"),
            ("unknown", "unknown"),
        ],
    )
    def test_colorize_risk(self, risk: str, expected: str) -> None:
        assert colorize_risk(risk) == expected

    @pytest.mark.parametrize(
        "update_type, expected",
        [
            ("major", "[red]major[/red]"),
            ("minor", "[yellow]minor[/yellow]"),
            ("patch", "[green]patch[/green]"),
            ("same", "same"),
        ],
    )
    def test_colorize_update_type(self, update_type: str, expected: str) -> None:
        assert colorize_update_type(update_type) == expected
