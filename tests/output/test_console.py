"""Tests for Rich Console factory and theme."""

from io import StringIO

from kbcheck.output.console import KB_THEME, create_console, get_output, style_for_severity


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        console = create_console()
        assert isinstance(console.file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[bold red]hello[/bold red]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80

    def test_default_width(self) -> None:
        assert create_console().width == 120


class TestSeverityStyles:
    def test_every_severity_has_a_style(self) -> None:
        for severity in ("error", "warning", "info"):
            assert style_for_severity(severity) in KB_THEME.styles
