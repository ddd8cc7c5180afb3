"""Tests for CLI rendering utilities."""
from deadcity.presentation.cli.render import debug_enabled, render_lines, render_status_bar, wrap_line


def test_wrap_line_short_text() -> None:
    assert wrap_line("Hello world", width=50) == ["Hello world"]


def test_wrap_line_long_text_wraps_on_words() -> None:
    text = "This is a very long line that definitely needs to be wrapped because it exceeds the width"
    result = wrap_line(text, width=40)

    assert len(result) > 1
    for line in result:
        assert len(line) <= 40
    assert " ".join(line.strip() for line in result) == text


def test_wrap_line_keeps_indentation() -> None:
    text = "  1. Is there a way out of the city? I have been walking for days and days."
    result = wrap_line(text, width=40)

    assert result[0].startswith("  1.")
    for line in result[1:]:
        assert line.startswith("    ")


def test_wrap_line_empty() -> None:
    assert wrap_line("") == [""]


def test_render_lines_prints_each_line(capsys) -> None:
    render_lines(["Room 302", "", "Exits:"])

    assert capsys.readouterr().out == "Room 302\n\nExits:\n"


def test_render_lines_step_mode_pauses_on_blank_lines(monkeypatch, capsys) -> None:
    prompts = []
    monkeypatch.setattr("builtins.input", lambda prompt="": prompts.append(prompt) or "")

    render_lines(["One", "", "Two", ""], step=True)

    assert len(prompts) == 2
    assert "One" in capsys.readouterr().out


def test_debug_flag_controls_status_bar(monkeypatch, capsys) -> None:
    monkeypatch.delenv("DEADCITY_DEBUG", raising=False)
    assert not debug_enabled()
    render_status_bar(1, "Day 1, 06:00", 100, "exploring")
    assert capsys.readouterr().out == ""

    monkeypatch.setenv("DEADCITY_DEBUG", "1")
    render_status_bar(1, "Day 1, 06:00", 100, "exploring")
    assert capsys.readouterr().out == "[day 1 Day 1, 06:00 | hp 100 | exploring]\n"
