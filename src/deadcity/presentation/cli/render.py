"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
import textwrap
from typing import Iterable, Sequence

DEFAULT_WIDTH = 78


def debug_enabled() -> bool:
    """Return True only when DEADCITY_DEBUG is explicitly set to '1'."""
    return os.getenv("DEADCITY_DEBUG") == "1"


def wrap_line(text: str, width: int = DEFAULT_WIDTH) -> list[str]:
    """
    Wrap one message line on word boundaries.

    Leading indentation is kept on the first line and repeated on
    continuation lines so exit and option lists stay aligned. Empty
    lines come back as a single empty string.
    """
    if not text:
        return [""]
    stripped = text.lstrip(" ")
    indent = " " * (len(text) - len(stripped))
    wrapped = textwrap.wrap(
        stripped,
        width=max(width, len(indent) + 10),
        initial_indent=indent,
        subsequent_indent=indent + "  ",
        break_long_words=False,
        break_on_hyphens=False,
    )
    return wrapped or [text]


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_menu(title: str, options: Sequence[str]) -> None:
    """Display a menu section with numbered options."""
    render_heading(title)
    for idx, label in enumerate(options, start=1):
        print(f"{idx}. {label}")


def render_lines(lines: Iterable[str], *, step: bool = False) -> None:
    """Print engine messages; in step mode pause at every blank line."""
    for line in lines:
        if step and not line:
            input("-- press Enter --")
        for wrapped in wrap_line(line):
            print(wrapped)


def render_status_bar(day: int, time_label: str, health: int, mode: str) -> None:
    if debug_enabled():
        print(f"[day {day} {time_label} | hp {health} | {mode}]")
