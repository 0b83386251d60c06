"""Rich Console factory and theme for deps-order output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CONSOLE_WIDTH = 120

DEPS_THEME = Theme(
    {
        "deps.ok": "bold green",
        "deps.error": "bold red",
        "deps.op": "bold cyan",
        "deps.key": "dim",
        "deps.name": "bold",
        "deps.version": "blue",
        "deps.member": "green",
        "deps.path": "dim",
    }
)


def create_console() -> Console:
    """Create a fixed-width Console that renders to a StringIO buffer."""
    return Console(file=StringIO(), theme=DEPS_THEME, highlight=False, width=CONSOLE_WIDTH)


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
