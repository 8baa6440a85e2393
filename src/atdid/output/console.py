"""Rich Console factory and theme for atdid output.

Consoles render into a StringIO buffer, preserving the
``format_result() -> str`` contract.  In non-TTY environments (tests,
pipes) Rich disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ATDID_THEME = Theme(
    {
        "atdid.ok": "bold green",
        "atdid.error": "bold red",
        "atdid.warning": "bold yellow",
        "atdid.op": "bold cyan",
        "atdid.key": "dim",
        "atdid.did": "bold blue",
        "atdid.found": "magenta",
        "atdid.method.web": "green",
        "atdid.method.plc": "cyan",
    }
)

_METHOD_STYLES: dict[str, str] = {
    "web": "atdid.method.web",
    "plc": "atdid.method.plc",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=ATDID_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_method(method: str | None) -> str:
    """Return the Rich style name for a DID method."""
    return _METHOD_STYLES.get(method or "", "")
