"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from atdid.output.console import create_console, get_output, style_for_method

if TYPE_CHECKING:
    from rich.console import Console

    from atdid.services.result import ServiceResult

_Renderer = Callable[["ServiceResult", "Console"], None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(
    result: ServiceResult,
    *,
    verbose: bool = False,
    no_color: bool = False,
    width: int | None = None,
) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console(no_color=no_color, width=width)

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
    else:
        _render_error(result, console, verbose=verbose)

    if verbose:
        _render_meta(console, result)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if "did" in result.data:
        return str(result.data["did"])

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("did", "")) for item in items if item.get("valid"))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="atdid.ok")
    op = Text(f"  {result.op}", style="atdid.op")
    console.print(label, op)


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    if key == "did":
        style = "atdid.did"
    elif key == "method":
        style = style_for_method(str(value))
    elif key == "found":
        style = "atdid.found"
    else:
        style = ""
    line = Text(f"  {key}: ", style="atdid.key")
    line.append(str(value), style=style)
    console.print(line)


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including the telemetry span tree."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"

    line = Text(prefix)
    line.append(f"{duration:>8.3f}ms", style=style)
    line.append(f"  {name}")
    outcomes = span_data.get("outcomes") or {}
    if outcomes:
        line.append(f"  {span_data.get('candidates', 0)} checked")
        rejected = span_data.get("rejected", 0)
        if rejected:
            line.append(f", {rejected} rejected", style="atdid.error")
        line.append("  (" + ", ".join(f"{k}={v}" for k, v in outcomes.items()) + ")", style="dim")
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _candidate_table(items: list[dict[str, Any]]) -> Table:
    """Build a Rich Table with one row per checked candidate."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Candidate", style="atdid.did", overflow="fold")
    table.add_column("Valid", no_wrap=True)
    table.add_column("Method", no_wrap=True)
    table.add_column("Identifier / Reason", overflow="fold")

    for item in items:
        if item.get("valid"):
            method = str(item.get("method") or "")
            table.add_row(
                Text(str(item.get("candidate", ""))),
                Text("yes", style="atdid.ok"),
                Text(method, style=style_for_method(method)),
                Text(str(item.get("identifier") or "")),
            )
        else:
            table.add_row(
                Text(str(item.get("candidate", ""))),
                Text("no", style="atdid.error"),
                Text(""),
                Text(f"{item.get('code')}: {item.get('message')}"),
            )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="atdid.error"),
        Text(f"  {result.op}", style="atdid.op"),
        Text(" — "),
        Text(msg),
    )
    if err is None or not err.detail:
        return

    items = err.detail.get("items")
    if isinstance(items, list) and items:
        console.print(_candidate_table(items))
        return

    found = err.detail.get("found")
    if found is not None:
        _field(console, "found", found)
    if verbose:
        for k, v in err.detail.items():
            if k != "found":
                _field(console, k, v)


# ── Operation renderers ───────────────────────────────────────────────


def _render_inspect(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key in ("did", "method", "identifier"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_check(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    items = result.data.get("items", [])
    if items:
        console.print(_candidate_table(items))
    count = result.data.get("count", len(items))
    console.print(f"{count} valid DID(s)")


def _render_generic(result: ServiceResult, console: Console) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, _Renderer] = {
    "inspect_did": _render_inspect,
    "check_dids": _render_check,
}
