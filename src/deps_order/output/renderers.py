"""Operation-specific renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
The ``short`` and ``normal`` listings are plain lines so they can be piped;
everything else is drawn on a Rich Console backed by StringIO.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from deps_order.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from deps_order.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, style: str = "normal") -> str:
    """Render a ServiceResult to text.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    if result.ok and result.op == "order" and style != "verbose":
        return render_listing(result.data.get("items", []), style=style)

    console = create_console()
    if not result.ok:
        _render_error(result, console)
    elif result.op == "order":
        _render_order_table(result, console)
    else:
        _render_exec(result, console)
    return get_output(console).rstrip("\n")


def render_listing(items: list[dict[str, Any]], *, style: str = "normal") -> str:
    """One line per package: ``name`` (short) or ``name version`` (normal)."""
    if style == "short":
        return "\n".join(item["name"] for item in items)
    return "\n".join(f"{item['name']} {item['version']}" for item in items)


# ── Renderers ─────────────────────────────────────────────────────────


def _render_order_table(result: ServiceResult, console: Console) -> None:
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("#", justify="right", style="deps.key")
    table.add_column("Name", style="deps.name")
    table.add_column("Version", style="deps.version")
    table.add_column("Workspace", style="deps.member")
    table.add_column("Path", style="deps.path", overflow="fold")

    for index, item in enumerate(result.data.get("items", []), start=1):
        table.add_row(
            str(index),
            Text(item["name"]),
            Text(item["version"]),
            "yes" if item.get("workspace_member") else "",
            Text(item.get("path") or ""),
        )
    console.print(table)
    console.print(Text(f"{result.data.get('count', 0)} packages", style="deps.key"))


def _render_exec(result: ServiceResult, console: Console) -> None:
    completed = result.data.get("completed", [])
    console.print(
        Text("OK", style="deps.ok"),
        Text(f"  {result.op}", style="deps.op"),
        Text(f"  {len(completed)} of {result.data.get('count', 0)} packages"),
    )


def _render_error(result: ServiceResult, console: Console) -> None:
    message = result.error.message if result.error else "Unknown error"
    console.print(
        Text("ERROR", style="deps.error"),
        Text(f"  {result.op}", style="deps.op"),
        Text(f"  {message}"),
    )
    data = result.data
    for failure in data.get("failed", [])[1:]:
        console.print(
            Text(f"  also failed: {failure['package']} (status {failure['exit_status']})"),
        )
    if data.get("completed"):
        console.print(Text(f"  completed: {', '.join(data['completed'])}", style="deps.key"))
    if data.get("skipped"):
        console.print(Text(f"  not run: {', '.join(data['skipped'])}", style="deps.key"))
