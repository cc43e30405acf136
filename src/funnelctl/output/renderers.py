"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from funnelctl.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from funnelctl.services.result import ServiceResult

ALL_GOOD = "All good."


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    if "id" in result.data:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="funnel.ok")
    op = Text(f"  {result.op}", style="funnel.op")
    console.print(label, op)


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="funnel.key")
    if key == "id" or key in ("source", "target"):
        v = Text(str(value), style="funnel.id")
    elif key == "title":
        v = Text(str(value), style="funnel.title")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _render_warning_list(console: Console, rows: list[dict[str, str]]) -> None:
    """Validation panel: one line per message, or the all-clear."""
    if not rows:
        console.print(Text(ALL_GOOD, style="funnel.ok"))
        return
    for row in rows:
        console.print(
            Text("  ⚠ ", style="funnel.warning"),
            Text(row["id"], style="funnel.id"),
            Text(f"  {row['message']}"),
        )


def _node_table(nodes: list[dict[str, Any]], warnings: dict[str, list[str]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="funnel.id", no_wrap=True)
    table.add_column("Title", style="funnel.title")
    table.add_column("Kind")
    table.add_column("CTA")
    table.add_column("Position", justify="right")
    table.add_column("!", justify="center")

    for node in nodes:
        data = node.get("data", {})
        kind = str(data.get("kind", ""))
        pos = node.get("position", {})
        flagged = node.get("id") in warnings
        table.add_row(
            str(node.get("id", "")),
            str(data.get("title", "")),
            Text(kind, style=style_for_kind(kind)),
            str(data.get("primaryCta", "")),
            f"{pos.get('x', 0):g}, {pos.get('y', 0):g}",
            Text("⚠", style="funnel.warning") if flagged else "",
        )
    return table


def _edge_table(edges: list[dict[str, Any]], titles: dict[str, str]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="funnel.id", no_wrap=True)
    table.add_column("Source")
    table.add_column("Target")
    for edge in edges:
        source, target = str(edge.get("source", "")), str(edge.get("target", ""))
        table.add_row(
            str(edge.get("id", "")),
            titles.get(source, source),
            titles.get(target, target),
        )
    return table


# ── Renderers ─────────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="funnel.error"), Text(f"  {result.op}:", style="funnel.op"), msg
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


def _render_state(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the full graph: nodes, edges, then the validation panel."""
    d = result.data
    snapshot = d.get("snapshot", {})
    nodes = snapshot.get("nodes", [])
    edges = snapshot.get("edges", [])
    warnings = d.get("warnings", {})
    titles = {n["id"]: n.get("data", {}).get("title", n["id"]) for n in nodes}

    console.print(Text(f"Nodes ({len(nodes)})", style="funnel.title"))
    if nodes:
        console.print(_node_table(nodes, warnings))
    console.print(Text(f"Edges ({len(edges)})", style="funnel.title"))
    if edges:
        console.print(_edge_table(edges, titles))
    console.print(Text("Validation", style="funnel.title"))
    _render_warning_list(console, d.get("warning_list", []))
    if verbose:
        counters = snapshot.get("counters", {})
        console.print(Text("Counters", style="funnel.title"))
        console.print("  " + ", ".join(f"{k}={v}" for k, v in counters.items()))
        _render_meta(console, result)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _render_warning_list(console, result.data.get("warning_list", []))


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render add/connect/delete/move/import/undo/redo results."""
    _status_line(console, result)
    if result.data.get("changed") is False:
        _field(console, "changed", False)
    for key in (
        "id",
        "kind",
        "title",
        "source",
        "target",
        "removed_nodes",
        "removed_edges",
        "node_count",
        "edge_count",
        "path",
    ):
        if key in result.data:
            value = result.data[key]
            if isinstance(value, list):
                value = ", ".join(value) if value else "-"
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS = {
    "state": _render_state,
    "check": _render_check,
    "add_node": _render_mutation,
    "drop_node": _render_mutation,
    "connect": _render_mutation,
    "delete": _render_mutation,
    "move_node": _render_mutation,
    "import": _render_mutation,
    "export": _render_mutation,
    "undo": _render_mutation,
    "redo": _render_mutation,
}
