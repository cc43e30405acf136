"""Command: interactive editing shell.

One session lives for the whole shell, so undo/redo, selection, and the
drop/import guard behave exactly as they would behind a canvas. Lines are
read from stdin; failures are reported and the loop continues.
"""

from __future__ import annotations

import shlex
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import click

from funnelctl.commands._base import FunnelCommand
from funnelctl.services.result import ServiceResult

if TYPE_CHECKING:
    from funnelctl.commands._context import AppContext

PROMPT = "funnel> "

SHELL_HELP = """\
  add KIND [X Y]          add a node (sales, order, upsell, downsell, thankyou)
  drop KIND [X Y]         add a node through the drop guard
  connect SOURCE TARGET   add an edge
  move NODE X Y           reposition a node
  delete NODE...          delete nodes and their edges
  delete-edge EDGE...     delete edges
  select NODE...          select nodes (select-edge EDGE... for edges)
  delete-selected         delete the selection
  undo | redo             step through history
  show | check            print the graph or its warnings
  export [PATH]           print or write JSON
  import PATH             replace the graph from a JSON file
  help | quit"""

type _Handler = Callable[["AppContext", list[str]], "ServiceResult | None"]


class ShellUsageError(Exception):
    """Bad arguments for a shell command."""


def _position(args: list[str]) -> tuple[float, float]:
    if not args:
        return (0.0, 0.0)
    if len(args) != 2:
        raise ShellUsageError("expected X Y")
    try:
        return (float(args[0]), float(args[1]))
    except ValueError as exc:
        raise ShellUsageError("X and Y must be numbers") from exc


def _need(args: list[str], count: int, usage: str) -> None:
    if len(args) < count:
        raise ShellUsageError(usage)


def _add(app: AppContext, args: list[str]) -> ServiceResult:
    _need(args, 1, "add KIND [X Y]")
    return app.session.add_node(args[0], _position(args[1:]))


def _drop(app: AppContext, args: list[str]) -> ServiceResult:
    _need(args, 1, "drop KIND [X Y]")
    return app.session.drop_node(args[0], _position(args[1:]))


def _connect(app: AppContext, args: list[str]) -> ServiceResult:
    _need(args, 2, "connect SOURCE TARGET")
    return app.session.connect(app.resolve_ref(args[0]), app.resolve_ref(args[1]))


def _move(app: AppContext, args: list[str]) -> ServiceResult:
    _need(args, 3, "move NODE X Y")
    return app.session.move_node(app.resolve_ref(args[0]), _position(args[1:3]))


def _delete(app: AppContext, args: list[str]) -> ServiceResult:
    _need(args, 1, "delete NODE...")
    return app.session.delete(node_ids=[app.resolve_ref(a) for a in args])


def _delete_edge(app: AppContext, args: list[str]) -> ServiceResult:
    _need(args, 1, "delete-edge EDGE...")
    return app.session.delete(edge_ids=[app.resolve_ref(a, "edge") for a in args])


def _select(app: AppContext, args: list[str]) -> ServiceResult:
    _, edges = app.session.selection
    return app.session.select([app.resolve_ref(a) for a in args], edges)


def _select_edge(app: AppContext, args: list[str]) -> ServiceResult:
    nodes, _ = app.session.selection
    return app.session.select(nodes, [app.resolve_ref(a, "edge") for a in args])


def _export(app: AppContext, args: list[str]) -> ServiceResult | None:
    payload = app.session.export_bytes()
    if not args:
        click.echo(payload.decode("utf-8"))
        return None
    try:
        Path(args[0]).write_bytes(payload)
    except OSError as exc:
        return ServiceResult.failure("export", "EXPORT_ERROR", f"Cannot write {args[0]}: {exc}")
    click.echo(f"wrote {args[0]}")
    return None


def _import(app: AppContext, args: list[str]) -> ServiceResult:
    _need(args, 1, "import PATH")
    return app.session.import_from(Path(args[0]).read_bytes)


_HANDLERS: dict[str, _Handler] = {
    "add": _add,
    "drop": _drop,
    "connect": _connect,
    "move": _move,
    "delete": _delete,
    "delete-edge": _delete_edge,
    "select": _select,
    "select-edge": _select_edge,
    "delete-selected": lambda app, _args: app.session.delete_selected(),
    "undo": lambda app, _args: app.session.undo(),
    "redo": lambda app, _args: app.session.redo(),
    "show": lambda app, _args: app.session.state(),
    "check": lambda app, _args: app.session.check(),
    "export": _export,
    "import": _import,
}


def run_line(app: AppContext, line: str) -> bool:
    """Execute one shell line. Returns False when the shell should exit."""
    try:
        words = shlex.split(line)
    except ValueError as exc:
        click.echo(f"error: {exc}", err=True)
        return True
    if not words:
        return True

    name, args = words[0].lower(), words[1:]
    if name in ("quit", "exit"):
        return False
    if name == "help":
        click.echo(SHELL_HELP)
        return True

    handler = _HANDLERS.get(name)
    if handler is None:
        click.echo(f"error: unknown command {name!r} (try 'help')", err=True)
        return True
    try:
        result = handler(app, args)
    except ShellUsageError as exc:
        click.echo(f"usage: {exc}", err=True)
        return True
    except OSError as exc:
        click.echo(f"error: {exc}", err=True)
        return True

    if result is not None:
        click.echo(app.render(result), err=not result.ok)
        if result.ok and not app.settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
    return True


@click.command(
    cls=FunnelCommand,
    examples="""\
  funnelctl shell
  printf 'add sales\\nadd order\\nconnect #1 #2\\nundo\\nshow\\n' | funnelctl shell""",
)
@click.pass_obj
def shell(app: AppContext) -> None:
    """Edit the funnel interactively with undo/redo."""
    stream = click.get_text_stream("stdin")
    interactive = sys.stdin.isatty()
    if interactive:
        click.echo("funnelctl shell. Type 'help' for commands, 'quit' to leave.")
    _ = app.session  # restore before the first prompt
    while True:
        if interactive:
            click.echo(PROMPT, nl=False)
        line = stream.readline()
        if not line:
            break
        if not run_line(app, line):
            break
