"""Commands: structural edits (add, connect, delete, move).

Each invocation restores the saved funnel, applies one intent, and
persists the result. Node and edge arguments accept an id or ``#N``
(1-based position as listed by ``funnelctl show``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from funnelctl.commands._base import FunnelCommand
from funnelctl.domain.types import NodeKind

if TYPE_CHECKING:
    from funnelctl.commands._context import AppContext

_KINDS = [k.value for k in NodeKind]


@click.command(
    cls=FunnelCommand,
    examples="""\
  funnelctl add sales
  funnelctl add upsell --x 320 --y 80
  funnelctl -q add thankyou""",
)
@click.argument("kind", type=click.Choice(_KINDS, case_sensitive=False))
@click.option("--x", type=float, default=0.0, show_default=True, help="Canvas x position.")
@click.option("--y", type=float, default=0.0, show_default=True, help="Canvas y position.")
@click.pass_obj
def add(app: AppContext, kind: str, x: float, y: float) -> None:
    """Add a funnel step of KIND."""
    app.emit(app.session.add_node(kind, (x, y)))


@click.command(
    cls=FunnelCommand,
    examples="""\
  funnelctl connect '#1' '#2'
  funnelctl connect V1StGXR8_Z5jdHi6B-myT 4f90d13a42kLd9sP0qWxZ""",
)
@click.argument("source")
@click.argument("target")
@click.pass_obj
def connect(app: AppContext, source: str, target: str) -> None:
    """Connect SOURCE to TARGET with a directed edge."""
    app.emit(app.session.connect(app.resolve_ref(source), app.resolve_ref(target)))


@click.command(
    cls=FunnelCommand,
    examples="""\
  funnelctl delete --node '#2'
  funnelctl delete --edge '#1' --edge '#3'""",
)
@click.option("--node", "nodes", multiple=True, help="Node id or #N (repeatable).")
@click.option("--edge", "edges", multiple=True, help="Edge id or #N (repeatable).")
@click.pass_obj
def delete(app: AppContext, nodes: tuple[str, ...], edges: tuple[str, ...]) -> None:
    """Delete nodes (with their edges) and edges in one step."""
    if not nodes and not edges:
        raise click.UsageError("Pass at least one --node or --edge.")
    node_ids = [app.resolve_ref(ref, "node") for ref in nodes]
    edge_ids = [app.resolve_ref(ref, "edge") for ref in edges]
    app.emit(app.session.delete(node_ids, edge_ids))


@click.command(
    cls=FunnelCommand,
    examples="""\
  funnelctl move '#1' --x 0 --y 160""",
)
@click.argument("node")
@click.option("--x", type=float, required=True, help="Canvas x position.")
@click.option("--y", type=float, required=True, help="Canvas y position.")
@click.pass_obj
def move(app: AppContext, node: str, x: float, y: float) -> None:
    """Move NODE to a new position."""
    app.emit(app.session.move_node(app.resolve_ref(node), (x, y)))
