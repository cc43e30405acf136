"""Commands: read-only views of the saved funnel."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from funnelctl.commands._base import FunnelCommand

if TYPE_CHECKING:
    from funnelctl.commands._context import AppContext


@click.command(
    cls=FunnelCommand,
    examples="""\
  funnelctl show
  funnelctl --json show
  funnelctl -v show""",
)
@click.pass_obj
def show(app: AppContext) -> None:
    """Show nodes, edges, and validation warnings."""
    app.emit(app.session.state())


@click.command(
    cls=FunnelCommand,
    examples="""\
  funnelctl check
  funnelctl check --strict""",
)
@click.option("--strict", is_flag=True, help="Exit with code 2 when any warning exists.")
@click.pass_obj
def check(app: AppContext, strict: bool) -> None:
    """List validation warnings for the saved funnel."""
    result = app.session.check()
    app.emit(result)
    if strict and not result.data["healthy"]:
        raise SystemExit(2)
