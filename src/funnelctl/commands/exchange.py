"""Commands: JSON export and import."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from funnelctl.commands._base import FunnelCommand
from funnelctl.services.result import ServiceResult

if TYPE_CHECKING:
    from funnelctl.commands._context import AppContext


@click.command(
    "export",
    cls=FunnelCommand,
    examples="""\
  funnelctl export
  funnelctl export --output funnel.json""",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to a file instead of stdout.",
)
@click.pass_obj
def export_cmd(app: AppContext, output: Path | None) -> None:
    """Export the funnel as version-1 JSON."""
    payload = app.session.export_bytes()
    if output is None:
        click.echo(payload.decode("utf-8"))
        return
    try:
        output.write_bytes(payload)
    except OSError as exc:
        app.emit(ServiceResult.failure("export", "EXPORT_ERROR", f"Cannot write {output}: {exc}"))
        return
    snapshot = app.session.snapshot
    app.emit(
        ServiceResult(
            ok=True,
            op="export",
            data={
                "path": str(output),
                "node_count": len(snapshot.nodes),
                "edge_count": len(snapshot.edges),
            },
        )
    )


@click.command(
    "import",
    cls=FunnelCommand,
    examples="""\
  funnelctl import funnel.json""",
)
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def import_cmd(app: AppContext, path: Path) -> None:
    """Replace the funnel with the contents of PATH."""
    app.emit(app.session.import_from(path.read_bytes))
