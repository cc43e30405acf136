"""Subcommand modules for funnelctl.

Provides register_commands() which uses deferred imports to keep
``funnelctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from funnelctl.commands.edit import add, connect, delete, move
    from funnelctl.commands.exchange import export_cmd, import_cmd
    from funnelctl.commands.shell import shell
    from funnelctl.commands.view import check, show

    for command in (show, check, add, connect, delete, move, export_cmd, import_cmd, shell):
        cli.add_command(command)
