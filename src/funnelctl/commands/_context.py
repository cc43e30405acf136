"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. The session is built lazily so ``--help`` and
``--version`` never touch the store.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Literal

import click

from funnelctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from funnelctl.config.settings import FunnelSettings
    from funnelctl.services.result import ServiceResult
    from funnelctl.services.session import SessionController

_INDEX_REF = re.compile(r"^#(\d+)$")


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: FunnelSettings) -> None:
        self.settings = settings
        self._session: SessionController | None = None

        from funnelctl.config.logging import bind_log_context, configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        bind_log_context(store_backend=settings.store.backend, store_key=settings.store.key)

    @property
    def session(self) -> SessionController:
        """The session controller (built and restored on first access)."""
        if self._session is None:
            from funnelctl.plugins.manager import PluginManager
            from funnelctl.services.persistence import PersistenceAdapter
            from funnelctl.services.session import SessionController

            plugins = PluginManager()
            plugins.discover_and_load()
            adapter = PersistenceAdapter(
                self.settings.create_store(), key=self.settings.store.key
            )
            self._session = SessionController(
                adapter,
                history_limit=self.settings.history.limit,
                cooldown_ms=self.settings.guard.cooldown_ms,
                plugins=plugins,
            )
            self._session.load()
        return self._session

    def resolve_ref(self, ref: str, kind: Literal["node", "edge"] = "node") -> str:
        """Translate ``#N`` (1-based position) into an id; other refs pass through."""
        match = _INDEX_REF.match(ref)
        if match is None:
            return ref
        snapshot = self.session.snapshot
        items = snapshot.nodes if kind == "node" else snapshot.edges
        index = int(match.group(1)) - 1
        if 0 <= index < len(items):
            return items[index].id
        return ref

    def render(self, result: ServiceResult) -> str:
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        return format_result(result, settings=settings)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so they don't
          pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        output = self.render(result)
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
