"""Pluggy hook specifications for funnel state changes.

Hooks are called synchronously on the controller's thread after the new
state has been validated and persisted. External renderers subscribe here.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("funnelctl")


class FunnelctlHookSpec:
    """Hook specifications for the funnelctl plugin system."""

    @hookspec
    def post_change(
        self,
        op: str,
        snapshot: dict[str, Any],
        warnings: dict[str, list[str]],
    ) -> None:
        """Called after every applied intent, undo/redo, and restore."""

    @hookspec
    def post_import(self, node_count: int, edge_count: int) -> None:
        """Called after a successful import."""
