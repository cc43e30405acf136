"""SessionController: owns the live snapshot and applies user intents.

Every structural intent follows the same pipeline:

1. compute the new snapshot with a pure graph operation (rejections stop
   here, leaving state, history, and store untouched),
2. ``history.begin_mutation(live)``: exactly one push per intent,
3. swap in the new snapshot,
4. :meth:`_refresh`: validation, conditional ``has_warning`` commit,
   persistence, and hook dispatch. None of these touch history.

Undo, redo, and the initial restore skip step 2 but still refresh.
Selection is UI state and never enters snapshots or history.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from funnelctl.domain import graph as model
from funnelctl.domain.errors import InvalidConnection, SnapshotImportError
from funnelctl.domain.graph import GraphSnapshot, Position
from funnelctl.domain.types import NodeKind, parse_kind
from funnelctl.domain.validation import flags_changed, flatten_warnings, validate
from funnelctl.services.guard import DEFAULT_COOLDOWN_MS, ReentrancyGuard
from funnelctl.services.history import MAX_HISTORY, HistoryManager
from funnelctl.services.result import ServiceResult

if TYPE_CHECKING:
    from funnelctl.plugins.manager import PluginManager
    from funnelctl.services.persistence import PersistenceAdapter

logger = logging.getLogger(__name__)

type PositionLike = Position | tuple[float, float] | dict[str, float] | None


def _as_position(value: PositionLike) -> Position:
    if value is None:
        return Position()
    if isinstance(value, Position):
        return value
    if isinstance(value, tuple):
        x, y = value
        return Position(x=x, y=y)
    return Position.model_validate(value)


class SessionController:
    """Single owner of the live graph, the history stacks, and selection."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        *,
        history_limit: int = MAX_HISTORY,
        cooldown_ms: int = DEFAULT_COOLDOWN_MS,
        clock: Callable[[], float] = time.monotonic,
        plugins: PluginManager | None = None,
    ) -> None:
        self._adapter = adapter
        self._history = HistoryManager(history_limit)
        self._guard = ReentrancyGuard(cooldown_ms, clock=clock)
        self._plugins = plugins
        self._live = GraphSnapshot()
        self._warnings: dict[str, list[str]] = {}
        self._selected_nodes: frozenset[str] = frozenset()
        self._selected_edges: frozenset[str] = frozenset()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> GraphSnapshot:
        return self._live

    @property
    def warnings(self) -> dict[str, list[str]]:
        return {node_id: list(msgs) for node_id, msgs in self._warnings.items()}

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def guard(self) -> ReentrancyGuard:
        return self._guard

    @property
    def selection(self) -> tuple[frozenset[str], frozenset[str]]:
        return self._selected_nodes, self._selected_edges

    def state(self) -> ServiceResult:
        """Current snapshot, warnings, and undo/redo availability."""
        past, future = self._history.depth()
        return ServiceResult(
            ok=True,
            op="state",
            data={
                "snapshot": self._live.structure(),
                "node_count": len(self._live.nodes),
                "edge_count": len(self._live.edges),
                "warnings": self.warnings,
                "warning_list": flatten_warnings(self._warnings),
                "can_undo": self._history.can_undo,
                "can_redo": self._history.can_redo,
                "selection": {
                    "nodes": sorted(self._selected_nodes),
                    "edges": sorted(self._selected_edges),
                },
            },
            meta={"past": past, "future": future},
        )

    def check(self) -> ServiceResult:
        """Validation panel contents for the live graph."""
        rows = flatten_warnings(self._warnings)
        return ServiceResult(
            ok=True,
            op="check",
            data={
                "healthy": not rows,
                "count": len(rows),
                "warnings": self.warnings,
                "warning_list": rows,
            },
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> ServiceResult:
        """Restore the persisted snapshot, if any. Never records history."""
        restored = self._adapter.restore()
        if restored is not None:
            self._live = restored
            self._history.clear()
        warnings: list[str] = []
        self._refresh("load", warnings)
        return self._ok(
            "load",
            {"restored": restored is not None, "node_count": len(self._live.nodes)},
            warnings,
        )

    # ------------------------------------------------------------------
    # Structural intents
    # ------------------------------------------------------------------

    def add_node(self, kind: NodeKind | str, position: PositionLike = None) -> ServiceResult:
        """Add a node of *kind* at *position*."""
        resolved = kind if isinstance(kind, NodeKind) else parse_kind(kind)
        if resolved is None:
            return ServiceResult.failure("add_node", "UNKNOWN_KIND", f"Unknown node kind: {kind!r}")
        try:
            target = _as_position(position)
        except ValidationError:
            return self._invalid_position("add_node", position)
        updated, node = model.add_node(self._live, resolved, target)
        return self._commit(
            "add_node",
            updated,
            {"id": node.id, "kind": node.kind.value, "title": node.title},
        )

    def drop_node(self, kind_name: str, position: PositionLike = None) -> ServiceResult:
        """Handle a palette drop. Overlapping drops inside the cooldown are rejected."""
        with self._guard.hold() as acquired:
            if not acquired:
                return self._busy("drop_node")
            if not kind_name:
                return self._ok("drop_node", {"changed": False})
            return self.add_node(kind_name, position)

    def connect(self, source: str, target: str) -> ServiceResult:
        """Add an edge ``source -> target``."""
        try:
            updated, edge = model.add_edge(self._live, source, target)
        except InvalidConnection as exc:
            logger.debug("connect rejected: %s -> %s", source, target)
            return ServiceResult.failure(
                "connect",
                exc.code,
                str(exc),
                {"source": source, "target": target},
            )
        return self._commit(
            "connect",
            updated,
            {"id": edge.id, "source": edge.source, "target": edge.target},
        )

    def delete(self, node_ids: Iterable[str] = (), edge_ids: Iterable[str] = ()) -> ServiceResult:
        """Delete nodes (with their edges) and edges as one transaction."""
        nodes = set(node_ids) & self._live.node_ids()
        edges = set(edge_ids) & self._live.edge_ids()
        if not nodes and not edges:
            return self._ok("delete", {"changed": False, "removed_nodes": [], "removed_edges": []})

        updated = model.remove_elements(self._live, nodes, edges)
        removed_edges = sorted(self._live.edge_ids() - updated.edge_ids())
        self._selected_nodes -= nodes
        self._selected_edges -= set(removed_edges)
        return self._commit(
            "delete",
            updated,
            {"removed_nodes": sorted(nodes), "removed_edges": removed_edges},
        )

    def move_node(self, node_id: str, position: PositionLike) -> ServiceResult:
        """Reposition a node. A move to the current position is a no-op."""
        try:
            target = _as_position(position)
        except ValidationError:
            return self._invalid_position("move_node", position)
        current = self._live.node(node_id)
        if current is None:
            return ServiceResult.failure("move_node", "NOT_FOUND", f"Node '{node_id}' not found")
        if current.position == target:
            return self._ok("move_node", {"id": node_id, "changed": False})
        updated = model.move_node(self._live, node_id, target)
        return self._commit(
            "move_node", updated, {"id": node_id, "position": target.model_dump()}
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, node_ids: Iterable[str] = (), edge_ids: Iterable[str] = ()) -> ServiceResult:
        """Replace the current selection. Not part of history."""
        self._selected_nodes = frozenset(node_ids)
        self._selected_edges = frozenset(edge_ids)
        return self._ok(
            "select",
            {"nodes": sorted(self._selected_nodes), "edges": sorted(self._selected_edges)},
        )

    def delete_selected(self) -> ServiceResult:
        """Delete the current selection, then clear it."""
        nodes, edges = self._selected_nodes, self._selected_edges
        self._selected_nodes = frozenset()
        self._selected_edges = frozenset()
        return self.delete(nodes, edges)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> ServiceResult:
        previous = self._history.undo(self._live)
        if previous is None:
            return self._ok("undo", {"changed": False})
        self._live = previous
        warnings: list[str] = []
        self._refresh("undo", warnings)
        return self._ok("undo", {"changed": True}, warnings)

    def redo(self) -> ServiceResult:
        following = self._history.redo(self._live)
        if following is None:
            return self._ok("redo", {"changed": False})
        self._live = following
        warnings: list[str] = []
        self._refresh("redo", warnings)
        return self._ok("redo", {"changed": True}, warnings)

    # ------------------------------------------------------------------
    # Exchange
    # ------------------------------------------------------------------

    def export_bytes(self) -> bytes:
        """Serialize the live snapshot for download."""
        return self._adapter.export_bytes(self._live)

    def import_bytes(self, blob: bytes | str) -> ServiceResult:
        """Replace the live graph with an uploaded payload."""
        return self.import_from(lambda: blob)

    def import_from(self, loader: Callable[[], bytes | str | None]) -> ServiceResult:
        """Import from *loader*, which returns the payload or None when cancelled.

        The guard stays held while the loader runs, so a second import or
        drop cannot start until this one finishes and its cooldown passes.
        """
        with self._guard.hold() as acquired:
            if not acquired:
                return self._busy("import")
            try:
                blob = loader()
            except OSError as exc:
                return ServiceResult.failure(
                    "import", SnapshotImportError.code, f"Cannot read payload: {exc}"
                )
            if blob is None:
                return self._ok("import", {"changed": False, "cancelled": True})
            try:
                snapshot = self._adapter.import_bytes(blob)
            except SnapshotImportError as exc:
                logger.info("import rejected: %s", exc)
                return ServiceResult.failure("import", exc.code, str(exc))

            self._selected_nodes = frozenset()
            self._selected_edges = frozenset()
            result = self._commit(
                "import",
                snapshot,
                {"node_count": len(snapshot.nodes), "edge_count": len(snapshot.edges)},
            )
            if self._plugins is not None:
                extra: list[str] = []
                self._plugins.dispatch(
                    "post_import",
                    {"node_count": len(snapshot.nodes), "edge_count": len(snapshot.edges)},
                    extra,
                )
                result = result.with_warnings(extra)
            return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(self, op: str, updated: GraphSnapshot, data: dict[str, Any]) -> ServiceResult:
        """Record the mutation boundary and swap in *updated*."""
        txn = self._history.begin_mutation(self._live)
        self._live = updated
        warnings: list[str] = []
        self._refresh(op, warnings)
        logger.debug("%s applied txn=%d nodes=%d", op, txn, len(updated.nodes))
        return self._ok(op, {"changed": True, **data}, warnings, txn=txn)

    def _refresh(self, op: str, warnings: list[str]) -> None:
        """Derived recompute: validation, flag commit, persistence, hooks."""
        report = validate(self._live.nodes, self._live.edges)
        if flags_changed(self._live.nodes, report.nodes):
            self._live = self._live.model_copy(update={"nodes": report.nodes})
        self._warnings = report.warnings

        if not self._adapter.persist(self._live):
            warnings.append("Snapshot not persisted: store unavailable")

        if self._plugins is not None:
            self._plugins.dispatch(
                "post_change",
                {"op": op, "snapshot": self._live.structure(), "warnings": self.warnings},
                warnings,
            )

    def _ok(
        self,
        op: str,
        data: dict[str, Any],
        warnings: list[str] | None = None,
        *,
        txn: int | None = None,
    ) -> ServiceResult:
        past, future = self._history.depth()
        meta: dict[str, Any] = {"past": past, "future": future}
        if txn is not None:
            meta["txn"] = txn
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings or [], meta=meta)

    def _invalid_position(self, op: str, position: PositionLike) -> ServiceResult:
        return ServiceResult.failure(op, "INVALID_POSITION", f"Invalid position: {position!r}")

    def _busy(self, op: str) -> ServiceResult:
        logger.debug("%s rejected: another drop/import is in flight", op)
        return ServiceResult.failure(op, "BUSY", "Another drop or import is already in progress")
