"""Graph model: funnel nodes, edges, counters, and pure mutations.

A :class:`GraphSnapshot` is an immutable value. Every mutation below takes a
snapshot and returns a new one, so the history manager can keep snapshot
references without copying them.

INVARIANT: ``has_warning`` is derived state. Structural operations never set
it; only :func:`apply_warning_flags` (driven by validation) does.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from funnelctl.domain.errors import InvalidConnection
from funnelctl.domain.ids import generate_id
from funnelctl.domain.types import (
    DEFAULT_EDGE_TYPE,
    DEFAULT_MARKER_TYPE,
    NODE_TYPE,
    PRIMARY_CTA,
    NodeKind,
    node_title,
)

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class Position(BaseModel):
    """Logical canvas position. Coordinates must be finite numbers."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float = 0.0
    y: float = 0.0


class NodeData(BaseModel):
    """Per-node payload carried under ``data`` in the wire format."""

    model_config = _MODEL_CONFIG

    kind: NodeKind
    title: str
    primary_cta: str = Field(alias="primaryCta")
    has_warning: bool = Field(default=False, alias="hasWarning")

    @field_validator("has_warning", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value


class FunnelNode(BaseModel):
    """One funnel step."""

    model_config = _MODEL_CONFIG

    id: str
    type: str = NODE_TYPE
    position: Position = Field(default_factory=Position)
    data: NodeData

    @property
    def kind(self) -> NodeKind:
        return self.data.kind

    @property
    def title(self) -> str:
        return self.data.title

    @property
    def has_warning(self) -> bool:
        return self.data.has_warning


class MarkerEnd(BaseModel):
    """Arrow marker annotation (rendering only)."""

    model_config = _MODEL_CONFIG

    type: str = DEFAULT_MARKER_TYPE


class FunnelEdge(BaseModel):
    """Directed connection between two funnel steps.

    ``type`` and ``marker_end`` are routing annotations. Payloads that omit
    them (or carry ``null``) are normalized to the defaults at load time.
    """

    model_config = _MODEL_CONFIG

    id: str
    source: str
    target: str
    type: str = DEFAULT_EDGE_TYPE
    marker_end: MarkerEnd = Field(default_factory=MarkerEnd, alias="markerEnd")

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> Any:
        return DEFAULT_EDGE_TYPE if value is None else value

    @field_validator("marker_end", mode="before")
    @classmethod
    def _default_marker(cls, value: Any) -> Any:
        if value is None:
            return MarkerEnd()
        if isinstance(value, str):
            return MarkerEnd(type=value)
        return value


class Counters(BaseModel):
    """Per-kind creation counters, used for upsell/downsell ordinals."""

    model_config = _MODEL_CONFIG

    sales: int = Field(default=0, ge=0)
    order: int = Field(default=0, ge=0)
    upsell: int = Field(default=0, ge=0)
    downsell: int = Field(default=0, ge=0)
    thankyou: int = Field(default=0, ge=0)

    def get(self, kind: NodeKind) -> int:
        return int(getattr(self, kind.value))

    def incremented(self, kind: NodeKind) -> Counters:
        return self.model_copy(update={kind.value: self.get(kind) + 1})


class GraphSnapshot(BaseModel):
    """The complete ``{nodes, edges, counters}`` state at one point in time."""

    model_config = _MODEL_CONFIG

    nodes: tuple[FunnelNode, ...] = ()
    edges: tuple[FunnelEdge, ...] = ()
    counters: Counters = Field(default_factory=Counters)

    @field_validator("nodes", "edges", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("counters", mode="before")
    @classmethod
    def _none_is_zero(cls, value: Any) -> Any:
        return Counters() if value is None else value

    def node(self, node_id: str) -> FunnelNode | None:
        """Return the node with *node_id*, or None."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def edge_ids(self) -> set[str]:
        return {e.id for e in self.edges}

    def structure(self) -> dict[str, Any]:
        """Wire-format dump of the snapshot (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Pure mutations
# ---------------------------------------------------------------------------


def add_node(
    snapshot: GraphSnapshot,
    kind: NodeKind,
    position: Position,
    *,
    node_id: str | None = None,
) -> tuple[GraphSnapshot, FunnelNode]:
    """Append a new node of *kind* and bump ``counters[kind]``.

    The title uses ``counters[kind] + 1`` as the ordinal. Always succeeds.
    """
    ordinal = snapshot.counters.get(kind) + 1
    node = FunnelNode(
        id=node_id or generate_id(),
        position=position,
        data=NodeData(
            kind=kind,
            title=node_title(kind, ordinal),
            primary_cta=PRIMARY_CTA[kind],
            has_warning=False,
        ),
    )
    updated = snapshot.model_copy(
        update={
            "nodes": (*snapshot.nodes, node),
            "counters": snapshot.counters.incremented(kind),
        }
    )
    return updated, node


def add_edge(
    snapshot: GraphSnapshot,
    source: str,
    target: str,
    *,
    edge_id: str | None = None,
) -> tuple[GraphSnapshot, FunnelEdge]:
    """Append an edge ``source -> target``.

    Raises:
        InvalidConnection: If the source is a thank-you node, or either
            endpoint does not exist. Self-loops and parallel edges are fine.
    """
    source_node = snapshot.node(source)
    if source_node is None or snapshot.node(target) is None:
        missing = source if source_node is None else target
        msg = f"Cannot connect: node '{missing}' does not exist"
        raise InvalidConnection(msg)
    if source_node.kind is NodeKind.THANKYOU:
        msg = "Thank You nodes cannot have outgoing connections"
        raise InvalidConnection(msg)

    edge = FunnelEdge(id=edge_id or generate_id(), source=source, target=target)
    return snapshot.model_copy(update={"edges": (*snapshot.edges, edge)}), edge


def remove_elements(
    snapshot: GraphSnapshot,
    node_ids: Iterable[str] = (),
    edge_ids: Iterable[str] = (),
) -> GraphSnapshot:
    """Remove nodes and edges by id in one step.

    Every edge whose source or target is a removed node goes with it.
    Unknown ids are ignored.
    """
    dropped_nodes = set(node_ids)
    dropped_edges = set(edge_ids)
    nodes = tuple(n for n in snapshot.nodes if n.id not in dropped_nodes)
    edges = tuple(
        e
        for e in snapshot.edges
        if e.id not in dropped_edges
        and e.source not in dropped_nodes
        and e.target not in dropped_nodes
    )
    return snapshot.model_copy(update={"nodes": nodes, "edges": edges})


def remove_nodes(snapshot: GraphSnapshot, ids: Iterable[str]) -> GraphSnapshot:
    """Remove nodes by id, cascading to their edges."""
    return remove_elements(snapshot, node_ids=ids)


def remove_edges(snapshot: GraphSnapshot, ids: Iterable[str]) -> GraphSnapshot:
    """Remove edges by id."""
    return remove_elements(snapshot, edge_ids=ids)


def move_node(snapshot: GraphSnapshot, node_id: str, position: Position) -> GraphSnapshot:
    """Return a snapshot with *node_id* placed at *position*.

    Raises:
        KeyError: If *node_id* does not exist.
    """
    if snapshot.node(node_id) is None:
        raise KeyError(node_id)
    nodes = tuple(
        n.model_copy(update={"position": position}) if n.id == node_id else n
        for n in snapshot.nodes
    )
    return snapshot.model_copy(update={"nodes": nodes})


def apply_warning_flags(snapshot: GraphSnapshot, flags: Mapping[str, bool]) -> GraphSnapshot:
    """Overwrite ``has_warning`` from *flags*; nodes absent from *flags* are cleared."""
    nodes = tuple(_with_flag(n, flags.get(n.id, False)) for n in snapshot.nodes)
    return snapshot.model_copy(update={"nodes": nodes})


def _with_flag(node: FunnelNode, flag: bool) -> FunnelNode:
    if node.data.has_warning == flag:
        return node
    return node.model_copy(update={"data": node.data.model_copy(update={"has_warning": flag})})
