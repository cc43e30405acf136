"""Validation engine: per-node warnings derived from graph topology.

Three independent rules, merged per node id:

1. Thank-you terminal: a thank-you node must not originate edges.
2. Sales single-exit: a sales node must have exactly one outgoing edge.
3. Orphan: a node with no incoming and no outgoing edges.

Warnings never block edits. :func:`validate` is pure; the caller decides
whether to commit the recomputed ``has_warning`` flags.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from funnelctl.domain.graph import FunnelEdge, FunnelNode
from funnelctl.domain.types import NodeKind
from funnelctl.infrastructure.graph.engine import GraphEngine

THANKYOU_OUTGOING = "Thank You cannot have outgoing connections."
SALES_EXIT_TEMPLATE = "Sales Page should have 1 outgoing edge (currently {count})."
ORPHAN = "Orphan node (no connections)."


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of a validation pass.

    Attributes:
        nodes: Input nodes with ``has_warning`` recomputed, in input order.
        warnings: Messages keyed by node id; clean nodes have no entry.
    """

    nodes: tuple[FunnelNode, ...]
    warnings: dict[str, list[str]] = field(default_factory=dict)

    @property
    def flags(self) -> dict[str, bool]:
        return {n.id: n.id in self.warnings for n in self.nodes}


def node_warnings(node: FunnelNode, engine: GraphEngine) -> list[str]:
    """Evaluate every rule for one node."""
    messages: list[str] = []
    outgoing = engine.out_degree(node.id)
    incoming = engine.in_degree(node.id)

    if node.kind is NodeKind.THANKYOU and outgoing > 0:
        messages.append(THANKYOU_OUTGOING)
    if node.kind is NodeKind.SALES and outgoing != 1:
        messages.append(SALES_EXIT_TEMPLATE.format(count=outgoing))
    if incoming == 0 and outgoing == 0:
        messages.append(ORPHAN)
    return messages


def validate(nodes: Sequence[FunnelNode], edges: Sequence[FunnelEdge]) -> ValidationReport:
    """Compute warnings for *nodes* given *edges*.

    Idempotent and independent of traversal order: degrees are counted on a
    graph view, so reordering either sequence yields the same mapping.
    """
    engine = GraphEngine(nodes, edges)
    warnings: dict[str, list[str]] = {}
    updated: list[FunnelNode] = []

    for node in nodes:
        messages = node_warnings(node, engine)
        if messages:
            warnings[node.id] = messages
        flag = bool(messages)
        if node.data.has_warning != flag:
            node = node.model_copy(
                update={"data": node.data.model_copy(update={"has_warning": flag})}
            )
        updated.append(node)

    return ValidationReport(nodes=tuple(updated), warnings=warnings)


def flags_changed(before: Sequence[FunnelNode], after: Sequence[FunnelNode]) -> bool:
    """Whether any node's ``has_warning`` differs between two node sequences."""
    previous = {n.id: n.has_warning for n in before}
    return any(previous.get(n.id) != n.has_warning for n in after)


def flatten_warnings(warnings: Mapping[str, Sequence[str]]) -> list[dict[str, str]]:
    """Flatten the per-node mapping into ``[{"id", "message"}]`` rows."""
    return [
        {"id": node_id, "message": message}
        for node_id, messages in warnings.items()
        for message in messages
    ]
