"""GraphEngine: NetworkX view of a funnel snapshot.

Built from the node and edge sequences on demand; nothing is cached across
snapshots. A ``MultiDiGraph`` keeps parallel edges and self-loops so degree
counts match the raw edge list.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from funnelctl.domain.graph import FunnelEdge, FunnelNode

type _Graph = nx.MultiDiGraph


class GraphEngine:
    """Lazy-building graph view over one set of nodes and edges."""

    def __init__(self, nodes: Sequence[FunnelNode], edges: Sequence[FunnelEdge]) -> None:
        self._nodes = nodes
        self._edges = edges
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building it on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    def out_degree(self, node_id: str) -> int:
        g = self.graph
        return int(g.out_degree(node_id)) if node_id in g else 0

    def in_degree(self, node_id: str) -> int:
        g = self.graph
        return int(g.in_degree(node_id)) if node_id in g else 0

    def _build(self) -> _Graph:
        """Add all nodes first so isolated nodes are visible, then edges.

        Edges pointing at unknown nodes (possible in imported payloads) still
        count toward the degree of the endpoint that does exist.
        """
        g: _Graph = nx.MultiDiGraph()
        for node in self._nodes:
            g.add_node(node.id, kind=node.kind.value, title=node.title)
        for edge in self._edges:
            g.add_edge(edge.source, edge.target, id=edge.id, edge_type=edge.type)
        return g
