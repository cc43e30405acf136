"""Tests for the NetworkX degree view."""

from __future__ import annotations

from _helpers import build_snapshot

from funnelctl.domain.types import NodeKind
from funnelctl.infrastructure.graph.engine import GraphEngine


class TestGraphEngine:
    def test_isolated_nodes_present(self) -> None:
        snapshot, ids = build_snapshot([NodeKind.SALES, NodeKind.ORDER])
        engine = GraphEngine(snapshot.nodes, snapshot.edges)
        assert set(engine.graph.nodes) == set(ids)
        assert engine.out_degree(ids[0]) == 0
        assert engine.in_degree(ids[0]) == 0

    def test_parallel_edges_counted(self) -> None:
        snapshot, ids = build_snapshot([NodeKind.SALES, NodeKind.ORDER], [(0, 1), (0, 1)])
        engine = GraphEngine(snapshot.nodes, snapshot.edges)
        assert engine.out_degree(ids[0]) == 2
        assert engine.in_degree(ids[1]) == 2

    def test_self_loop_counts_both_ways(self) -> None:
        snapshot, ids = build_snapshot([NodeKind.UPSELL], [(0, 0)])
        engine = GraphEngine(snapshot.nodes, snapshot.edges)
        assert engine.out_degree(ids[0]) == 1
        assert engine.in_degree(ids[0]) == 1

    def test_unknown_node_has_zero_degree(self) -> None:
        engine = GraphEngine((), ())
        assert engine.out_degree("nope") == 0
        assert engine.in_degree("nope") == 0

    def test_graph_built_once(self) -> None:
        snapshot, _ = build_snapshot([NodeKind.SALES])
        engine = GraphEngine(snapshot.nodes, snapshot.edges)
        assert engine.graph is engine.graph
