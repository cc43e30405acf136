"""Tests for bounded undo/redo history."""

from __future__ import annotations

import pytest

from funnelctl.domain.graph import Counters, GraphSnapshot
from funnelctl.services.history import MAX_HISTORY, HistoryManager


def _snap(n: int) -> GraphSnapshot:
    return GraphSnapshot(counters=Counters(sales=n))


class TestHistoryManager:
    def test_starts_empty(self) -> None:
        history = HistoryManager()
        assert MAX_HISTORY == 50
        assert history.depth() == (0, 0)
        assert not history.can_undo
        assert not history.can_redo
        assert history.transaction_id == 0

    def test_rejects_non_positive_limit(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            HistoryManager(0)

    def test_begin_mutation_pushes_reference_and_clears_future(self) -> None:
        history = HistoryManager()
        a, b = _snap(1), _snap(2)
        history.begin_mutation(a)
        assert history.undo(b) is a
        assert history.can_redo
        txn = history.begin_mutation(a)
        assert txn == 2
        assert history.future == ()
        assert history.past[-1] is a

    def test_undo_redo_round_trip(self) -> None:
        history = HistoryManager()
        s0, s1 = _snap(0), _snap(1)
        history.begin_mutation(s0)
        assert history.undo(s1) is s0
        assert history.redo(s0) is s1
        assert history.depth() == (1, 0)

    def test_empty_stacks_return_none(self) -> None:
        history = HistoryManager()
        live = _snap(0)
        assert history.undo(live) is None
        assert history.redo(live) is None
        assert history.depth() == (0, 0)

    def test_oldest_evicted_at_limit(self) -> None:
        history = HistoryManager(limit=3)
        snaps = [_snap(i) for i in range(5)]
        for snap in snaps:
            history.begin_mutation(snap)
        assert history.past == tuple(snaps[2:])

    def test_undo_moves_entries_to_future(self) -> None:
        history = HistoryManager(limit=2)
        for i in range(2):
            history.begin_mutation(_snap(i))
        live = _snap(9)
        for _ in range(2):
            live = history.undo(live) or live
        assert len(history.future) == 2

    def test_clear(self) -> None:
        history = HistoryManager()
        history.begin_mutation(_snap(0))
        history.clear()
        assert history.depth() == (0, 0)
