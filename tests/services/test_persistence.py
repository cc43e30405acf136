"""Tests for the snapshot envelope and the persistence adapter."""

from __future__ import annotations

import json

import pytest

from _helpers import build_snapshot

from funnelctl.domain.errors import SnapshotImportError
from funnelctl.domain.graph import GraphSnapshot
from funnelctl.domain.types import NodeKind
from funnelctl.infrastructure.store import MemoryStore
from funnelctl.services.persistence import (
    DEFAULT_STORE_KEY,
    PersistenceAdapter,
    decode_snapshot,
    encode_snapshot,
)

_NODE_DATA = b'"data": {"kind": "order", "title": "Order Page", "primaryCta": "Complete order"}'
_DEEPLY_NESTED = b'{"version": 1, "nodes": ' + b"[" * 200_000 + b"]" * 200_000 + b"}"
_NAN_POSITION = (
    b'{"version": 1, "nodes": [{"id": "a", "position": {"x": NaN, "y": 0}, '
    + _NODE_DATA
    + b"}]}"
)
_INFINITE_POSITION = _NAN_POSITION.replace(b"NaN", b"Infinity")


def _sample() -> GraphSnapshot:
    snapshot, _ = build_snapshot(
        [NodeKind.SALES, NodeKind.ORDER, NodeKind.UPSELL], [(0, 1), (1, 2)]
    )
    return snapshot


class TestEnvelope:
    def test_encode_shape(self) -> None:
        payload = json.loads(encode_snapshot(_sample()))
        assert payload["version"] == 1
        assert set(payload) == {"version", "nodes", "edges", "counters"}
        assert payload["counters"] == {
            "sales": 1,
            "order": 1,
            "upsell": 1,
            "downsell": 0,
            "thankyou": 0,
        }

    def test_decode_restores_equal_snapshot(self) -> None:
        snapshot = _sample()
        assert decode_snapshot(encode_snapshot(snapshot)) == snapshot

    def test_missing_sections_default_to_empty(self) -> None:
        snapshot = decode_snapshot(b'{"version": 1}')
        assert snapshot == GraphSnapshot()

    def test_edge_annotations_filled(self) -> None:
        blob = json.dumps(
            {
                "version": 1,
                "nodes": [],
                "edges": [{"id": "e", "source": "a", "target": "b"}],
            }
        )
        edge = decode_snapshot(blob).edges[0]
        assert edge.type == "smoothstep"
        assert edge.marker_end.type == "arrowclosed"

    @pytest.mark.parametrize(
        "blob",
        [
            b"not json",
            b"[1, 2]",
            b'{"nodes": []}',
            b'{"version": 2, "nodes": []}',
            b'{"version": true}',
            b'{"version": "1"}',
            b'{"version": 1, "nodes": [{"id": "n"}]}',
            b'{"version": 1, "counters": {"upsell": -3}}',
            pytest.param(_DEEPLY_NESTED, id="deeply-nested"),
            pytest.param(_NAN_POSITION, id="nan-position"),
            pytest.param(_INFINITE_POSITION, id="infinite-position"),
        ],
    )
    def test_rejects_bad_payloads(self, blob: bytes) -> None:
        with pytest.raises(SnapshotImportError) as excinfo:
            decode_snapshot(blob)
        assert excinfo.value.code == "IMPORT_ERROR"


class TestPersistenceAdapter:
    def test_default_key(self) -> None:
        assert PersistenceAdapter(MemoryStore()).key == DEFAULT_STORE_KEY == "cp_funnel_builder_v1"

    def test_persist_then_restore(self) -> None:
        store = MemoryStore()
        adapter = PersistenceAdapter(store, key="k")
        snapshot = _sample()
        assert adapter.persist(snapshot)
        assert "k" in store.data
        assert adapter.restore() == snapshot

    def test_restore_absent(self) -> None:
        assert PersistenceAdapter(MemoryStore()).restore() is None

    def test_restore_ignores_wrong_version(self) -> None:
        store = MemoryStore({"k": b'{"version": 2, "nodes": []}'})
        assert PersistenceAdapter(store, key="k").restore() is None

    def test_restore_ignores_corrupt_payload(self) -> None:
        store = MemoryStore({"k": b"{broken"})
        assert PersistenceAdapter(store, key="k").restore() is None

    def test_restore_ignores_deeply_nested_payload(self) -> None:
        store = MemoryStore({"k": b"[" * 200_000 + b"]" * 200_000})
        assert PersistenceAdapter(store, key="k").restore() is None

    def test_store_failure_is_swallowed(self) -> None:
        store = MemoryStore()
        store.fail = True
        adapter = PersistenceAdapter(store)
        assert adapter.persist(_sample()) is False
        assert adapter.restore() is None

    def test_export_is_indented(self) -> None:
        text = PersistenceAdapter(MemoryStore()).export_bytes(_sample()).decode()
        assert text.startswith('{\n  "version": 1')

    def test_import_raises_on_bad_payload(self) -> None:
        with pytest.raises(SnapshotImportError):
            PersistenceAdapter(MemoryStore()).import_bytes(b'{"version": 0}')
