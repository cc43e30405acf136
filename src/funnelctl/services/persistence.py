"""PersistenceAdapter: versioned snapshot envelope for store and file exchange.

Envelope: ``{"version": 1, "nodes": [...], "edges": [...], "counters": {...}}``.
Any other version is treated exactly like "nothing saved" on restore and is
rejected on import. There is no migration path.

Persistence is best-effort: a store failure is logged and skipped, never
raised to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from funnelctl.domain.errors import SnapshotImportError, StoreUnavailable
from funnelctl.domain.graph import Counters, FunnelEdge, FunnelNode, GraphSnapshot
from funnelctl.domain.types import SNAPSHOT_VERSION

if TYPE_CHECKING:
    from funnelctl.infrastructure.store import KeyedStore

logger = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "cp_funnel_builder_v1"


class SnapshotEnvelope(BaseModel):
    """Wire-format contract for persisted and exported snapshots."""

    model_config = ConfigDict(frozen=True)

    version: Literal[1]
    nodes: list[FunnelNode] | None = None
    edges: list[FunnelEdge] | None = None
    counters: Counters | None = None

    def to_snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(nodes=self.nodes, edges=self.edges, counters=self.counters)


def encode_snapshot(snapshot: GraphSnapshot, *, indent: int | None = None) -> bytes:
    """Serialize *snapshot* inside the version-1 envelope."""
    payload: dict[str, Any] = {"version": SNAPSHOT_VERSION, **snapshot.structure()}
    return json.dumps(payload, indent=indent, allow_nan=False).encode("utf-8")


def decode_snapshot(blob: bytes | str) -> GraphSnapshot:
    """Parse an envelope and return its snapshot.

    Missing edge routing annotations are filled with defaults here.

    Raises:
        SnapshotImportError: On malformed JSON, schema mismatch, or a
            version other than 1.
    """
    try:
        raw = json.loads(blob)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SnapshotImportError(f"Invalid JSON: {exc}") from exc
    except RecursionError as exc:
        raise SnapshotImportError("Invalid JSON: nesting too deep") from exc

    if not isinstance(raw, dict):
        raise SnapshotImportError("Snapshot payload must be a JSON object")
    version = raw.get("version")
    if version != SNAPSHOT_VERSION or isinstance(version, bool):
        raise SnapshotImportError(f"Unsupported snapshot version: {version!r}")

    try:
        envelope = SnapshotEnvelope.model_validate(raw)
    except ValidationError as exc:
        raise SnapshotImportError(
            f"Invalid snapshot payload ({exc.error_count()} errors)"
        ) from exc
    return envelope.to_snapshot()


class PersistenceAdapter:
    """Reads and writes snapshots under one configured store key."""

    def __init__(self, store: KeyedStore, key: str = DEFAULT_STORE_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def persist(self, snapshot: GraphSnapshot) -> bool:
        """Overwrite the stored snapshot. Returns False if the store was unavailable."""
        try:
            self._store.set(self._key, encode_snapshot(snapshot))
        except (StoreUnavailable, OSError) as exc:
            logger.warning("persist skipped for key %s: %s", self._key, exc)
            return False
        return True

    def restore(self) -> GraphSnapshot | None:
        """Load the stored snapshot, or None if absent, unreadable, or wrong version."""
        try:
            blob = self._store.get(self._key)
        except (StoreUnavailable, OSError) as exc:
            logger.warning("restore skipped for key %s: %s", self._key, exc)
            return None
        if not blob:
            return None
        try:
            return decode_snapshot(blob)
        except SnapshotImportError as exc:
            logger.info("ignoring stored snapshot for key %s: %s", self._key, exc)
            return None

    def export_bytes(self, snapshot: GraphSnapshot) -> bytes:
        """Serialize *snapshot* for download (2-space indented JSON)."""
        return encode_snapshot(snapshot, indent=2)

    def import_bytes(self, blob: bytes | str) -> GraphSnapshot:
        """Parse an uploaded payload.

        Raises:
            SnapshotImportError: If the payload is malformed or not version 1.
        """
        return decode_snapshot(blob)
