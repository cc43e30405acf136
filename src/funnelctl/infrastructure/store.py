"""Keyed byte stores for snapshot persistence.

Three backends share the :class:`KeyedStore` protocol:

- :class:`MemoryStore`: in-process dict (tests, embedding).
- :class:`FileStore`: one file per key under a directory.
- :class:`SqliteStore`: SQLAlchemy Core key/value table in a SQLite file.

Backends raise :class:`StoreUnavailable` on I/O failure. Callers that must
not fail (the persistence adapter) catch it.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import Column, LargeBinary, MetaData, Table, Text, create_engine, event, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from funnelctl.domain.errors import StoreUnavailable

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class KeyedStore(Protocol):
    """Byte-oriented key/value store."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...


class MemoryStore:
    """Dict-backed store. ``fail`` makes every call raise StoreUnavailable."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self.data: dict[str, bytes] = dict(initial or {})
        self.fail = False

    def get(self, key: str) -> bytes | None:
        if self.fail:
            raise StoreUnavailable("memory store disabled")
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        if self.fail:
            raise StoreUnavailable("memory store disabled")
        self.data[key] = value


_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileStore:
    """Stores each key as ``{root}/{key}.json``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def path_for(self, key: str) -> Path:
        return self._root / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreUnavailable(f"Cannot read {path}: {exc}") from exc

    def set(self, key: str, value: bytes) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(value)
            tmp.replace(path)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot write {path}: {exc}") from exc


metadata = MetaData()

kv_store = Table(
    "kv_store",
    metadata,
    Column("key", Text, primary_key=True),
    Column("value", LargeBinary, nullable=False),
    Column("modified", Text, nullable=False),
)


def create_store_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode enabled."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


class SqliteStore:
    """Key/value rows in a single SQLite table (SQLAlchemy Core)."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._engine: Engine | None = None

    @property
    def engine(self) -> Engine:
        """The engine, created (with the table) on first access."""
        if self._engine is None:
            try:
                engine = create_store_engine(self._db_path)
                metadata.create_all(engine)
            except (OSError, SQLAlchemyError) as exc:
                raise StoreUnavailable(f"Cannot open {self._db_path}: {exc}") from exc
            self._engine = engine
        return self._engine

    def get(self, key: str) -> bytes | None:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(kv_store.c.value).where(kv_store.c.key == key)).first()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot read key {key!r}: {exc}") from exc
        return None if row is None else bytes(row.value)

    def set(self, key: str, value: bytes) -> None:
        now = datetime.now(UTC).isoformat()
        stmt = sqlite_insert(kv_store).values(key=key, value=value, modified=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[kv_store.c.key],
            set_={"value": stmt.excluded.value, "modified": stmt.excluded.modified},
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot write key {key!r}: {exc}") from exc
