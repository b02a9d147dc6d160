"""
SQLite Entity Store

Персистентная реализация EntityStore:
- entities: текущее состояние (entity, id) → JSON записи
- history: прежние значения ключей по событиям (для отката при reorg)
- checkpoints: по одной строке на зафиксированное событие
- meta: граница finality

Каждое событие фиксируется одной SQLite транзакцией (crash-consistent).
"""

import json
import sqlite3
from typing import Dict, Iterator, Optional

from pydantic import BaseModel

from .base import ENTITY_TYPES, EntityKey, EntityStore


_SCHEMA = """
CREATE TABLE IF NOT EXISTS entities (
    entity TEXT NOT NULL,
    id TEXT NOT NULL,
    data TEXT NOT NULL,
    PRIMARY KEY (entity, id)
);
CREATE TABLE IF NOT EXISTS checkpoints (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    block_number INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS history (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    checkpoint_seq INTEGER NOT NULL,
    block_number INTEGER NOT NULL,
    entity TEXT NOT NULL,
    id TEXT NOT NULL,
    previous TEXT
);
CREATE INDEX IF NOT EXISTS idx_history_block ON history(block_number);
CREATE INDEX IF NOT EXISTS idx_checkpoints_block ON checkpoints(block_number);
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value INTEGER
);
"""


class SqliteEntityStore(EntityStore):
    """
    SQLite хранилище.

    Args:
        db_path: Путь к файлу базы (":memory:" для временной базы)
    """

    def __init__(self, db_path: str = ":memory:"):
        super().__init__()
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path)
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Meta
    # ------------------------------------------------------------------

    def _get_meta(self, key: str) -> Optional[int]:
        row = self._conn.execute("SELECT value FROM meta WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def _set_meta(self, key: str, value: Optional[int]) -> None:
        self._conn.execute(
            "INSERT INTO meta (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    def latest_block(self) -> Optional[int]:
        row = self._conn.execute(
            "SELECT block_number FROM checkpoints ORDER BY seq DESC LIMIT 1"
        ).fetchone()
        if row:
            return row[0]
        return self._get_meta("finalized_tip")

    def finalized_block(self) -> Optional[int]:
        return self._get_meta("finalized_block")

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @staticmethod
    def _decode(entity: str, data: str) -> BaseModel:
        return ENTITY_TYPES[entity].model_validate(json.loads(data))

    def _read_committed(self, key: EntityKey) -> Optional[BaseModel]:
        row = self._conn.execute(
            "SELECT data FROM entities WHERE entity = ? AND id = ?", key
        ).fetchone()
        if row is None:
            return None
        return self._decode(key[0], row[0])

    def _write_commit(self, block_number: int, pending: Dict[EntityKey, BaseModel]) -> None:
        with self._conn:
            cur = self._conn.execute(
                "INSERT INTO checkpoints (block_number) VALUES (?)", (block_number,)
            )
            checkpoint_seq = cur.lastrowid
            for (entity, entity_id), record in pending.items():
                row = self._conn.execute(
                    "SELECT data FROM entities WHERE entity = ? AND id = ?",
                    (entity, entity_id),
                ).fetchone()
                self._conn.execute(
                    "INSERT INTO history (checkpoint_seq, block_number, entity, id, previous) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (checkpoint_seq, block_number, entity, entity_id, row[0] if row else None),
                )
                self._conn.execute(
                    "INSERT INTO entities (entity, id, data) VALUES (?, ?, ?) "
                    "ON CONFLICT(entity, id) DO UPDATE SET data = excluded.data",
                    (entity, entity_id, json.dumps(record.model_dump(), sort_keys=True)),
                )

    def _revert(self, block_number: int) -> int:
        with self._conn:
            rows = self._conn.execute(
                "SELECT entity, id, previous FROM history WHERE block_number >= ? "
                "ORDER BY seq DESC",
                (block_number,),
            ).fetchall()
            for entity, entity_id, previous in rows:
                if previous is None:
                    self._conn.execute(
                        "DELETE FROM entities WHERE entity = ? AND id = ?", (entity, entity_id)
                    )
                else:
                    self._conn.execute(
                        "UPDATE entities SET data = ? WHERE entity = ? AND id = ?",
                        (previous, entity, entity_id),
                    )
            self._conn.execute("DELETE FROM history WHERE block_number >= ?", (block_number,))
            cur = self._conn.execute(
                "DELETE FROM checkpoints WHERE block_number >= ?", (block_number,)
            )
            return cur.rowcount

    def _finalize(self, block_number: int) -> None:
        with self._conn:
            row = self._conn.execute(
                "SELECT MAX(block_number) FROM checkpoints WHERE block_number < ?",
                (block_number,),
            ).fetchone()
            if row and row[0] is not None:
                self._set_meta("finalized_tip", row[0])
            self._conn.execute("DELETE FROM history WHERE block_number < ?", (block_number,))
            self._conn.execute("DELETE FROM checkpoints WHERE block_number < ?", (block_number,))
            self._set_meta("finalized_block", block_number)

    def _iter_committed(self, entity_name: str) -> Iterator[BaseModel]:
        rows = self._conn.execute(
            "SELECT data FROM entities WHERE entity = ? ORDER BY id", (entity_name,)
        ).fetchall()
        for (data,) in rows:
            yield self._decode(entity_name, data)
