"""
In-memory Entity Store

Reference-реализация EntityStore на словарях с журналом отката.
Подходит для тестов и replay небольших лент.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel

from .base import EntityKey, EntityStore


@dataclass(frozen=True)
class JournalEntry:
    """Undo-запись одного зафиксированного события: прежние значения затронутых ключей."""

    block_number: int
    previous: Tuple[Tuple[EntityKey, Optional[BaseModel]], ...]


class InMemoryEntityStore(EntityStore):
    """
    In-memory хранилище.

    Записи immutable, поэтому в журнале хранятся ссылки, а не копии.
    """

    def __init__(self):
        super().__init__()
        self._records: Dict[EntityKey, BaseModel] = {}
        self._journal: List[JournalEntry] = []
        self._finalized_block: Optional[int] = None
        # Блок последнего события, удалённого из журнала при finalize
        self._finalized_tip: Optional[int] = None

    def latest_block(self) -> Optional[int]:
        if self._journal:
            return self._journal[-1].block_number
        return self._finalized_tip

    def finalized_block(self) -> Optional[int]:
        return self._finalized_block

    def _read_committed(self, key: EntityKey) -> Optional[BaseModel]:
        return self._records.get(key)

    def _write_commit(self, block_number: int, pending: Dict[EntityKey, BaseModel]) -> None:
        previous = tuple((key, self._records.get(key)) for key in pending)
        self._records.update(pending)
        self._journal.append(JournalEntry(block_number=block_number, previous=previous))

    def _revert(self, block_number: int) -> int:
        reverted = 0
        while self._journal and self._journal[-1].block_number >= block_number:
            entry = self._journal.pop()
            for key, prior in reversed(entry.previous):
                if prior is None:
                    self._records.pop(key, None)
                else:
                    self._records[key] = prior
            reverted += 1
        return reverted

    def _finalize(self, block_number: int) -> None:
        keep = [e for e in self._journal if e.block_number >= block_number]
        dropped = self._journal[: len(self._journal) - len(keep)]
        if dropped:
            self._finalized_tip = dropped[-1].block_number
        self._journal = keep
        self._finalized_block = block_number

    def _iter_committed(self, entity_name: str) -> Iterator[BaseModel]:
        keys = sorted(k for k in self._records if k[0] == entity_name)
        for key in keys:
            yield self._records[key]
