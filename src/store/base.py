"""
Entity Store — контракт хранилища сущностей

Key-indexed хранилище immutable записей с атомарной фиксацией на событие
и откатом по номеру блока (reorg).

ГАРАНТИИ:
1. Все save() в рамках одного события видны вместе после commit_event() или не видны вовсе
2. load() внутри открытого события видит собственные staged записи этого события
3. revert_to_block(n) восстанавливает состояние на момент последнего события с блоком < n
4. finalize(n) делает блоки < n необратимыми (история отката удаляется)
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from src.core.domain import CrateToken, ProtocolStats, TokenBalance, Trade, Trader


# Реестр типов сущностей по entity_name (для десериализации)
ENTITY_TYPES: Dict[str, Type[BaseModel]] = {
    cls.entity_name: cls
    for cls in (CrateToken, Trader, Trade, TokenBalance, ProtocolStats)
}

EntityKey = Tuple[str, str]
R = TypeVar("R", bound=BaseModel)


class StoreError(Exception):
    """Нарушение протокола использования хранилища (save вне события, откат за finality и т.п.)."""

    pass


@dataclass(frozen=True)
class Checkpoint:
    """Зафиксированное событие: блок и количество записанных сущностей."""

    block_number: int
    records_written: int


def entity_key(record_or_cls, entity_id: Optional[str] = None) -> EntityKey:
    """Ключ (entity_name, id) для записи либо для пары (класс, id)."""
    if entity_id is None:
        return (record_or_cls.entity_name, record_or_cls.id)
    return (record_or_cls.entity_name, entity_id)


class EntityStore:
    """
    Абстрактное хранилище сущностей.

    Подклассы реализуют хранение зафиксированного состояния и журнала отката:
    _read_committed, _write_commit, _revert, _finalize, _iter_committed.
    Staging текущего события реализован здесь.
    """

    def __init__(self):
        self._pending: Optional[Dict[EntityKey, BaseModel]] = None
        self._pending_block: Optional[int] = None

    # ------------------------------------------------------------------
    # Чтение / запись
    # ------------------------------------------------------------------

    def load(self, entity_cls: Type[R], entity_id: str) -> Optional[R]:
        """Загрузка записи по id; None если записи нет."""
        key = entity_key(entity_cls, entity_id)
        if self._pending is not None and key in self._pending:
            return self._pending[key]  # type: ignore[return-value]
        return self._read_committed(key)  # type: ignore[return-value]

    def save(self, record: BaseModel) -> None:
        """Upsert записи в рамках открытого события."""
        if self._pending is None:
            raise StoreError("save() called outside of an open event")
        if getattr(record, "entity_name", None) not in ENTITY_TYPES:
            raise StoreError(f"Unknown entity type: {type(record).__name__}")
        self._pending[entity_key(record)] = record

    # ------------------------------------------------------------------
    # Checkpoint протокол
    # ------------------------------------------------------------------

    @property
    def event_open(self) -> bool:
        return self._pending is not None

    def begin_event(self, block_number: int) -> None:
        """Открыть staging для события в блоке block_number."""
        if self._pending is not None:
            raise StoreError("begin_event() while another event is open")
        self._pending = {}
        self._pending_block = block_number

    def commit_event(self) -> Checkpoint:
        """
        Атомарно зафиксировать все записи текущего события.

        Событие закрывается и при ошибке backend'а: staged записи отбрасываются,
        следующее begin_event() возможно сразу.
        """
        if self._pending is None or self._pending_block is None:
            raise StoreError("commit_event() without begin_event()")
        pending, block = self._pending, self._pending_block
        try:
            self._write_commit(block, pending)
        finally:
            self._pending = None
            self._pending_block = None
        return Checkpoint(block_number=block, records_written=len(pending))

    def abort_event(self) -> None:
        """Отбросить staged записи текущего события."""
        self._pending = None
        self._pending_block = None

    @contextmanager
    def event(self, block_number: int) -> Iterator["EntityStore"]:
        """begin_event / commit_event; abort_event при исключении."""
        self.begin_event(block_number)
        try:
            yield self
        except BaseException:
            self.abort_event()
            raise
        self.commit_event()

    def revert_to_block(self, block_number: int) -> int:
        """
        Откат всех событий с блоком >= block_number.

        Returns:
            Количество откатанных событий

        Raises:
            StoreError: Если событие открыто или блок уже финализирован
        """
        if self._pending is not None:
            raise StoreError("revert_to_block() while an event is open")
        finalized = self.finalized_block()
        if finalized is not None and block_number < finalized:
            raise StoreError(
                f"Cannot revert to block {block_number}: blocks below {finalized} are final"
            )
        return self._revert(block_number)

    def finalize(self, block_number: int) -> None:
        """Удалить историю отката для блоков < block_number."""
        finalized = self.finalized_block()
        if finalized is not None and block_number <= finalized:
            return
        self._finalize(block_number)

    # ------------------------------------------------------------------
    # Инспекция
    # ------------------------------------------------------------------

    def iter_records(self, entity_cls: Type[R]) -> Iterator[R]:
        """Зафиксированные записи типа, в порядке id."""
        return self._iter_committed(entity_cls.entity_name)  # type: ignore[return-value]

    def count(self, entity_cls: Type[BaseModel]) -> int:
        return sum(1 for _ in self.iter_records(entity_cls))

    def latest_block(self) -> Optional[int]:
        """Блок последнего зафиксированного события."""
        raise NotImplementedError

    def finalized_block(self) -> Optional[int]:
        """Граница finality (блоки ниже необратимы), либо None."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    def _read_committed(self, key: EntityKey) -> Optional[BaseModel]:
        raise NotImplementedError

    def _write_commit(self, block_number: int, pending: Dict[EntityKey, BaseModel]) -> None:
        raise NotImplementedError

    def _revert(self, block_number: int) -> int:
        raise NotImplementedError

    def _finalize(self, block_number: int) -> None:
        raise NotImplementedError

    def _iter_committed(self, entity_name: str) -> Iterator[BaseModel]:
        raise NotImplementedError
