"""CrateIndexer — последовательная обработка ленты и checkpoint протокол.

Модель обработки:
- одно событие полностью обрабатывается и фиксируется до начала следующего
- порядок событий задаёт лента (block_number, log_index); индексатор не пересортирует
- исключение в обработчике → abort_event(), исключение пробрасывается дальше
- revert_to_block(n) откатывает хранилище и TrackedTokens синхронно

Read-интерфейс: get_token, get_trade, get_token_balance, get_protocol_stats.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from src.core.contracts import decode_event
from src.core.domain import (
    CrateToken,
    ProtocolStats,
    TokenBalance,
    Trade,
    normalize_address,
    token_balance_id,
    trade_id,
)
from src.core.domain.units import PROTOCOL_STATS_ID
from src.core.logger import get_logger, log_event
from src.store import EntityStore, InMemoryEntityStore

from .config import IndexerConfig
from .errors import IndexerIntegrityError
from .router import DispatchResult, EventRouter, TrackedTokens


logger = get_logger(__name__)


@dataclass(frozen=True)
class FeedSummary:
    """Итог обработки ленты."""

    processed: int
    ignored: int
    last_block: Optional[int]


class CrateIndexer:
    """
    Индексатор: EventRouter + EntityStore + checkpoint протокол.

    Args:
        store: Хранилище сущностей (по умолчанию InMemoryEntityStore)
        config: Конфигурация (по умолчанию IndexerConfig())
    """

    def __init__(self, store: Optional[EntityStore] = None, config: Optional[IndexerConfig] = None):
        self.store = store if store is not None else InMemoryEntityStore()
        self.config = config or IndexerConfig()
        logging.getLogger("src.indexer").setLevel(self.config.log_level)
        self.tracked = TrackedTokens.from_store(self.store)
        self.router = EventRouter(config=self.config, tracked=self.tracked)

    # ------------------------------------------------------------------
    # Обработка
    # ------------------------------------------------------------------

    def process(self, event: Any) -> DispatchResult:
        """
        Обработать одно типизированное событие атомарно.

        Raises:
            IndexerIntegrityError: Фатальное нарушение целостности (записи события отброшены)
        """
        kind = getattr(event, "kind", None)
        block = getattr(event, "block", None)
        if kind is None or block is None:
            logger.debug("ignored event without kind/block: %r", type(event).__name__)
            return DispatchResult(handled=False, kind=None)

        self.store.begin_event(block.block_number)
        try:
            result = self.router.dispatch(self.store, event)
            self.store.commit_event()
        except IndexerIntegrityError as exc:
            self._abort()
            log_event(logger, "integrity_violation", exc.context(), level=logging.CRITICAL)
            raise
        except Exception:
            self._abort()
            raise

        self.tracked.commit()
        return result

    def process_raw(self, payload: Dict[str, Any]) -> DispatchResult:
        """Декодировать сырой лог (jsonschema) и обработать; неизвестный тип — no-op."""
        event = decode_event(payload)
        if event is None:
            logger.debug("ignored unrecognized raw event %r", payload.get("event"))
            return DispatchResult(handled=False, kind=None)
        return self.process(event)

    def process_feed(self, events: Iterable[Any]) -> FeedSummary:
        """
        Обработать ленту по порядку. Первая integrity-ошибка прекращает обработку.

        Элементы ленты — типизированные события либо сырые dict-логи.
        """
        processed = ignored = 0
        for event in events:
            if isinstance(event, dict):
                result = self.process_raw(event)
            else:
                result = self.process(event)
            if result.handled:
                processed += 1
            else:
                ignored += 1
        return FeedSummary(processed=processed, ignored=ignored, last_block=self.store.latest_block())

    def _abort(self) -> None:
        self.store.abort_event()
        self.tracked.abort()

    # ------------------------------------------------------------------
    # Checkpoint протокол
    # ------------------------------------------------------------------

    def revert_to_block(self, block_number: int) -> int:
        """
        Откатить все события с блоком >= block_number.

        Returns:
            Количество откатанных событий
        """
        reverted = self.store.revert_to_block(block_number)
        dropped_tokens = self.tracked.revert_to_block(block_number)
        log_event(
            logger,
            "reverted_to_block",
            {
                "block_number": block_number,
                "events_reverted": reverted,
                "tokens_untracked": dropped_tokens,
                "latest_block": self.store.latest_block(),
            },
            level=logging.WARNING,
        )
        return reverted

    def finalize(self, block_number: int) -> None:
        """Сделать блоки < block_number необратимыми."""
        self.store.finalize(block_number)

    # ------------------------------------------------------------------
    # Read-интерфейс
    # ------------------------------------------------------------------

    def get_token(self, address: str) -> Optional[CrateToken]:
        return self.store.load(CrateToken, normalize_address(address))

    def get_trade(self, transaction_hash: str, log_index: Optional[int] = None) -> Optional[Trade]:
        """
        Сделка по хэшу транзакции.

        С log_index: первая сделка транзакции хранится под голым хэшем,
        последующие — под "{tx}-{log_index}"; проверяются оба id.
        """
        if log_index is None:
            return self.store.load(Trade, trade_id(transaction_hash))
        trade = self.store.load(Trade, trade_id(transaction_hash, log_index))
        if trade is not None:
            return trade
        first = self.store.load(Trade, trade_id(transaction_hash))
        if first is not None and first.log_index == log_index:
            return first
        return None

    def get_token_balance(self, token: str, trader: str) -> Optional[TokenBalance]:
        return self.store.load(TokenBalance, token_balance_id(token, trader))

    def get_protocol_stats(self) -> Optional[ProtocolStats]:
        return self.store.load(ProtocolStats, PROTOCOL_STATS_ID)

    def circulating_balance_sum(self, token: str) -> int:
        """Сумма балансов всех трейдеров по токену (должна равняться tokens_in_circulation)."""
        token_id = normalize_address(token)
        return sum(b.balance for b in self.store.iter_records(TokenBalance) if b.token == token_id)
