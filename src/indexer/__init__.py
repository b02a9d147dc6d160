"""Indexer — агрегация derived state из ленты событий фабрики и токенов.

- handlers: переходы состояния для TokenLaunched / TokenTrade
- router: диспетчеризация по типу события, множество отслеживаемых токенов
- processor: атомарная обработка события, откат по reorg, read-интерфейс
"""

from .config import IndexerConfig, TvlMode
from .errors import ErrorKind, IndexerIntegrityError
from .handlers import (
    handle_token_launched,
    handle_token_trade,
    load_or_create_trader,
    update_protocol_stats,
    update_token_balance,
)
from .processor import CrateIndexer, FeedSummary
from .router import DispatchResult, EventRouter, TrackedTokens

__all__ = [
    "IndexerConfig",
    "TvlMode",
    "ErrorKind",
    "IndexerIntegrityError",
    "handle_token_launched",
    "handle_token_trade",
    "load_or_create_trader",
    "update_token_balance",
    "update_protocol_stats",
    "CrateIndexer",
    "FeedSummary",
    "DispatchResult",
    "EventRouter",
    "TrackedTokens",
]
