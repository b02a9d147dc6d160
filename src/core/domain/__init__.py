"""
Domain models and value objects.

Contains fundamental domain entities: CrateToken, Trader, Trade, TokenBalance,
ProtocolStats, and the chain events that drive them.
"""

from src.core.domain.events import (
    BlockMeta,
    ChainEvent,
    EventKind,
    TokenLaunched,
    TokenTrade,
)
from src.core.domain.protocol_stats import ProtocolStats
from src.core.domain.token import CrateToken
from src.core.domain.token_balance import TokenBalance
from src.core.domain.trade import Trade, TradeSide
from src.core.domain.trader import Trader
from src.core.domain.units import (
    CURVE_SUPPLY,
    PROTOCOL_STATS_ID,
    TOKEN_DECIMALS,
    TOTAL_SUPPLY,
    normalize_address,
    token_balance_id,
    trade_id,
)

__all__ = [
    # Units module
    "TOKEN_DECIMALS",
    "TOTAL_SUPPLY",
    "CURVE_SUPPLY",
    "PROTOCOL_STATS_ID",
    "normalize_address",
    "token_balance_id",
    "trade_id",
    # Entities
    "CrateToken",
    "Trader",
    "Trade",
    "TradeSide",
    "TokenBalance",
    "ProtocolStats",
    # Events
    "EventKind",
    "BlockMeta",
    "TokenLaunched",
    "TokenTrade",
    "ChainEvent",
]
