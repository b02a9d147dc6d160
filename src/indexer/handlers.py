"""Aggregation Engine — обработчики событий ленты.

Каждый обработчик — переход состояния (снапшот хранилища, одно событие) →
(новые/обновлённые записи). Все записи сохраняются через store.save() внутри
открытого события; фиксирует их вызывающий (CrateIndexer).

Порядок записи в TokenTrade:
1. Проверка наличия CrateToken (иначе MISSING_AGGREGATE_ROOT, без записей)
2. Trader (load-or-create)
3. Trade (immutable, append-only)
4. Резервы CrateToken
5. TokenBalance (load-or-create)
6. ProtocolStats (load-or-create)
"""

import logging

from src.core.domain import (
    CrateToken,
    ProtocolStats,
    TokenBalance,
    TokenLaunched,
    TokenTrade,
    Trade,
    Trader,
    token_balance_id,
    trade_id,
)
from src.core.domain.units import CURVE_SUPPLY, PROTOCOL_STATS_ID, TOTAL_SUPPLY
from src.core.logger import get_logger, log_event
from src.core.math import reserve_delta, unit_price
from src.store import EntityStore

from .config import IndexerConfig, TvlMode
from .errors import ErrorKind, IndexerIntegrityError


logger = get_logger(__name__)


# =============================================================================
# LAUNCH
# =============================================================================


def handle_token_launched(
    store: EntityStore, event: TokenLaunched, config: IndexerConfig
) -> CrateToken | None:
    """Создание CrateToken при запуске.

    Returns:
        Созданный CrateToken, либо None если повторный запуск проигнорирован

    Raises:
        IndexerIntegrityError: DUPLICATE_AGGREGATE_ROOT, если токен уже существует
            и config.reject_duplicate_launch
    """
    existing = store.load(CrateToken, event.token_address)
    if existing is not None:
        if config.reject_duplicate_launch:
            raise IndexerIntegrityError(
                ErrorKind.DUPLICATE_AGGREGATE_ROOT,
                f"token {event.token_address} already launched at block {existing.block_number}",
                address=event.token_address,
                block_number=event.block.block_number,
                transaction_hash=event.block.transaction_hash,
            )
        log_event(
            logger,
            "duplicate_launch_ignored",
            {"token": event.token_address, "block_number": event.block.block_number},
            level=logging.WARNING,
        )
        return None

    token = CrateToken(
        id=event.token_address,
        name=event.name,
        symbol=event.symbol,
        block_number=event.block.block_number,
        block_timestamp=event.block.block_timestamp,
        transaction_hash=event.block.transaction_hash,
        total_supply=TOTAL_SUPPLY,
        total_curve_supply=CURVE_SUPPLY,
        amount_of_tokens_in_curve=CURVE_SUPPLY,
        amount_of_eth_in_curve=0,
        tokens_in_circulation=0,
    )
    store.save(token)

    log_event(
        logger,
        "token_launched",
        {"token": token.id, "symbol": token.symbol, "block_number": token.block_number},
    )
    return token


# =============================================================================
# TRADE
# =============================================================================


def handle_token_trade(store: EntityStore, event: TokenTrade, config: IndexerConfig) -> Trade:
    """Применение сделки к резервам токена, балансу трейдера и статистике.

    Raises:
        IndexerIntegrityError: MISSING_AGGREGATE_ROOT, если токен не запускался;
            CURVE_INVARIANT_VIOLATION, если после сделки нарушен инвариант кривой
    """
    block = event.block

    token = store.load(CrateToken, event.source)
    if token is None:
        raise IndexerIntegrityError(
            ErrorKind.MISSING_AGGREGATE_ROOT,
            f"trade on token {event.source} with no prior launch",
            address=event.source,
            block_number=block.block_number,
            transaction_hash=block.transaction_hash,
        )

    trader = load_or_create_trader(store, event.trader)

    trade = Trade(
        id=_next_trade_id(store, block.transaction_hash, block.log_index),
        token=token.id,
        trader=trader.id,
        is_purchase=event.is_purchase,
        block_number=block.block_number,
        block_timestamp=block.block_timestamp,
        transaction_hash=block.transaction_hash,
        log_index=block.log_index,
        eth_traded=event.eth_amount,
        token_traded=event.token_amount,
        price=unit_price(event.eth_amount, event.token_amount),
    )
    store.save(trade)

    delta = reserve_delta(event.eth_amount, event.token_amount, event.is_purchase)
    token = token.model_copy(
        update={
            "amount_of_eth_in_curve": token.amount_of_eth_in_curve + delta.eth_in_curve,
            "amount_of_tokens_in_curve": token.amount_of_tokens_in_curve + delta.tokens_in_curve,
            "tokens_in_circulation": token.tokens_in_circulation + delta.tokens_in_circulation,
        }
    )
    if config.check_invariants and not token.curve_balanced():
        raise IndexerIntegrityError(
            ErrorKind.CURVE_INVARIANT_VIOLATION,
            f"curve reserves of {token.id} no longer sum to total_curve_supply",
            address=token.id,
            block_number=block.block_number,
            transaction_hash=block.transaction_hash,
        )
    store.save(token)

    update_token_balance(store, token.id, trader.id, trade.signed_token_delta())
    update_protocol_stats(store, trade, token, config.tvl_mode)

    log_event(
        logger,
        "token_trade",
        {
            "token": token.id,
            "trader": trader.id,
            "side": trade.side.value,
            "eth": trade.eth_traded,
            "tokens": trade.token_traded,
            "block_number": trade.block_number,
        },
        level=logging.DEBUG,
    )
    return trade


# =============================================================================
# LOAD-OR-CREATE
# =============================================================================


def load_or_create_trader(store: EntityStore, address: str) -> Trader:
    """Trader по адресу; создаётся при первом обращении."""
    trader = store.load(Trader, address)
    if trader is None:
        trader = Trader(id=address)
        store.save(trader)
    return trader


def update_token_balance(store: EntityStore, token: str, trader: str, delta: int) -> TokenBalance:
    """Применить delta к балансу пары (token, trader); нулевой баланс при первом обращении."""
    balance = store.load(TokenBalance, token_balance_id(token, trader))
    if balance is None:
        balance = TokenBalance.empty(token, trader)
    balance = balance.applied(delta)
    store.save(balance)
    return balance


def update_protocol_stats(
    store: EntityStore, trade: Trade, token: CrateToken, tvl_mode: TvlMode
) -> ProtocolStats:
    """Накопить объём и счётчик сделок; обновить tvl согласно tvl_mode."""
    stats = store.load(ProtocolStats, PROTOCOL_STATS_ID)
    if stats is None:
        stats = ProtocolStats.initial()

    if tvl_mode == TvlMode.AGGREGATE:
        tvl = stats.tvl + trade.signed_eth_delta()
    else:
        tvl = token.amount_of_eth_in_curve

    stats = stats.model_copy(
        update={
            "volume": stats.volume + trade.eth_traded,
            "number_of_trades": stats.number_of_trades + 1,
            "tvl": tvl,
        }
    )
    store.save(stats)
    return stats


def _next_trade_id(store: EntityStore, transaction_hash: str, log_index: int) -> str:
    # Несколько TokenTrade в одной транзакции: первая запись не перезаписывается
    tx_id = trade_id(transaction_hash)
    if store.load(Trade, tx_id) is None:
        return tx_id
    return trade_id(transaction_hash, log_index)
