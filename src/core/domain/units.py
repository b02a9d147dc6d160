"""
Units — Константы bonding curve и идентификаторы сущностей

Единственный допустимый способ построения:
- фиксированных параметров кривой (total supply, curve supply)
- идентификаторов сущностей (адрес токена, трейдера, баланса, статистики)

Все количества — целые числа в минимальных единицах (wei для ETH,
10**-18 для токена). Float в расчётах ЗАПРЕЩЁН.
"""

import re
from typing import Final


# =============================================================================
# ПАРАМЕТРЫ BONDING CURVE
# =============================================================================

# Десятичные знаки токена (как у ERC-20 по умолчанию)
TOKEN_DECIMALS: Final[int] = 18

# Полная эмиссия токена при запуске
TOTAL_SUPPLY: Final[int] = 106_500 * 10**TOKEN_DECIMALS

# Часть эмиссии, торгуемая через bonding curve
CURVE_SUPPLY: Final[int] = 80_000 * 10**TOKEN_DECIMALS

# Идентификатор единственной записи ProtocolStats
PROTOCOL_STATS_ID: Final[str] = "singleton"

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")


# =============================================================================
# ИДЕНТИФИКАТОРЫ
# =============================================================================


def normalize_address(value: str) -> str:
    """
    Нормализация адреса/хэша к нижнему регистру.

    Args:
        value: Hex-строка с префиксом 0x

    Returns:
        Та же строка в нижнем регистре

    Raises:
        ValueError: Если строка не является hex с префиксом 0x
    """
    if not isinstance(value, str) or not _HEX_RE.match(value):
        raise ValueError(f"Expected 0x-prefixed hex string, got {value!r}")
    return value.lower()


def token_balance_id(token: str, trader: str) -> str:
    """Композитный id TokenBalance: '<token>-<trader>'."""
    return f"{normalize_address(token)}-{normalize_address(trader)}"


def trade_id(transaction_hash: str, log_index: int | None = None) -> str:
    """
    Id сделки.

    Первая сделка в транзакции получает id = хэш транзакции.
    Последующие сделки в той же транзакции различаются по log_index.
    """
    tx = normalize_address(transaction_hash)
    if log_index is None:
        return tx
    return f"{tx}-{log_index}"
