"""
Trade — Модель сделки на bonding curve

Immutable Pydantic модель, представляющая одну покупку или продажу токена.
Append-only: после создания не изменяется и не удаляется.
"""

from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator

from .units import normalize_address


# =============================================================================
# ENUMS
# =============================================================================


class TradeSide(str, Enum):
    """Направление сделки относительно кривой"""

    PURCHASE = "purchase"  # ETH → кривая, токены → трейдер
    SALE = "sale"  # токены → кривая, ETH → трейдер


# =============================================================================
# TRADE MODEL
# =============================================================================


class Trade(BaseModel):
    """
    Модель сделки.

    id — хэш транзакции (см. units.trade_id для нескольких сделок в одной транзакции).
    token и trader — ссылки на id соответствующих записей.

    Immutable модель (frozen=True).
    """

    entity_name: ClassVar[str] = "Trade"

    # Идентификация
    id: str = Field(..., min_length=1, description="Идентификатор сделки")
    token: str = Field(..., min_length=1, description="Id токена")
    trader: str = Field(..., min_length=1, description="Id трейдера")
    is_purchase: bool = Field(..., description="True — покупка, False — продажа")

    # Блок
    block_number: int = Field(..., ge=0, description="Номер блока")
    block_timestamp: int = Field(..., ge=0, description="Время блока (unix, секунды)")
    transaction_hash: str = Field(..., min_length=1, description="Хэш транзакции")
    log_index: int = Field(0, ge=0, description="Индекс лога в блоке")

    # Объёмы
    eth_traded: int = Field(..., ge=0, description="ETH (wei)")
    token_traded: int = Field(..., ge=0, description="Токены (минимальные единицы)")
    price: int = Field(..., ge=0, description="Цена за единицу токена, целочисленное деление")

    model_config = {"frozen": True}  # Immutable

    @field_validator("token", "trader", "transaction_hash")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return normalize_address(v)

    @field_validator("price")
    @classmethod
    def validate_price_matches_amounts(cls, v: int, info) -> int:
        """Проверка, что цена получена усечённым делением eth / tokens"""
        if "eth_traded" in info.data and "token_traded" in info.data:
            tokens = info.data["token_traded"]
            expected = info.data["eth_traded"] // tokens if tokens else 0
            if v != expected:
                raise ValueError(f"price {v} does not match eth/tokens (expected {expected})")
        return v

    @property
    def side(self) -> TradeSide:
        return TradeSide.PURCHASE if self.is_purchase else TradeSide.SALE

    def signed_token_delta(self) -> int:
        """Изменение баланса трейдера в токенах (+ покупка, - продажа)."""
        return self.token_traded if self.is_purchase else -self.token_traded

    def signed_eth_delta(self) -> int:
        """Изменение ETH в кривой (+ покупка, - продажа)."""
        return self.eth_traded if self.is_purchase else -self.eth_traded
