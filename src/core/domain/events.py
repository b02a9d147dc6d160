"""
Events — Типизированные события из ленты блокчейна

Immutable Pydantic модели событий фабрики (TokenLaunched) и токена (TokenTrade).
Лента поставляет события в каноническом порядке:
(block_number, log_index) по возрастанию.
"""

from enum import Enum
from typing import ClassVar, Union

from pydantic import BaseModel, Field, field_validator

from .units import normalize_address


# =============================================================================
# ENUMS
# =============================================================================


class EventKind(str, Enum):
    """Тип события ленты"""

    TOKEN_LAUNCHED = "TokenLaunched"
    TOKEN_TRADE = "TokenTrade"


# =============================================================================
# BLOCK METADATA
# =============================================================================


class BlockMeta(BaseModel):
    """Метаданные блока/транзакции, общие для всех событий"""

    block_number: int = Field(..., ge=0, description="Номер блока")
    block_timestamp: int = Field(..., ge=0, description="Время блока (unix, секунды)")
    transaction_hash: str = Field(..., description="Хэш транзакции")
    log_index: int = Field(0, ge=0, description="Индекс лога в блоке")

    model_config = {"frozen": True}

    @field_validator("transaction_hash")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return normalize_address(v)

    def ordering_key(self) -> tuple[int, int]:
        """Ключ канонического порядка."""
        return (self.block_number, self.log_index)


# =============================================================================
# EVENTS
# =============================================================================


class TokenLaunched(BaseModel):
    """
    Запуск нового токена фабрикой.

    source — адрес фабрики (не используется обработчиком, сохраняется для аудита).
    """

    kind: ClassVar[EventKind] = EventKind.TOKEN_LAUNCHED

    token_address: str = Field(..., description="Адрес нового токена")
    name: str = Field(..., description="Название")
    symbol: str = Field(..., description="Тикер")
    block: BlockMeta
    source: str | None = Field(None, description="Адрес фабрики")

    model_config = {"frozen": True}

    @field_validator("token_address")
    @classmethod
    def validate_token_address(cls, v: str) -> str:
        return normalize_address(v)

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str | None) -> str | None:
        return normalize_address(v) if v is not None else None


class TokenTrade(BaseModel):
    """
    Сделка на кривой токена.

    source — адрес контракта токена, эмитировавшего событие.
    """

    kind: ClassVar[EventKind] = EventKind.TOKEN_TRADE

    source: str = Field(..., description="Адрес токена (источник события)")
    trader: str = Field(..., description="Адрес трейдера")
    eth_amount: int = Field(..., ge=0, description="ETH (wei)")
    token_amount: int = Field(..., ge=0, description="Токены (минимальные единицы)")
    is_purchase: bool = Field(..., description="True — покупка, False — продажа")
    block: BlockMeta

    model_config = {"frozen": True}

    @field_validator("source", "trader")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return normalize_address(v)


ChainEvent = Union[TokenLaunched, TokenTrade]
