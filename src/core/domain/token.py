"""
CrateToken — Модель токена на bonding curve

Immutable Pydantic модель. Создаётся ровно один раз при TokenLaunched,
изменяется только сделками по этому токену (через model_copy), не удаляется.

ИНВАРИАНТ:
    amount_of_tokens_in_curve + tokens_in_circulation == total_curve_supply
"""

from typing import ClassVar

from pydantic import BaseModel, Field, field_validator

from src.core.math.curve_math import curve_invariant_holds

from .units import CURVE_SUPPLY, TOTAL_SUPPLY, normalize_address


class CrateToken(BaseModel):
    """
    Токен, запущенный через фабрику.

    id — адрес контракта токена.
    """

    entity_name: ClassVar[str] = "CrateToken"

    # Идентификация
    id: str = Field(..., description="Адрес контракта токена")
    name: str = Field(..., description="Название токена")
    symbol: str = Field(..., description="Тикер токена")

    # Запуск
    block_number: int = Field(..., ge=0, description="Блок запуска")
    block_timestamp: int = Field(..., ge=0, description="Время блока запуска (unix, секунды)")
    transaction_hash: str = Field(..., description="Хэш транзакции запуска")

    # Фиксированная эмиссия
    total_supply: int = Field(TOTAL_SUPPLY, ge=0, description="Полная эмиссия")
    total_curve_supply: int = Field(CURVE_SUPPLY, ge=0, description="Эмиссия на кривой")

    # Резервы кривой
    amount_of_tokens_in_curve: int = Field(
        CURVE_SUPPLY, description="Токены, удерживаемые кривой"
    )
    amount_of_eth_in_curve: int = Field(0, description="ETH (wei), удерживаемый кривой")
    tokens_in_circulation: int = Field(0, description="Токены на руках у трейдеров")

    model_config = {"frozen": True}

    @field_validator("id", "transaction_hash")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return normalize_address(v)

    def curve_balanced(self) -> bool:
        """Проверка инварианта кривой."""
        return curve_invariant_holds(
            self.amount_of_tokens_in_curve, self.tokens_in_circulation, self.total_curve_supply
        )
