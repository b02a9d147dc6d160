"""
TokenBalance — Баланс трейдера по конкретному токену

id — композит '<token>-<trader>' (см. units.token_balance_id).
Создаётся лениво при первой сделке пары, далее только изменяется.

ИНВАРИАНТ: сумма balance по всем записям токена == tokens_in_circulation токена.
"""

from typing import ClassVar

from pydantic import BaseModel, Field, field_validator, model_validator

from .units import normalize_address, token_balance_id


class TokenBalance(BaseModel):
    """Текущий баланс пары (token, trader)"""

    entity_name: ClassVar[str] = "TokenBalance"

    id: str = Field(..., min_length=1, description="Композитный id '<token>-<trader>'")
    token: str = Field(..., min_length=1, description="Id токена")
    trader: str = Field(..., min_length=1, description="Id трейдера")
    balance: int = Field(0, description="Баланс (может уйти в минус при некорректной ленте)")

    model_config = {"frozen": True}

    @field_validator("token", "trader")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return normalize_address(v)

    @model_validator(mode="after")
    def validate_composite_id(self) -> "TokenBalance":
        expected = token_balance_id(self.token, self.trader)
        if self.id != expected:
            raise ValueError(f"TokenBalance id {self.id!r} must equal {expected!r}")
        return self

    @classmethod
    def empty(cls, token: str, trader: str) -> "TokenBalance":
        """Нулевой баланс для новой пары."""
        return cls(
            id=token_balance_id(token, trader),
            token=token,
            trader=trader,
            balance=0,
        )

    def applied(self, delta: int) -> "TokenBalance":
        """Новый экземпляр с балансом, изменённым на delta."""
        return self.model_copy(update={"balance": self.balance + delta})
