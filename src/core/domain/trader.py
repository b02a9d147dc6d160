"""
Trader — Модель участника торгов

Не имеет изменяемых атрибутов, кроме идентичности.
Создаётся лениво при первой сделке (load-or-create).
"""

from typing import ClassVar

from pydantic import BaseModel, Field, field_validator

from .units import normalize_address


class Trader(BaseModel):
    """Трейдер (id — адрес аккаунта)"""

    entity_name: ClassVar[str] = "Trader"

    id: str = Field(..., description="Адрес аккаунта трейдера")

    model_config = {"frozen": True}

    @field_validator("id")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return normalize_address(v)
