"""
ProtocolStats — Глобальная статистика протокола

Singleton-запись, хранимая в том же EntityStore, что и остальные сущности
(id = PROTOCOL_STATS_ID). Создаётся при первой сделке, далее только растёт.
"""

from typing import ClassVar

from pydantic import BaseModel, Field

from .units import PROTOCOL_STATS_ID


class ProtocolStats(BaseModel):
    """
    Накопленная статистика.

    tvl — см. IndexerConfig.tvl_mode: снапшот ETH последнего торгуемого токена
    (совместимый режим) либо сумма ETH во всех кривых.
    """

    entity_name: ClassVar[str] = "ProtocolStats"

    id: str = Field(PROTOCOL_STATS_ID, description="Всегда 'singleton'")
    volume: int = Field(0, ge=0, description="Накопленный объём ETH (wei)")
    number_of_trades: int = Field(0, ge=0, description="Количество сделок")
    tvl: int = Field(0, description="Total value locked (wei)")

    model_config = {"frozen": True}

    @classmethod
    def initial(cls) -> "ProtocolStats":
        return cls(id=PROTOCOL_STATS_ID, volume=0, number_of_trades=0, tvl=0)
