"""
Конфигурация индексатора.

Frozen dataclass с дефолтами; from_env() читает переопределения из окружения:
- CRATE_TVL_MODE: last_token | aggregate
- CRATE_REJECT_DUPLICATE_LAUNCH: 1 | 0
- CRATE_CHECK_INVARIANTS: 1 | 0
- CRATE_LOG_LEVEL: DEBUG | INFO | WARNING | ...
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


class TvlMode(str, Enum):
    """
    Способ расчёта ProtocolStats.tvl.

    LAST_TOKEN: tvl = amount_of_eth_in_curve последнего торгуемого токена
        (совместимость с исходной моделью данных).
    AGGREGATE: tvl = сумма amount_of_eth_in_curve по всем токенам.
    """

    LAST_TOKEN = "last_token"
    AGGREGATE = "aggregate"


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class IndexerConfig:
    """Параметры обработки ленты."""

    tvl_mode: TvlMode = TvlMode.LAST_TOKEN
    reject_duplicate_launch: bool = True
    check_invariants: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "IndexerConfig":
        """
        Конфигурация из переменных окружения.

        Raises:
            ValueError: Если CRATE_TVL_MODE не является допустимым режимом
        """
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            tvl_mode=TvlMode(env.get("CRATE_TVL_MODE", defaults.tvl_mode.value)),
            reject_duplicate_launch=_env_flag(
                env, "CRATE_REJECT_DUPLICATE_LAUNCH", defaults.reject_duplicate_launch
            ),
            check_invariants=_env_flag(env, "CRATE_CHECK_INVARIANTS", defaults.check_invariants),
            log_level=env.get("CRATE_LOG_LEVEL", defaults.log_level).upper(),
        )
