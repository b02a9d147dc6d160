"""
Curve Math — Целочисленная арифметика bonding curve

Модуль обеспечивает детерминированные операции над резервами кривой:
- Безопасное целочисленное деление (цена за токен) с защитой от деления на ноль
- Направленные изменения резервов для покупки и продажи
- Проверки инварианта кривой и неотрицательности

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль никогда не происходит (возвращается fallback)
2. Только int: float никогда не участвует в расчётах
3. tokens_in_curve + circulation == curve_supply после любого применённого дельта
"""

from dataclasses import dataclass


# =============================================================================
# БЕЗОПАСНОЕ ДЕЛЕНИЕ
# =============================================================================


def safe_floor_div(numerator: int, denominator: int, fallback: int = 0) -> int:
    """
    Усечённое целочисленное деление с защитой от нуля.

    Args:
        numerator: Делимое (>= 0)
        denominator: Делитель (>= 0)
        fallback: Результат при denominator == 0

    Returns:
        numerator // denominator, либо fallback

    Raises:
        ValueError: Если аргументы отрицательные

    Examples:
        >>> safe_floor_div(10, 1000)
        0
        >>> safe_floor_div(10**18, 10**3)
        1000000000000000
        >>> safe_floor_div(5, 0)
        0
    """
    validate_non_negative_int(numerator, "numerator")
    validate_non_negative_int(denominator, "denominator")
    if denominator == 0:
        return fallback
    return numerator // denominator


def unit_price(eth_amount: int, token_amount: int) -> int:
    """
    Цена за единицу токена в wei.

    Политика округления: усечённое деление; при token_amount == 0 цена = 0.
    """
    return safe_floor_div(eth_amount, token_amount, fallback=0)


# =============================================================================
# РЕЗЕРВЫ КРИВОЙ
# =============================================================================


@dataclass(frozen=True)
class ReserveDelta:
    """Изменение резервов кривой от одной сделки."""

    eth_in_curve: int
    tokens_in_curve: int
    tokens_in_circulation: int

    @property
    def conserves_curve_supply(self) -> bool:
        """Токены только перемещаются между кривой и обращением."""
        return self.tokens_in_curve + self.tokens_in_circulation == 0


def reserve_delta(eth_amount: int, token_amount: int, is_purchase: bool) -> ReserveDelta:
    """
    Направленное изменение резервов.

    Покупка: ETH в кривую, токены из кривой в обращение.
    Продажа: симметрично обратное.

    Args:
        eth_amount: ETH (wei), >= 0
        token_amount: Токены, >= 0
        is_purchase: Направление сделки

    Returns:
        ReserveDelta со знаковыми изменениями
    """
    validate_non_negative_int(eth_amount, "eth_amount")
    validate_non_negative_int(token_amount, "token_amount")

    sign = 1 if is_purchase else -1
    return ReserveDelta(
        eth_in_curve=sign * eth_amount,
        tokens_in_curve=-sign * token_amount,
        tokens_in_circulation=sign * token_amount,
    )


def curve_invariant_holds(
    tokens_in_curve: int, tokens_in_circulation: int, curve_supply: int
) -> bool:
    """tokens_in_curve + tokens_in_circulation == curve_supply"""
    return tokens_in_curve + tokens_in_circulation == curve_supply


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_non_negative_int(value: int, name: str = "value") -> int:
    """
    Проверка, что значение — неотрицательный int (bool не допускается).

    Raises:
        ValueError: Если тип не int или значение < 0
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value
