"""
Тесты для целочисленной арифметики bonding curve

Проверяет:
1. Безопасное деление (нулевой делитель → fallback)
2. Усечённое деление без float
3. Направленные дельты резервов
4. Валидацию входов
"""

import pytest

from src.core.math import (
    ReserveDelta,
    curve_invariant_holds,
    reserve_delta,
    safe_floor_div,
    unit_price,
    validate_non_negative_int,
)


class TestSafeFloorDiv:
    def test_regular_division_truncates(self) -> None:
        assert safe_floor_div(10, 3) == 3
        assert safe_floor_div(10, 1000) == 0

    def test_zero_denominator_returns_fallback(self) -> None:
        assert safe_floor_div(5, 0) == 0
        assert safe_floor_div(5, 0, fallback=42) == 42

    def test_large_values_stay_exact(self) -> None:
        eth = 123456789 * 10**18 + 1
        assert safe_floor_div(eth, 10**18) == 123456789

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            safe_floor_div(-1, 2)


class TestUnitPrice:
    def test_zero_token_amount_is_zero(self) -> None:
        assert unit_price(10**18, 0) == 0

    def test_price_result_is_int(self) -> None:
        price = unit_price(10, 4)
        assert price == 2
        assert isinstance(price, int)


class TestReserveDelta:
    def test_purchase(self) -> None:
        delta = reserve_delta(10, 1000, is_purchase=True)
        assert delta == ReserveDelta(eth_in_curve=10, tokens_in_curve=-1000, tokens_in_circulation=1000)
        assert delta.conserves_curve_supply

    def test_sale_is_symmetric_inverse(self) -> None:
        buy = reserve_delta(5, 400, is_purchase=True)
        sell = reserve_delta(5, 400, is_purchase=False)
        assert sell.eth_in_curve == -buy.eth_in_curve
        assert sell.tokens_in_curve == -buy.tokens_in_curve
        assert sell.tokens_in_circulation == -buy.tokens_in_circulation
        assert sell.conserves_curve_supply

    def test_rejects_float(self) -> None:
        with pytest.raises(ValueError):
            reserve_delta(1.5, 1, is_purchase=True)  # type: ignore[arg-type]


class TestValidation:
    def test_bool_is_not_int(self) -> None:
        with pytest.raises(ValueError):
            validate_non_negative_int(True)

    def test_accepts_zero(self) -> None:
        assert validate_non_negative_int(0) == 0

    def test_curve_invariant(self) -> None:
        assert curve_invariant_holds(79_000, 1_000, 80_000)
        assert not curve_invariant_holds(79_000, 999, 80_000)
