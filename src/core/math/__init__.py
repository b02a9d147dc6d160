"""
Core math modules для crate-indexer

Целочисленные примитивы bonding curve с гарантией детерминизма.
"""

from src.core.math.curve_math import (
    # Safe division
    safe_floor_div,
    unit_price,
    # Reserves
    ReserveDelta,
    reserve_delta,
    curve_invariant_holds,
    # Validation
    validate_non_negative_int,
)

__all__ = [
    "safe_floor_div",
    "unit_price",
    "ReserveDelta",
    "reserve_delta",
    "curve_invariant_holds",
    "validate_non_negative_int",
]
