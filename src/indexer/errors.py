"""
Ошибки индексатора.

Integrity-ошибки фатальны: лента противоречит ранее обработанным событиям,
обработка всей ленты прекращается без частичной записи.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Класс нарушения целостности"""

    MISSING_AGGREGATE_ROOT = "MissingAggregateRoot"  # TokenTrade до TokenLaunched
    DUPLICATE_AGGREGATE_ROOT = "DuplicateAggregateRoot"  # повторный TokenLaunched
    CURVE_INVARIANT_VIOLATION = "CurveInvariantViolation"  # резервы кривой разошлись


class IndexerIntegrityError(Exception):
    """
    Критическое нарушение целостности derived state.

    При возникновении:
    1. Staged записи события отбрасываются (abort_event)
    2. Ошибка логируется на уровне CRITICAL
    3. Обработка ленты прекращается; возобновление — из последнего checkpoint
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        address: Optional[str] = None,
        block_number: Optional[int] = None,
        transaction_hash: Optional[str] = None,
    ):
        super().__init__(f"[{kind.value}] {message}")
        self.kind = kind
        self.address = address
        self.block_number = block_number
        self.transaction_hash = transaction_hash

    def context(self) -> dict:
        """Поля для structured logging."""
        return {
            "error_kind": self.kind.value,
            "address": self.address,
            "block_number": self.block_number,
            "transaction_hash": self.transaction_hash,
        }
