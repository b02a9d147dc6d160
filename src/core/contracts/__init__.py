"""
Contract Validation Module

Модуль для валидации и декодирования сырых логов ленты событий.
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    TokenLaunchedValidator,
    TokenTradeValidator,
    decode_event,
    parse_uint,
    validate_token_launched,
    validate_token_trade,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "TokenLaunchedValidator",
    "TokenTradeValidator",
    # Functions
    "validate_token_launched",
    "validate_token_trade",
    "decode_event",
    "parse_uint",
]
