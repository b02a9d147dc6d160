"""
JSON Schema Contract Validators

Модуль для валидации сырых логов ленты согласно формальным JSON Schema контрактам
и их декодирования в типизированные события.
Использует библиотеку jsonschema для проверки соответствия данных схемам.

Схемы:
- token_launched.json (событие фабрики)
- token_trade.json (событие токена)
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
from jsonschema import Draft202012Validator

from src.core.domain.events import BlockMeta, ChainEvent, EventKind, TokenLaunched, TokenTrade


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы лежат в каталоге schema/ рядом с этим модулем (package data).
    """

    def __init__(self):
        self._schema_dir = Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'token_trade')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            json.JSONDecodeError: Если файл не является валидным JSON
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


class TokenLaunchedValidator(ContractValidator):
    """Валидатор для token_launched контракта."""

    def __init__(self):
        super().__init__("token_launched")


class TokenTradeValidator(ContractValidator):
    """Валидатор для token_trade контракта."""

    def __init__(self):
        super().__init__("token_trade")


_VALIDATORS: Dict[str, ContractValidator] = {}


def _validator_for(kind: EventKind) -> ContractValidator:
    if kind.value not in _VALIDATORS:
        if kind == EventKind.TOKEN_LAUNCHED:
            _VALIDATORS[kind.value] = TokenLaunchedValidator()
        else:
            _VALIDATORS[kind.value] = TokenTradeValidator()
    return _VALIDATORS[kind.value]


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_token_launched(data: Dict[str, Any]) -> None:
    """
    Валидация сырого TokenLaunched лога.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    _validator_for(EventKind.TOKEN_LAUNCHED).validate(data)


def validate_token_trade(data: Dict[str, Any]) -> None:
    """
    Валидация сырого TokenTrade лога.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    _validator_for(EventKind.TOKEN_TRADE).validate(data)


def parse_uint(value: Any) -> int:
    """Беззнаковое целое из int, десятичной или 0x-hex строки."""
    if isinstance(value, int):
        return value
    if value.startswith("0x"):
        return int(value, 16)
    return int(value)


def decode_event(payload: Dict[str, Any]) -> Optional[ChainEvent]:
    """
    Валидация и декодирование сырого лога в типизированное событие.

    Args:
        payload: Сырой лог ленты ({"event": ..., "params": {...}, ...})

    Returns:
        TokenLaunched / TokenTrade, либо None для неизвестного типа события

    Raises:
        ValidationError: Если лог известного типа не соответствует схеме
    """
    try:
        kind = EventKind(payload.get("event"))
    except ValueError:
        return None

    _validator_for(kind).validate(payload)

    params = payload["params"]
    block = BlockMeta(
        block_number=parse_uint(payload["blockNumber"]),
        block_timestamp=parse_uint(payload["blockTimestamp"]),
        transaction_hash=payload["transactionHash"],
        log_index=parse_uint(payload.get("logIndex", 0)),
    )

    if kind == EventKind.TOKEN_LAUNCHED:
        return TokenLaunched(
            token_address=params["tokenAddress"],
            name=params["name"],
            symbol=params["symbol"],
            block=block,
            source=payload.get("address"),
        )

    return TokenTrade(
        source=payload["address"],
        trader=params["trader"],
        eth_amount=parse_uint(params["ethAmount"]),
        token_amount=parse_uint(params["tokenAmount"]),
        is_purchase=params["isPurchase"],
        block=block,
    )
