"""
Тесты для доменных моделей: CrateToken, Trader, Trade, TokenBalance, ProtocolStats, события

Проверяет:
1. Создание и валидацию моделей Pydantic
2. Нормализацию адресов и композитные id
3. Immutability (frozen=True)
4. Согласованность цены сделки с объёмами
5. Граничные случаи и невалидные данные
"""

import pytest
from pydantic import ValidationError

from src.core.domain import (
    CURVE_SUPPLY,
    PROTOCOL_STATS_ID,
    TOTAL_SUPPLY,
    BlockMeta,
    CrateToken,
    EventKind,
    ProtocolStats,
    TokenBalance,
    TokenLaunched,
    TokenTrade,
    Trade,
    Trader,
    TradeSide,
    normalize_address,
    token_balance_id,
    trade_id,
)
from src.core.math import curve_invariant_holds

TOKEN = "0x" + "a" * 40
TRADER = "0x" + "b" * 40
TX = "0x" + "1" * 64


# =============================================================================
# UNITS TESTS
# =============================================================================


class TestUnits:
    """Тесты констант и идентификаторов"""

    def test_supply_constants(self) -> None:
        assert TOTAL_SUPPLY == 106_500 * 10**18
        assert CURVE_SUPPLY == 80_000 * 10**18
        assert CURVE_SUPPLY < TOTAL_SUPPLY

    def test_normalize_address_lowercases(self) -> None:
        assert normalize_address("0xABCdef") == "0xabcdef"

    @pytest.mark.parametrize("bad", ["abcdef", "0x", "0xZZ", "", "0x12 34"])
    def test_normalize_address_rejects_non_hex(self, bad: str) -> None:
        with pytest.raises(ValueError):
            normalize_address(bad)

    def test_token_balance_id_is_composite(self) -> None:
        assert token_balance_id("0xA", "0xB") == "0xa-0xb"

    def test_trade_id_with_and_without_log_index(self) -> None:
        assert trade_id("0xFF") == "0xff"
        assert trade_id("0xFF", 3) == "0xff-3"


# =============================================================================
# CRATE TOKEN TESTS
# =============================================================================


class TestCrateToken:
    """Тесты для модели CrateToken"""

    @pytest.fixture
    def token(self) -> CrateToken:
        return CrateToken(
            id=TOKEN.upper().replace("0X", "0x"),
            name="Song",
            symbol="SONG",
            block_number=100,
            block_timestamp=1700000000,
            transaction_hash=TX,
        )

    def test_defaults_match_launch_state(self, token: CrateToken) -> None:
        assert token.id == TOKEN
        assert token.total_supply == TOTAL_SUPPLY
        assert token.total_curve_supply == CURVE_SUPPLY
        assert token.amount_of_tokens_in_curve == CURVE_SUPPLY
        assert token.amount_of_eth_in_curve == 0
        assert token.tokens_in_circulation == 0
        assert token.curve_balanced()

    def test_frozen(self, token: CrateToken) -> None:
        with pytest.raises(ValidationError):
            token.amount_of_eth_in_curve = 5  # type: ignore[misc]

    def test_model_copy_produces_new_instance(self, token: CrateToken) -> None:
        moved = token.model_copy(
            update={"amount_of_tokens_in_curve": CURVE_SUPPLY - 10, "tokens_in_circulation": 10}
        )
        assert moved is not token
        assert moved.curve_balanced()
        assert token.tokens_in_circulation == 0

    def test_unbalanced_curve_detected(self, token: CrateToken) -> None:
        broken = token.model_copy(update={"tokens_in_circulation": 1})
        assert not broken.curve_balanced()

    def test_curve_balanced_uses_invariant_helper(self, token: CrateToken) -> None:
        for record in (token, token.model_copy(update={"tokens_in_circulation": 1})):
            assert record.curve_balanced() == curve_invariant_holds(
                record.amount_of_tokens_in_curve,
                record.tokens_in_circulation,
                record.total_curve_supply,
            )

    def test_invalid_address_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CrateToken(
                id="not-an-address",
                name="x",
                symbol="X",
                block_number=1,
                block_timestamp=1,
                transaction_hash=TX,
            )


# =============================================================================
# TRADER / BALANCE / STATS TESTS
# =============================================================================


class TestTrader:
    def test_trader_normalized(self) -> None:
        assert Trader(id="0xBEEF").id == "0xbeef"


class TestTokenBalance:
    """Тесты для модели TokenBalance"""

    def test_empty_balance(self) -> None:
        balance = TokenBalance.empty(TOKEN, TRADER)
        assert balance.id == f"{TOKEN}-{TRADER}"
        assert balance.balance == 0

    def test_applied_returns_new_record(self) -> None:
        balance = TokenBalance.empty(TOKEN, TRADER)
        bought = balance.applied(1000)
        sold = bought.applied(-400)
        assert balance.balance == 0
        assert bought.balance == 1000
        assert sold.balance == 600

    def test_mismatched_composite_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TokenBalance(id="0x1-0x2", token=TOKEN, trader=TRADER, balance=0)


class TestProtocolStats:
    def test_initial(self) -> None:
        stats = ProtocolStats.initial()
        assert stats.id == PROTOCOL_STATS_ID == "singleton"
        assert (stats.volume, stats.number_of_trades, stats.tvl) == (0, 0, 0)

    def test_negative_volume_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ProtocolStats(volume=-1)


# =============================================================================
# TRADE TESTS
# =============================================================================


class TestTrade:
    """Тесты для модели Trade"""

    def _trade(self, **overrides) -> Trade:
        data = dict(
            id=TX,
            token=TOKEN,
            trader=TRADER,
            is_purchase=True,
            block_number=101,
            block_timestamp=1700000012,
            transaction_hash=TX,
            eth_traded=10,
            token_traded=1000,
            price=0,
        )
        data.update(overrides)
        return Trade(**data)

    def test_purchase_side_and_deltas(self) -> None:
        trade = self._trade()
        assert trade.side == TradeSide.PURCHASE
        assert trade.signed_token_delta() == 1000
        assert trade.signed_eth_delta() == 10

    def test_sale_side_and_deltas(self) -> None:
        trade = self._trade(is_purchase=False, eth_traded=5, token_traded=400, price=0)
        assert trade.side == TradeSide.SALE
        assert trade.signed_token_delta() == -400
        assert trade.signed_eth_delta() == -5

    def test_price_must_match_truncating_division(self) -> None:
        trade = self._trade(eth_traded=10**18, token_traded=3, price=10**18 // 3)
        assert trade.price == 333333333333333333
        with pytest.raises(ValidationError):
            self._trade(eth_traded=10**18, token_traded=3, price=10**18 // 3 + 1)

    def test_zero_token_amount_price_is_zero(self) -> None:
        trade = self._trade(eth_traded=7, token_traded=0, price=0)
        assert trade.price == 0

    def test_negative_amounts_rejected(self) -> None:
        with pytest.raises(ValidationError):
            self._trade(eth_traded=-1)

    def test_frozen(self) -> None:
        trade = self._trade()
        with pytest.raises(ValidationError):
            trade.price = 1  # type: ignore[misc]


# =============================================================================
# EVENT TESTS
# =============================================================================


class TestEvents:
    """Тесты для событий ленты"""

    def test_block_meta_ordering_key(self) -> None:
        a = BlockMeta(block_number=5, block_timestamp=1, transaction_hash=TX, log_index=2)
        b = BlockMeta(block_number=5, block_timestamp=1, transaction_hash=TX, log_index=7)
        c = BlockMeta(block_number=6, block_timestamp=2, transaction_hash=TX, log_index=0)
        assert sorted([c, b, a], key=BlockMeta.ordering_key) == [a, b, c]

    def test_event_kinds(self) -> None:
        block = BlockMeta(block_number=1, block_timestamp=1, transaction_hash=TX)
        launch = TokenLaunched(token_address=TOKEN, name="n", symbol="S", block=block)
        trade = TokenTrade(
            source=TOKEN,
            trader=TRADER,
            eth_amount=1,
            token_amount=1,
            is_purchase=True,
            block=block,
        )
        assert launch.kind == EventKind.TOKEN_LAUNCHED
        assert trade.kind == EventKind.TOKEN_TRADE

    def test_trade_event_rejects_negative_amount(self) -> None:
        block = BlockMeta(block_number=1, block_timestamp=1, transaction_hash=TX)
        with pytest.raises(ValidationError):
            TokenTrade(
                source=TOKEN,
                trader=TRADER,
                eth_amount=-1,
                token_amount=1,
                is_purchase=True,
                block=block,
            )
