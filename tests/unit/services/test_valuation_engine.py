"""Unit tests for ValuationEngine."""

import pytest

from suiport.data.models.token import TokenMetadata
from suiport.services.valuation import ValuationEngine, parse_balance


@pytest.fixture
def engine() -> ValuationEngine:
    return ValuationEngine()


class TestValueUsd:
    def test_scales_by_decimals(self, engine):
        # 1,000,000,000 raw units at 9 decimals is 1 coin
        assert engine.value_usd("1000000000", 9, 1.25) == pytest.approx(1.25)

    def test_six_decimals(self, engine):
        assert engine.value_usd("2500000", 6, 1.0) == pytest.approx(2.5)

    def test_none_decimals_defaults_to_nine(self, engine):
        assert engine.value_usd(3_000_000_000, None, 2.0) == pytest.approx(6.0)

    def test_zero_decimals(self, engine):
        assert engine.value_usd("7", 0, 0.5) == pytest.approx(3.5)

    def test_balance_beyond_float_precision(self, engine):
        balance = str(2**64)

        assert engine.value_usd(balance, 18, 1.0) == pytest.approx(2**64 / 10**18)

    @pytest.mark.parametrize("price", [None, 0, 0.0, -1.0, float("nan"), float("inf"), True])
    def test_unusable_price_values_to_zero(self, engine, price):
        assert engine.value_usd("1000000000", 9, price) == 0.0

    @pytest.mark.parametrize("balance", ["", "abc", "1.5", None])
    def test_unparseable_balance_values_to_zero(self, engine, balance):
        assert engine.value_usd(balance, 9, 1.0) == 0.0

    def test_negative_decimals_values_to_zero(self, engine):
        assert engine.value_usd("1000", -1, 1.0) == 0.0

    def test_zero_balance(self, engine):
        assert engine.value_usd("0", 9, 5.0) == 0.0


class TestValueHolding:
    def test_uses_metadata_decimals(self, engine):
        holding = engine.value_holding(
            "0x1::usdc::USDC", "5000000", 1.0, TokenMetadata(decimals=6, symbol="USDC")
        )

        assert holding.decimals == 6
        assert holding.value_usd == pytest.approx(5.0)
        assert holding.price_usd == 1.0
        assert holding.metadata is not None
        assert holding.metadata.symbol == "USDC"

    def test_without_metadata_or_price(self, engine):
        holding = engine.value_holding("0x1::a::A", 123, None)

        assert holding.decimals == 9
        assert holding.balance == "123"
        assert holding.price_usd == 0.0
        assert holding.value_usd == 0.0

    def test_holding_is_immutable(self, engine):
        holding = engine.value_holding("0x1::a::A", 1, 1.0)

        with pytest.raises(ValueError):
            holding.value_usd = 10.0  # type: ignore[misc]


class TestParseBalance:
    def test_strips_whitespace(self):
        assert parse_balance(" 42 ") == 42

    def test_int_passthrough(self):
        assert parse_balance(2**70) == 2**70

    def test_rejects_bool(self):
        with pytest.raises(ValueError):
            parse_balance(True)  # type: ignore[arg-type]
