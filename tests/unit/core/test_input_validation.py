"""Unit tests for address, coin type and price validation."""

import math

import pytest

from suiport.core.exceptions import InvalidInputError, ValidationError
from suiport.core.validation import (
    is_usable_price,
    is_valid_sui_address,
    validate_coin_type,
    validate_sui_address,
)

FULL_ADDRESS = "0x" + "a1" * 32


class TestSuiAddress:
    """Tests for Sui address validation."""

    @pytest.mark.parametrize("address", ["0x2", FULL_ADDRESS, "0xABCdef01", f"  {FULL_ADDRESS}  "])
    def test_valid_addresses(self, address):
        assert is_valid_sui_address(address)

    @pytest.mark.parametrize(
        "address",
        [
            None,
            "",
            "0x",
            "2",
            "0x" + "a" * 65,
            "0xZZ",
            "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
        ],
    )
    def test_invalid_addresses(self, address):
        assert not is_valid_sui_address(address)

    def test_validate_normalizes(self):
        """Validated addresses are stripped and lowercased."""
        assert validate_sui_address("  0xABC  ") == "0xabc"

    def test_validate_missing_address(self):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_sui_address("   ")
        assert exc_info.value.field == "address"
        assert "required" in str(exc_info.value)

    def test_validate_malformed_address(self):
        with pytest.raises(InvalidInputError, match="Invalid Sui address"):
            validate_sui_address("not-an-address")


class TestCoinType:
    """Tests for coin type validation."""

    @pytest.mark.parametrize(
        "coin_type",
        [
            "0x2::sui::SUI",
            "0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC",
            "0x5::lp::LP<0x2::sui::SUI, 0x3::usdc::USDC>",
        ],
    )
    def test_valid_coin_types(self, coin_type):
        assert validate_coin_type(coin_type) == coin_type

    @pytest.mark.parametrize("coin_type", ["sui", "0x2::sui", "::sui::SUI", "0x2:sui:SUI"])
    def test_invalid_coin_types(self, coin_type):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_coin_type(coin_type)
        assert exc_info.value.field == "coin_type"

    def test_missing_coin_type(self):
        with pytest.raises(InvalidInputError, match="required"):
            validate_coin_type(None)

    def test_invalid_input_is_validation_error(self):
        with pytest.raises(ValidationError):
            validate_coin_type("")


class TestUsablePrice:
    """Tests for is_usable_price()."""

    @pytest.mark.parametrize("value", [1.25, 1e-12, 3])
    def test_usable(self, value):
        assert is_usable_price(value)

    @pytest.mark.parametrize(
        "value", [None, 0, 0.0, -1.0, math.nan, math.inf, -math.inf, "1.0", True]
    )
    def test_unusable(self, value):
        assert not is_usable_price(value)
