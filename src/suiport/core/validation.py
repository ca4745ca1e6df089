"""Input and price validation.

This module provides local checks that run before any network call:
- Sui wallet address format (0x-prefixed hex, up to 32 bytes)
- Coin type format (package::module::name)
- Usable price values (finite and strictly positive)
"""

import math
import re

from suiport.core.exceptions import InvalidInputError

# 0x followed by 1-64 hex characters; short forms such as 0x2 are valid
SUI_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{1,64}$")

# Package id, module and struct name; generic parameters are allowed after the name
COIN_TYPE_PATTERN = re.compile(r"^0x[0-9a-fA-F]{1,64}::\w+::\w+(<.+>)?$")


def is_valid_sui_address(address: str | None) -> bool:
    """Validate Sui address format.

    Args:
        address: Potential Sui wallet address.

    Returns:
        True if address has valid format, False otherwise.

    Example:
        >>> is_valid_sui_address("0x2")
        True
        >>> is_valid_sui_address("9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM")
        False
    """
    if address is None or not isinstance(address, str):
        return False
    return bool(SUI_ADDRESS_PATTERN.match(address.strip()))


def validate_sui_address(address: str | None) -> str:
    """Return the normalized address or raise InvalidInputError."""
    if address is None or not address.strip():
        raise InvalidInputError("Wallet address is required", field="address")
    if not is_valid_sui_address(address):
        raise InvalidInputError(f"Invalid Sui address: {address}", field="address")
    return address.strip().lower()


def validate_coin_type(coin_type: str | None) -> str:
    """Return the stripped coin type or raise InvalidInputError."""
    if coin_type is None or not coin_type.strip():
        raise InvalidInputError("Coin type is required", field="coin_type")
    coin_type = coin_type.strip()
    if not COIN_TYPE_PATTERN.match(coin_type):
        raise InvalidInputError(f"Invalid coin type: {coin_type}", field="coin_type")
    return coin_type


def is_usable_price(value: object) -> bool:
    """Check that a price is a finite number strictly greater than zero.

    Booleans are rejected even though they are ints.
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value) and value > 0
