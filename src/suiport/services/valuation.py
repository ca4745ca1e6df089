"""USD valuation of raw on-chain balances."""

import structlog

from suiport.constants.pricing import DEFAULT_DECIMALS
from suiport.core.validation import is_usable_price
from suiport.data.models.token import TokenMetadata
from suiport.data.models.wallet import ValuedHolding

log = structlog.get_logger(__name__)


def parse_balance(balance_raw: str | int) -> int:
    """Parse a raw balance as an arbitrary-precision integer."""
    if isinstance(balance_raw, bool):
        raise ValueError("balance must be an integer or integer string")
    if isinstance(balance_raw, int):
        return balance_raw
    return int(str(balance_raw).strip())


class ValuationEngine:
    """Turns (raw balance, decimals, price) into a USD value.

    The balance stays an integer until the final multiplication, so
    balances beyond 2**53 lose no precision before scaling. Valuation never
    raises: unusable inputs value to 0.
    """

    def value_usd(
        self,
        balance_raw: str | int,
        decimals: int | None,
        price: float | None,
    ) -> float:
        """USD value of ``balance_raw`` smallest units at ``price``.

        Args:
            balance_raw: Integer balance in smallest units, as int or string.
            decimals: Decimal places of the coin; None means 9.
            price: USD price per whole coin.

        Returns:
            ``balance / 10**decimals * price``, or 0.0 when the price is
            missing, non-finite or not positive, or the balance is unparseable.
        """
        if not is_usable_price(price):
            return 0.0
        if decimals is None:
            decimals = DEFAULT_DECIMALS

        try:
            balance = parse_balance(balance_raw)
            if decimals < 0:
                raise ValueError(f"negative decimals: {decimals}")
            return float(balance) * price / 10**decimals
        except (ValueError, TypeError, OverflowError) as e:
            log.warning(
                "valuation_failed",
                balance=str(balance_raw),
                decimals=decimals,
                price=price,
                error=str(e),
            )
            return 0.0

    def value_holding(
        self,
        coin_type: str,
        balance_raw: str | int,
        price: float | None,
        metadata: TokenMetadata | None = None,
    ) -> ValuedHolding:
        """Build the immutable valued holding for one coin type."""
        decimals = metadata.decimals if metadata is not None else DEFAULT_DECIMALS
        return ValuedHolding(
            coin_type=coin_type,
            balance=str(balance_raw),
            decimals=decimals,
            price_usd=price if is_usable_price(price) else 0.0,
            value_usd=self.value_usd(balance_raw, decimals, price),
            metadata=metadata,
        )
