"""Exceptions raised while building trade quotes."""

from typing import Optional


class SetQuoteError(Exception):
    """Base class for all quoting errors."""


class InputError(SetQuoteError, ValueError):
    """Raised for malformed caller input or an unsupported chain id."""


class CapacityError(SetQuoteError):
    """Raised when a trade cannot be funded by the Set's positions."""


class AmountExceedsCapacityError(CapacityError):
    """Raised when the requested amount exceeds the component notional held by the Set."""

    def __init__(self, amount: int, max_amount: int):
        self.amount = amount
        self.max_amount = max_amount
        super().__init__(
            f"Amount is greater than quantity of component in Set "
            f"(requested {amount}, available {max_amount})"
        )


class DustThresholdError(SetQuoteError):
    """Raised when a quote would leave a non-zero position below the dust threshold."""

    def __init__(self, message: str, units: int, threshold: int):
        self.units = units
        self.threshold = threshold
        super().__init__(f"{message} ({units} < {threshold})")


class UpstreamError(SetQuoteError):
    """Raised when an external service call fails."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class UpstreamQuoteError(UpstreamError):
    """Raised when the 0x API fails or returns an unusable quote."""


class GasOracleError(UpstreamError):
    """Raised when a gas station cannot be reached or parsed."""


class ChainReadError(UpstreamError):
    """Raised when a JSON-RPC read fails."""


class DegradedPriceError(UpstreamError):
    """Raised by the price request and absorbed by the price service.

    Never escapes ``CoinGeckoDataService.fetch_coin_prices``; it is turned
    into zero prices there.
    """
