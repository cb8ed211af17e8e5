"""setquote - trade quotes for Set Protocol V2 SetToken rebalances."""

from setquote.chain import JsonRpcClient, SetTokenReader
from setquote.errors import (
    AmountExceedsCapacityError,
    CapacityError,
    ChainReadError,
    DegradedPriceError,
    DustThresholdError,
    GasOracleError,
    InputError,
    SetQuoteError,
    UpstreamError,
    UpstreamQuoteError,
)
from setquote.quoting import (
    CoinGeckoDataService,
    GasOracleService,
    QuoteRequest,
    SwapQuote,
    SwapQuoteRequest,
    TradeQuote,
    TradeQuoteAPI,
    ZeroExTradeQuoter,
)

__version__ = "0.1.0"

__all__ = [
    "JsonRpcClient",
    "SetTokenReader",
    "TradeQuoteAPI",
    "ZeroExTradeQuoter",
    "CoinGeckoDataService",
    "GasOracleService",
    "QuoteRequest",
    "SwapQuoteRequest",
    "TradeQuote",
    "SwapQuote",
    "SetQuoteError",
    "InputError",
    "CapacityError",
    "AmountExceedsCapacityError",
    "DustThresholdError",
    "UpstreamError",
    "UpstreamQuoteError",
    "GasOracleError",
    "ChainReadError",
    "DegradedPriceError",
]
