"""Trade quote generation for SetToken rebalances.

Clients:
- ZeroExTradeQuoter: 0x API swap quotes
- CoinGeckoDataService: token prices and token list metadata
- GasOracleService: chain gas station prices
- TradeQuoteAPI: combines the above with the Set's on-chain composition
"""

from setquote.quoting.coingecko import (
    ETH_CURRENCY_CODE,
    USD_CURRENCY_CODE,
    CoinGeckoDataService,
)
from setquote.quoting.gas_oracle import GasOracleService
from setquote.quoting.models import (
    DexQuote,
    Position,
    QuoteRequest,
    SetDetails,
    SwapQuote,
    SwapQuoteRequest,
    TokenMetadata,
    TokenResponse,
    TradeQuote,
    TradeQuoteDisplay,
)
from setquote.quoting.trade_quote import ZERO_EX_ADAPTER_NAME, TradeQuoteAPI
from setquote.quoting.zeroex import ZeroExTradeQuoter

__all__ = [
    # Clients
    "CoinGeckoDataService",
    "GasOracleService",
    "ZeroExTradeQuoter",
    "TradeQuoteAPI",
    # Models
    "DexQuote",
    "Position",
    "QuoteRequest",
    "SetDetails",
    "SwapQuote",
    "SwapQuoteRequest",
    "TokenMetadata",
    "TokenResponse",
    "TradeQuote",
    "TradeQuoteDisplay",
    # Constants
    "ETH_CURRENCY_CODE",
    "USD_CURRENCY_CODE",
    "ZERO_EX_ADAPTER_NAME",
]
