"""0x API swap quote integration.

Uses the 0x swap/v1 quote endpoint on Ethereum, Optimism and Polygon.
API docs: https://0x.org/docs/api#get-swapv1quote
"""

import logging
from typing import Optional

import httpx

from setquote import assertions
from setquote.errors import UpstreamQuoteError
from setquote.quoting.models import DexQuote

logger = logging.getLogger(__name__)

SWAP_QUOTE_ROUTE = "/swap/v1/quote"

DEFAULT_EXCLUDED_SOURCES = ["Kyber", "Eth2Dai", "Uniswap", "Mesh"]
DEFAULT_FEE_RECIPIENT = "0xD3D555Bb655AcBA9452bfC6D7cEa8cC7b3628C55"
DEFAULT_AFFILIATE_ADDRESS = "0xD3D555Bb655AcBA9452bfC6D7cEa8cC7b3628C55"
DEFAULT_SLIPPAGE_PERCENTAGE = 0.02  # fraction, 0.02 = 2%

ZEROEX_HOSTS = {
    1: "https://api.0x.org",
    10: "https://optimism.api.0x.org",
    137: "https://polygon.api.0x.org",
}


class ZeroExTradeQuoter:
    """Requests swap quotes for a token pair from the 0x API."""

    def __init__(
        self,
        chain_id: int,
        api_key: Optional[str] = None,
        api_urls: Optional[dict[int, str]] = None,
        excluded_sources: Optional[list[str]] = None,
        fee_recipient: str = DEFAULT_FEE_RECIPIENT,
        affiliate_address: str = DEFAULT_AFFILIATE_ADDRESS,
        slippage_percentage: float = DEFAULT_SLIPPAGE_PERCENTAGE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the quoter.

        Args:
            chain_id: 1 (Ethereum), 10 (Optimism) or 137 (Polygon)
            api_key: 0x API key; the header is omitted when not set
            api_urls: Per-chain host overrides
            excluded_sources: Liquidity sources 0x must not route through
            fee_recipient: Address receiving buyTokenPercentageFee
            affiliate_address: Affiliate address reported to 0x
            slippage_percentage: Default slippage sent to 0x (fraction)
            timeout: Request timeout in seconds
            transport: Optional httpx transport

        Raises:
            InputError: If the chain is not supported
        """
        assertions.is_supported_chain_id(chain_id)
        self.chain_id = chain_id
        self.host = self._get_host_for_chain(chain_id, api_urls).rstrip("/")
        self.api_key = api_key
        self.excluded_sources = list(
            DEFAULT_EXCLUDED_SOURCES if excluded_sources is None else excluded_sources
        )
        self.fee_recipient = fee_recipient
        self.affiliate_address = affiliate_address
        self.slippage_percentage = slippage_percentage
        self.skip_validation = True
        self.timeout = timeout
        self._transport = transport

    @property
    def quote_url(self) -> str:
        return f"{self.host}{SWAP_QUOTE_ROUTE}"

    def _get_headers(self) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["0x-api-key"] = self.api_key
        return headers

    async def fetch_trade_quote(
        self,
        sell_token_address: str,
        buy_token_address: str,
        amount: int,
        taker_address: str,
        is_firm: bool,
        use_buy_amount: bool = False,
        slippage_percentage: Optional[float] = None,
        fee_recipient: Optional[str] = None,
        excluded_sources: Optional[list[str]] = None,
        fee_percentage: float = 0,
    ) -> DexQuote:
        """Get a swap quote for a token pair.

        Args:
            sell_token_address: Token to sell
            buy_token_address: Token to buy
            amount: Sell amount in base units (buy amount when use_buy_amount)
            taker_address: SetToken manager address
            is_firm: Whether the query precedes a firm intent to trade
            use_buy_amount: Quote for an exact buy amount instead of sell amount
            slippage_percentage: Slippage as a fraction (defaults to the instance value)
            fee_recipient: Override of the instance fee recipient
            excluded_sources: Override of the instance excluded sources
            fee_percentage: buyTokenPercentageFee as a fraction

        Returns:
            DexQuote with numeric fields

        Raises:
            UpstreamQuoteError: If the request fails or the response is unusable
        """
        params = {
            "sellToken": sell_token_address,
            "buyToken": buy_token_address,
            "slippagePercentage": (
                self.slippage_percentage if slippage_percentage is None else slippage_percentage
            ),
            "takerAddress": taker_address,
            "excludedSources": ",".join(
                self.excluded_sources if excluded_sources is None else excluded_sources
            ),
            "skipValidation": self.skip_validation,
            "feeRecipient": fee_recipient or self.fee_recipient,
            "buyTokenPercentageFee": fee_percentage,
            "affiliateAddress": self.affiliate_address,
            "intentOnFilling": is_firm,
        }
        if use_buy_amount:
            params["buyAmount"] = str(amount)
        else:
            params["sellAmount"] = str(amount)

        logger.debug(
            f"0x quote request on chain {self.chain_id}: {amount} "
            f"{sell_token_address} -> {buy_token_address} (firm={is_firm})"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    self.quote_url,
                    params=params,
                    headers=self._get_headers(),
                )
                response.raise_for_status()
                data = response.json()

            quote = DexQuote(
                guaranteed_price=float(data["guaranteedPrice"]),
                price=float(data["price"]),
                sell_amount=int(data["sellAmount"]),
                buy_amount=int(data["buyAmount"]),
                calldata=data["data"],
                gas=int(data["gas"]),
                raw=data,
            )
        except httpx.HTTPStatusError as e:
            raise UpstreamQuoteError(
                f"ZeroEx quote request failed: {e.response.status_code} - {e.response.text}",
                cause=e,
            ) from e
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            raise UpstreamQuoteError(f"ZeroEx quote request failed: {e!r}", cause=e) from e

        logger.info(
            f"0x quote: sell {quote.sell_amount} -> buy {quote.buy_amount} "
            f"(price {quote.price}, gas {quote.gas})"
        )
        return quote

    @staticmethod
    def _get_host_for_chain(chain_id: int, api_urls: Optional[dict[int, str]] = None) -> str:
        if api_urls and api_urls.get(chain_id):
            return api_urls[chain_id]
        return ZEROEX_HOSTS[chain_id]
