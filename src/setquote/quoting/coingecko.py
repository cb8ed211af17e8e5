"""CoinGecko token prices and token list metadata.

API docs: https://www.coingecko.com/en/api/documentation
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from setquote import assertions
from setquote.chains import get_chain
from setquote.errors import DegradedPriceError, UpstreamError
from setquote.quoting.models import TokenMetadata

logger = logging.getLogger(__name__)

# Currency codes usable as vs_currencies in fetch_coin_prices
USD_CURRENCY_CODE = "usd"
ETH_CURRENCY_CODE = "eth"

COINGECKO_API_URL = "https://api.coingecko.com/api/v3"

CoinPrices = dict[str, dict[str, float]]
TokenMap = dict[str, TokenMetadata]


class CoinGeckoDataService:
    """Token prices and token list metadata for one chain.

    The token list and its address map are fetched once per instance and
    reused afterwards.
    """

    def __init__(
        self,
        chain_id: int,
        api_url: str = COINGECKO_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        assertions.is_supported_chain_id(chain_id)
        self.chain_id = chain_id
        self.chain = get_chain(chain_id)
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._token_list: Optional[list[TokenMetadata]] = None
        self._token_map: Optional[TokenMap] = None

    @property
    def platform(self) -> str:
        return self.chain.coingecko_platform

    async def fetch_coin_prices(
        self,
        contract_addresses: list[str],
        vs_currencies: list[str],
    ) -> CoinPrices:
        """Get an address-to-price map for a set of token addresses.

        Never raises for upstream problems: if CoinGecko fails, every
        requested address gets a price of 0 in the first currency.

        Args:
            contract_addresses: Token contract addresses
            vs_currencies: Currency codes, e.g. ["usd"]

        Returns:
            {address: {currency: price}}, addresses lower-cased
        """
        addresses = [a.lower() for a in contract_addresses]
        currency = vs_currencies[0] if vs_currencies else USD_CURRENCY_CODE

        try:
            prices = await self._request_prices(addresses, vs_currencies)
        except DegradedPriceError as e:
            logger.warning(f"CoinGecko price request failed, using zero prices: {e}")
            return {address: {currency: 0.0} for address in addresses}

        for address in addresses:
            quotes = prices.setdefault(address, {})
            if currency not in quotes:
                logger.warning(f"CoinGecko has no {currency} price for {address}, using 0")
                quotes[currency] = 0.0
        return prices

    async def _request_prices(self, addresses: list[str], vs_currencies: list[str]) -> CoinPrices:
        url = f"{self.api_url}/simple/token_price/{self.platform}"
        params = {
            "contract_addresses": ",".join(addresses),
            "vs_currencies": ",".join(vs_currencies),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DegradedPriceError(str(e) or type(e).__name__, cause=e) from e

        if not isinstance(data, dict):
            raise DegradedPriceError(f"Unexpected price payload: {data!r}")

        try:
            return {
                address.lower(): {code: float(price) for code, price in quotes.items()}
                for address, quotes in data.items()
                if isinstance(quotes, dict)
            }
        except (TypeError, ValueError) as e:
            raise DegradedPriceError(f"Unparseable price payload: {e}", cause=e) from e

    async def fetch_token_list(self) -> list[TokenMetadata]:
        """Get the token list for the chain (CoinGecko hosted Uniswap-format list)."""
        if self._token_list is not None:
            return self._token_list

        self._token_list = await self._fetch_remote_token_list(self.chain.token_list_url)
        self._token_map = self.convert_token_list_to_address_map(self._token_list)
        logger.info(f"Loaded {len(self._token_list)} tokens for {self.chain.name}")
        return self._token_list

    async def fetch_token_map(self) -> TokenMap:
        """Get the token list as a lower-cased address indexed map."""
        if self._token_map is not None:
            return self._token_map

        token_list = await self.fetch_token_list()
        if self._token_map is None:
            self._token_map = self.convert_token_list_to_address_map(token_list)
        return self._token_map

    @staticmethod
    def convert_token_list_to_address_map(token_list: Optional[list[TokenMetadata]] = None) -> TokenMap:
        return {entry.address.lower(): entry for entry in token_list or []}

    async def _fetch_remote_token_list(self, url: str) -> list[TokenMetadata]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                tokens = response.json()["tokens"]
            return [TokenMetadata.model_validate(token) for token in tokens]
        except (httpx.HTTPError, ValueError, KeyError, TypeError, ValidationError) as e:
            raise UpstreamError(f"Token list request to {url} failed: {e}", cause=e) from e
