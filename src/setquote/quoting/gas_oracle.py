"""Gas price oracle for Ethereum, Optimism and Polygon.

Each chain has its own gas station with its own response format:
- Ethereum: ETH Gas Station, prices in tenths of gwei
- Polygon: Polygon gas station, prices in gwei
- Optimism: Optimistic Etherscan eth_gasPrice proxy, a single hex wei value
"""

import logging
from typing import Optional

import httpx

from setquote import assertions
from setquote.chains import get_chain
from setquote.errors import GasOracleError

logger = logging.getLogger(__name__)

AVERAGE = "average"
FAST = "fast"
FASTEST = "fastest"

GAS_SPEEDS = [AVERAGE, FAST, FASTEST]

# Polygon gas station names the "average" tier "standard"
POLYGON_SPEED_FIELDS = {
    AVERAGE: "standard",
    FAST: "fast",
    FASTEST: "fastest",
}


class GasOracleService:
    """Fetches current gas prices by speed for a fixed chain."""

    AVERAGE = AVERAGE
    FAST = FAST
    FASTEST = FASTEST

    def __init__(
        self,
        chain_id: int,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the oracle.

        Args:
            chain_id: 1 (Ethereum), 10 (Optimism) or 137 (Polygon)
            timeout: Request timeout in seconds
            transport: Optional httpx transport

        Raises:
            InputError: If the chain is not supported
        """
        assertions.is_supported_chain_id(chain_id)
        self.chain_id = chain_id
        self.chain = get_chain(chain_id)
        self.timeout = timeout
        self._transport = transport

    async def fetch_gas_price(self, speed: str = FAST) -> float:
        """Get the current gas price estimate in gwei.

        Args:
            speed: One of 'average', 'fast', 'fastest'

        Returns:
            Gas price in gwei
        """
        assertions.includes(GAS_SPEEDS, speed, "Unsupported speed")

        if self.chain_id == 1:
            price = await self._get_ethereum_gas_price(speed)
        elif self.chain_id == 10:
            price = await self._get_optimism_gas_price()
        else:
            price = await self._get_polygon_gas_price(speed)

        logger.debug(f"Gas price on {self.chain.name} ({speed}): {price} gwei")
        return price

    async def _get_json(self, url: str) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GasOracleError(f"Gas price request to {url} failed: {e}", cause=e) from e

    async def _get_ethereum_gas_price(self, speed: str) -> float:
        data = await self._get_json(self.chain.gas_station_url)
        # Units in 10 gwei so divide by 10 to get gwei
        return self._field(data, speed) / 10

    async def _get_polygon_gas_price(self, speed: str) -> float:
        data = await self._get_json(self.chain.gas_station_url)
        return self._field(data, POLYGON_SPEED_FIELDS[speed])

    async def _get_optimism_gas_price(self) -> float:
        data = await self._get_json(self.chain.gas_station_url)
        result = data.get("result")
        try:
            wei = int(result, 16) if isinstance(result, str) else int(result)
        except (TypeError, ValueError) as e:
            raise GasOracleError(f"Unexpected gas price result: {result!r}", cause=e) from e
        return wei / 1e9

    def _field(self, data: dict, name: str) -> float:
        try:
            return float(data[name])
        except (KeyError, TypeError, ValueError) as e:
            raise GasOracleError(
                f"Gas station for {self.chain.name} returned no usable '{name}' price",
                cause=e,
            ) from e
