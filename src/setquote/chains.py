"""Per-chain configuration for the chains the quoter supports.

Supports 3 EVM chains:
- Ethereum (1): ETH Gas Station, CoinGecko "ethereum" platform
- Optimism (10): Optimistic Etherscan gas proxy, "optimistic-ethereum" platform
- Polygon (137): Polygon gas station, "polygon-pos" platform
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for a supported chain."""

    chain_id: int
    name: str
    currency_symbol: str  # Native currency shown next to gas costs
    wrapped_native_address: str  # Lower-cased, used to price the native currency
    coingecko_platform: str
    token_list_url: str
    gas_station_url: str
    usd_significant_digits: Optional[int] = None  # Cap for gas cost USD display


# ======================
# Chain Configurations
# ======================

CHAINS: dict[int, ChainConfig] = {
    1: ChainConfig(
        chain_id=1,
        name="Ethereum",
        currency_symbol="ETH",
        wrapped_native_address="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",  # WETH
        coingecko_platform="ethereum",
        token_list_url="https://tokens.coingecko.com/uniswap/all.json",
        gas_station_url="https://ethgasstation.info/api/ethgasAPI.json",
    ),

    10: ChainConfig(
        chain_id=10,
        name="Optimism",
        currency_symbol="ETH",
        wrapped_native_address="0x4200000000000000000000000000000000000006",  # WETH
        coingecko_platform="optimistic-ethereum",
        token_list_url="https://tokens.coingecko.com/optimistic-ethereum/all.json",
        gas_station_url="https://api-optimistic.etherscan.io/api?module=proxy&action=eth_gasPrice",
    ),

    137: ChainConfig(
        chain_id=137,
        name="Polygon",
        currency_symbol="MATIC",
        wrapped_native_address="0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270",  # WMATIC
        coingecko_platform="polygon-pos",
        token_list_url="https://tokens.coingecko.com/polygon-pos/all.json",
        gas_station_url="https://gasstation-mainnet.matic.network",
        # Polygon gas is cheap; keep 4 significant digits so something besides $0.00 shows
        usd_significant_digits=4,
    ),
}

SUPPORTED_CHAIN_IDS: list[int] = sorted(CHAINS)


def get_chain(chain_id: int) -> Optional[ChainConfig]:
    """Get chain configuration by chain id."""
    return CHAINS.get(chain_id)
