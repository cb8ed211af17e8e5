"""Application configuration using pydantic-settings.

Covers the HTTP services and JSON-RPC endpoints the trade quoter talks to,
plus the quoting constants (gas overhead, dust threshold, slippage).
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")
    log_level: str = Field(default="INFO", description="Log level when debug is off")

    # ======================
    # HTTP
    # ======================
    http_timeout: float = Field(default=30.0, description="Timeout for outbound HTTP calls (seconds)")

    # ======================
    # Chain RPC Endpoints
    # ======================
    eth_rpc_url: str = Field(
        default="https://eth.llamarpc.com", description="Ethereum RPC URL"
    )
    optimism_rpc_url: str = Field(
        default="https://mainnet.optimism.io", description="Optimism RPC URL"
    )
    polygon_rpc_url: str = Field(
        default="https://polygon-rpc.com", description="Polygon RPC URL"
    )

    # ======================
    # 0x API
    # ======================
    zeroex_api_key: Optional[str] = Field(
        default=None, description="0x API key (sent as the 0x-api-key header)"
    )
    zeroex_ethereum_url: str = Field(
        default="https://api.0x.org", description="0x API host for Ethereum"
    )
    zeroex_optimism_url: str = Field(
        default="https://optimism.api.0x.org", description="0x API host for Optimism"
    )
    zeroex_polygon_url: str = Field(
        default="https://polygon.api.0x.org", description="0x API host for Polygon"
    )
    zeroex_slippage_percentage: float = Field(
        default=0.02, description="Slippage sent to 0x (0.02 = 2%)"
    )
    zeroex_fee_recipient: str = Field(
        default="0xD3D555Bb655AcBA9452bfC6D7cEa8cC7b3628C55",
        description="Fee recipient sent with every 0x quote",
    )
    zeroex_affiliate_address: str = Field(
        default="0xD3D555Bb655AcBA9452bfC6D7cEa8cC7b3628C55",
        description="Affiliate address sent with every 0x quote",
    )
    zeroex_excluded_sources: str = Field(
        default="Kyber,Eth2Dai,Uniswap,Mesh",
        description="Comma-separated liquidity sources 0x must not route through",
    )

    # ======================
    # CoinGecko
    # ======================
    coingecko_api_url: str = Field(
        default="https://api.coingecko.com/api/v3", description="CoinGecko API base URL"
    )

    # ======================
    # Trade Quote
    # ======================
    trade_gas_overhead: int = Field(
        default=150000, description="Gas added on top of the 0x estimate for the trade call"
    )
    trade_gas_buffer_percent: int = Field(
        default=5, description="Percentage buffer applied to the total gas estimate"
    )
    dust_threshold_units: int = Field(
        default=50, description="Smallest non-zero position unit a quote may leave behind"
    )
    default_slippage_percentage: float = Field(
        default=2.0, description="Output slippage tolerance in percent when a request omits it"
    )

    @property
    def excluded_sources(self) -> list[str]:
        """Parse excluded 0x sources into a list."""
        return [s.strip() for s in self.zeroex_excluded_sources.split(",") if s.strip()]

    def get_rpc_url(self, chain_id: int) -> str:
        """Get RPC URL for a chain id."""
        rpc_map = {
            1: self.eth_rpc_url,
            10: self.optimism_rpc_url,
            137: self.polygon_rpc_url,
        }
        return rpc_map.get(chain_id, "")

    def get_zeroex_url(self, chain_id: int) -> str:
        """Get 0x API host for a chain id."""
        url_map = {
            1: self.zeroex_ethereum_url,
            10: self.zeroex_optimism_url,
            137: self.zeroex_polygon_url,
        }
        return url_map.get(chain_id, "")

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "http_timeout": self.http_timeout,
            "chains": {
                "ethereum": {"rpc": self.eth_rpc_url, "zeroex": self.zeroex_ethereum_url},
                "optimism": {"rpc": self.optimism_rpc_url, "zeroex": self.zeroex_optimism_url},
                "polygon": {"rpc": self.polygon_rpc_url, "zeroex": self.zeroex_polygon_url},
            },
            "zeroex": {
                "api_key": "***" if self.zeroex_api_key else "(not set)",
                "slippage": self.zeroex_slippage_percentage,
                "excluded_sources": self.excluded_sources,
            },
            "coingecko": self.coingecko_api_url,
            "trade_quote": {
                "gas_overhead": self.trade_gas_overhead,
                "gas_buffer_percent": self.trade_gas_buffer_percent,
                "dust_threshold_units": self.dust_threshold_units,
                "default_slippage_percentage": self.default_slippage_percentage,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
