"""Pytest configuration and fixtures."""

import os

import httpx
import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ.pop("ZEROEX_API_KEY", None)

from setquote.config import Settings
from setquote.quoting.models import Position, SetDetails, TokenMetadata

SET_ADDRESS = "0x1111111111111111111111111111111111111111"
MANAGER_ADDRESS = "0x2222222222222222222222222222222222222222"
MODULE_ADDRESS = "0x3333333333333333333333333333333333333333"

USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
WBTC = "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599"
WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"

# Checksummed forms, as callers usually pass them
USDC_CHECKSUM = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WBTC_CHECKSUM = "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599"


class FakeSetTokenReader:
    """In-memory stand-in for SetTokenReader."""

    def __init__(self, details: SetDetails):
        self.details = details
        self.calls: list[tuple] = []

    async def fetch_set_details(self, set_address, components=None):
        self.calls.append(("fetch_set_details", set_address, components))
        return self.details

    async def get_manager_address(self, set_address):
        self.calls.append(("get_manager_address", set_address))
        return self.details.manager


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)

    def requests_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


def make_set_details(
    usdc_unit: int = 200_000_000,
    wbtc_unit: int = 0,
    total_supply: int = 1000 * 10**18,
) -> SetDetails:
    positions = [Position(component=USDC, module=MODULE_ADDRESS, unit=usdc_unit)]
    if wbtc_unit:
        positions.append(Position(component=WBTC, module=MODULE_ADDRESS, unit=wbtc_unit))
    return SetDetails(manager=MANAGER_ADDRESS, total_supply=total_supply, positions=positions)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, zeroex_api_key="test-key")


@pytest.fixture
def token_map() -> dict[str, TokenMetadata]:
    return {
        USDC: TokenMetadata(chain_id=1, address=USDC, name="USD Coin", symbol="USDC", decimals=6),
        WBTC: TokenMetadata(chain_id=1, address=WBTC, name="Wrapped BTC", symbol="WBTC", decimals=8),
        WETH: TokenMetadata(
            chain_id=1, address=WETH, name="Wrapped Ether", symbol="WETH", decimals=18
        ),
    }


@pytest.fixture
def zeroex_response() -> dict:
    return {
        "guaranteedPrice": "0.00000245",
        "price": "0.0000025",
        "sellAmount": "100000000",
        "buyAmount": "250000",
        "data": "0xdeadbeef",
        "gas": "80000",
    }


@pytest.fixture
def coin_prices_response() -> dict:
    # CoinGecko echoes addresses lower-cased
    return {
        WETH: {"usd": 2000},
        USDC: {"usd": 1.0},
        WBTC: {"usd": 39000},
    }


@pytest.fixture
def gas_station_response() -> dict:
    # ETH Gas Station reports tenths of gwei
    return {"fast": 500, "fastest": 600, "average": 400, "safeLow": 300}


@pytest.fixture
def services_transport(zeroex_response, coin_prices_response, gas_station_response):
    """Transport answering 0x, CoinGecko and ETH Gas Station requests."""

    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == "api.0x.org":
            return httpx.Response(200, json=zeroex_response)
        if host == "api.coingecko.com":
            return httpx.Response(200, json=coin_prices_response)
        if host == "ethgasstation.info":
            return httpx.Response(200, json=gas_station_response)
        return httpx.Response(404, json={"error": f"unexpected host {host}"})

    return RecordingTransport(handler)
