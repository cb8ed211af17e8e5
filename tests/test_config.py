"""Tests for settings and chain configuration."""

import pytest

from setquote.assertions import is_supported_chain_id, is_valid_address
from setquote.chains import SUPPORTED_CHAIN_IDS, get_chain
from setquote.config import Settings
from setquote.errors import InputError


class TestSettings:
    def test_defaults(self, settings):
        assert settings.trade_gas_overhead == 150000
        assert settings.trade_gas_buffer_percent == 5
        assert settings.dust_threshold_units == 50
        assert settings.default_slippage_percentage == 2.0
        assert settings.excluded_sources == ["Kyber", "Eth2Dai", "Uniswap", "Mesh"]

    def test_excluded_sources_from_env(self, monkeypatch):
        monkeypatch.setenv("ZEROEX_EXCLUDED_SOURCES", " Curve , ,Balancer")

        assert Settings(_env_file=None).excluded_sources == ["Curve", "Balancer"]

    def test_zeroex_url_per_chain(self, settings):
        assert settings.get_zeroex_url(10) == "https://optimism.api.0x.org"
        assert settings.get_zeroex_url(56) == ""

    def test_safe_dict_redacts_api_key(self, settings):
        safe = settings.get_safe_dict()

        assert safe["zeroex"]["api_key"] == "***"
        assert "test-key" not in str(safe)


class TestChains:
    def test_supported_chains(self):
        assert SUPPORTED_CHAIN_IDS == [1, 10, 137]
        assert get_chain(137).currency_symbol == "MATIC"
        assert get_chain(137).usd_significant_digits == 4
        assert get_chain(1).usd_significant_digits is None
        assert get_chain(56) is None

    def test_chain_id_guard(self):
        is_supported_chain_id(10)
        with pytest.raises(InputError):
            is_supported_chain_id(42)


class TestAddressGuard:
    @pytest.mark.parametrize(
        "address",
        [
            "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
            "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            # Bad checksum casing is tolerated
            "0xA0B86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        ],
    )
    def test_valid(self, address):
        is_valid_address("token", address)

    @pytest.mark.parametrize(
        "address",
        [
            "",
            "0x123",
            "a0b86991c6218b36c1d19d4a2e9eb0ce3606eb4",
            # 40 hex characters without the 0x prefix
            "a0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
            "1111111111111111111111111111111111111111",
            None,
            42,
        ],
    )
    def test_invalid(self, address):
        with pytest.raises(InputError, match="token must be a valid address"):
            is_valid_address("token", address)
