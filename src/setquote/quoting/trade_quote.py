"""Trade quotes for rebalancing one SetToken component into another.

Combines the Set's on-chain composition, a 0x swap quote, CoinGecko prices
and a gas station estimate into a display-ready ``TradeQuote``. All unit
scaling is done on integers so the per-Set units match the fixed-point math
the TradeModule performs on chain.
"""

import asyncio
import logging
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Optional

import httpx

from setquote import assertions
from setquote.chains import ChainConfig, get_chain
from setquote.config import Settings, get_settings
from setquote.errors import AmountExceedsCapacityError, DustThresholdError, InputError
from setquote.quoting.coingecko import USD_CURRENCY_CODE, CoinGeckoDataService, CoinPrices
from setquote.quoting.gas_oracle import GasOracleService
from setquote.quoting.models import (
    DexQuote,
    QuoteRequest,
    SetDetails,
    SwapQuote,
    SwapQuoteRequest,
    TokenMetadata,
    TokenResponse,
    TradeQuote,
    TradeQuoteDisplay,
)
from setquote.quoting.zeroex import ZEROEX_HOSTS, ZeroExTradeQuoter
from setquote.units import (
    SCALE,
    ceil_div,
    format_number,
    format_percentage,
    format_units,
    format_usd,
    normalize_token_amount,
    parse_units,
    to_decimal,
)

if TYPE_CHECKING:
    from setquote.chain.set_token import SetTokenReader

logger = logging.getLogger(__name__)

ZERO_EX_ADAPTER_NAME = "ZeroExApiAdapterV3"

# Slippage is applied as an integer ratio over this many parts
PERCENT_MULTIPLIER = 1000


class TradeQuoteAPI:
    """Generates trade quotes for token pairs held by a SetToken.

    Uses the 0x API for the swap itself; a 0x API key is needed for
    production traffic.
    """

    def __init__(
        self,
        set_token: "SetTokenReader",
        zeroex_api_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the quote API.

        Args:
            set_token: Reader for SetToken composition
            zeroex_api_key: 0x API key (defaults to settings)
            settings: Settings override (defaults to get_settings())
            transport: Optional httpx transport shared by the HTTP clients
        """
        self.settings = settings or get_settings()
        self.set_token = set_token
        self.zeroex_api_key = (
            zeroex_api_key if zeroex_api_key is not None else self.settings.zeroex_api_key
        )
        self.large_trade_gas_cost_base = self.settings.trade_gas_overhead
        self.trade_quote_gas_buffer = self.settings.trade_gas_buffer_percent
        self.dust_threshold = self.settings.dust_threshold_units
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        chain_id: int,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "TradeQuoteAPI":
        """Create a quote API reading Sets through the configured RPC for a chain."""
        from setquote.chain.rpc import JsonRpcClient
        from setquote.chain.set_token import SetTokenReader

        settings = settings or get_settings()
        assertions.is_supported_chain_id(chain_id)
        rpc = JsonRpcClient(
            settings.get_rpc_url(chain_id),
            timeout=settings.http_timeout,
            transport=transport,
        )
        return cls(SetTokenReader(rpc), settings=settings, transport=transport)

    # ======================
    # Clients
    # ======================

    def _zeroex(self, chain_id: int) -> ZeroExTradeQuoter:
        return ZeroExTradeQuoter(
            chain_id=chain_id,
            api_key=self.zeroex_api_key,
            api_urls={cid: self.settings.get_zeroex_url(cid) for cid in ZEROEX_HOSTS},
            excluded_sources=self.settings.excluded_sources,
            fee_recipient=self.settings.zeroex_fee_recipient,
            affiliate_address=self.settings.zeroex_affiliate_address,
            slippage_percentage=self.settings.zeroex_slippage_percentage,
            timeout=self.settings.http_timeout,
            transport=self._transport,
        )

    def _coingecko(self, chain_id: int) -> CoinGeckoDataService:
        return CoinGeckoDataService(
            chain_id,
            api_url=self.settings.coingecko_api_url,
            timeout=self.settings.http_timeout,
            transport=self._transport,
        )

    def _gas_oracle(self, chain_id: int) -> GasOracleService:
        return GasOracleService(chain_id, timeout=self.settings.http_timeout, transport=self._transport)

    # ======================
    # Trade quotes
    # ======================

    async def generate(self, request: QuoteRequest) -> TradeQuote:
        """Generate a trade quote for a token pair in a SetToken.

        The request must carry a token metadata map, e.g. from
        ``CoinGeckoDataService.fetch_token_map()``.

        Raises:
            InputError: Bad address, amount, chain id or missing token metadata
            AmountExceedsCapacityError: Amount above what the Set holds
            DustThresholdError: Quote would leave or create a dust position
            UpstreamQuoteError: 0x failure
            GasOracleError: Gas station failure (when no gas_price given)
        """
        chain_id = request.chain_id
        assertions.is_supported_chain_id(chain_id)
        chain = get_chain(chain_id)

        fee_percentage = request.fee_percentage
        slippage_percentage = (
            request.slippage_percentage
            if request.slippage_percentage is not None
            else self.settings.default_slippage_percentage
        )

        from_token_address, to_token_address, from_address = self.sanitize_address(
            request.from_token, request.to_token, request.from_address
        )
        from_token = self._token_entry(request, from_token_address)
        to_token = self._token_entry(request, to_token_address)

        amount = parse_units(request.raw_amount, from_token.decimals)

        logger.info(
            f"Generating trade quote on {chain.name}: {request.raw_amount} "
            f"{from_token.symbol} -> {to_token.symbol} for Set {from_address}"
        )

        set_details = await self.set_token.fetch_set_details(
            from_address, [from_token_address, to_token_address]
        )

        from_token_request_amount = self.calculate_from_token_amount(
            set_details, from_token_address, amount
        )

        zeroex = self._zeroex(chain_id)
        quote = await zeroex.fetch_trade_quote(
            from_token_address,
            to_token_address,
            from_token_request_amount,
            set_details.manager,
            request.is_firm_quote,
            fee_recipient=request.fee_recipient,
            excluded_sources=request.excluded_sources,
        )

        from_units, to_units = self.calculate_units(
            quote, set_details.total_supply, slippage_percentage
        )

        # Sanity check response from quote API against the Set's positions
        self.validate_quote_values(
            set_details, from_token_address, to_token_address, from_units, to_units
        )

        gas = self.estimate_gas_cost(quote.gas)

        coin_prices, gas_price = await self._fetch_prices_and_gas(
            chain, from_token_address, to_token_address, request.gas_price
        )

        display = TradeQuoteDisplay(
            input_amount_raw=str(request.raw_amount),
            input_amount=str(amount),
            quote_amount=str(from_token_request_amount),
            from_token_display_amount=format_units(quote.sell_amount, from_token.decimals),
            to_token_display_amount=format_units(quote.buy_amount, to_token.decimals),
            from_token_price_usd=self.token_price_usd(
                quote.sell_amount, from_token_address, from_token, coin_prices
            ),
            to_token_price_usd=self.token_price_usd(
                quote.buy_amount, to_token_address, to_token, coin_prices
            ),
            gas_costs_usd=self.gas_costs_usd(gas_price, gas, coin_prices, chain),
            gas_costs_chain_currency=self.gas_costs_chain_currency(gas_price, gas, chain),
            fee_percentage=format_percentage(fee_percentage),
            slippage=self.calculate_slippage(
                quote.sell_amount,
                quote.buy_amount,
                from_token_address,
                to_token_address,
                from_token,
                to_token,
                coin_prices,
            ),
            from_token=self.token_response(from_token, from_token_address),
            to_token=self.token_response(to_token, to_token_address),
        )

        trade_quote = TradeQuote(
            from_address=from_address,
            from_token_address=from_token_address,
            to_token_address=to_token_address,
            exchange_adapter_name=ZERO_EX_ADAPTER_NAME,
            calldata=quote.calldata,
            gas=str(gas),
            gas_price=format_number(gas_price),
            slippage_percentage=format_percentage(slippage_percentage),
            from_token_amount=str(from_units),
            to_token_amount=str(to_units),
            display=display,
        )

        logger.info(
            f"Trade quote ready: {from_units} {from_token.symbol} units -> "
            f"{to_units} {to_token.symbol} units, gas {gas} @ {trade_quote.gas_price} gwei"
        )
        return trade_quote

    async def generate_swap_quote(self, request: SwapQuoteRequest) -> SwapQuote:
        """Generate a 0x swap quote for any token pair.

        Used by exchange issuance flows where a liquid token is swapped into
        a Set component. Amounts are base units and are not scaled by the
        Set's supply.
        """
        assertions.is_supported_chain_id(request.chain_id)

        slippage_percentage = (
            request.slippage_percentage
            if request.slippage_percentage is not None
            else self.settings.default_slippage_percentage
        )

        from_token_address, to_token_address, from_address = self.sanitize_address(
            request.from_token, request.to_token, request.from_address
        )

        try:
            amount = int(request.raw_amount)
        except ValueError as e:
            raise InputError(
                f"Invalid amount: {request.raw_amount!r} is not an integer base unit amount"
            ) from e
        if amount <= 0:
            raise InputError(f"Invalid amount: {request.raw_amount!r} must be positive")

        manager = await self.set_token.get_manager_address(from_address)

        zeroex = self._zeroex(request.chain_id)
        quote = await zeroex.fetch_trade_quote(
            from_token_address,
            to_token_address,
            amount,
            manager,
            request.is_firm_quote,
            use_buy_amount=request.use_buy_amount,
            slippage_percentage=slippage_percentage / 100,
            fee_recipient=request.fee_recipient,
            excluded_sources=request.excluded_sources,
            fee_percentage=request.fee_percentage / 100,
        )

        return SwapQuote(
            from_address=from_address,
            from_token_address=from_token_address,
            to_token_address=to_token_address,
            calldata=quote.calldata,
            gas=str(quote.gas),
            gas_price=format_number(request.gas_price),
            slippage_percentage=format_percentage(slippage_percentage),
            from_token_amount=str(quote.sell_amount),
            to_token_amount=str(quote.buy_amount),
        )

    # ======================
    # Quote math
    # ======================

    @staticmethod
    def sanitize_address(from_token: str, to_token: str, from_address: str) -> tuple[str, str, str]:
        """Validate and lower-case the three addresses of a request."""
        assertions.is_valid_address("fromToken", from_token)
        assertions.is_valid_address("toToken", to_token)
        assertions.is_valid_address("fromAddress", from_address)
        return from_token.lower(), to_token.lower(), from_address.lower()

    @staticmethod
    def _token_entry(request: QuoteRequest, address: str) -> TokenMetadata:
        entry = request.token_map.get(address)
        if entry is None:
            raise InputError(f"Token {address} is missing from the token map")
        return entry

    @staticmethod
    def calculate_from_token_amount(set_details: SetDetails, from_token_address: str, amount: int) -> int:
        """Bound and quantize the notional amount of from_token to trade.

        Amounts below the Set's implied max notional are rounded down to
        the nearest value the TradeModule can express as a per-Set unit, so
        the trade leaves no remainder.
        """
        position = set_details.find_position(from_token_address)
        if position is None:
            raise InputError("Invalid fromToken input: the Set holds no position in this token")

        total_supply = set_details.total_supply
        if total_supply <= 0:
            raise InputError("Invalid Set: total supply is zero")

        implied_max_notional = position.unit * total_supply // SCALE

        if amount > implied_max_notional:
            raise AmountExceedsCapacityError(amount, implied_max_notional)
        if amount == implied_max_notional:
            return implied_max_notional

        amount_mul_scale_over_total_supply = amount * SCALE // total_supply
        return amount_mul_scale_over_total_supply * total_supply // SCALE

    @staticmethod
    def calculate_units(quote: DexQuote, total_supply: int, slippage_percentage: float) -> tuple[int, int]:
        """Convert quoted sell/buy amounts into per-Set units.

        from units round up so the Set never under-debits; to units are
        reduced by the slippage tolerance and round down.
        """
        from_units = ceil_div(quote.sell_amount * SCALE, total_supply)

        tolerance = (
            Decimal(PERCENT_MULTIPLIER) * (100 - to_decimal(slippage_percentage)) / 100
        ).to_integral_value(rounding=ROUND_FLOOR)
        to_token_amount_minus_slippage = quote.buy_amount * int(tolerance) // PERCENT_MULTIPLIER
        to_units = to_token_amount_minus_slippage * SCALE // total_supply

        return from_units, to_units

    def validate_quote_values(
        self,
        set_details: SetDetails,
        from_token_address: str,
        to_token_address: str,
        quote_from_units: int,
        quote_to_units: int,
    ) -> None:
        """Reject quotes that would leave or create a dust position."""
        from_position = set_details.find_position(from_token_address)
        current_from_units = from_position.unit if from_position else 0

        remaining_units = current_from_units - quote_from_units
        if 0 < remaining_units < self.dust_threshold:
            raise DustThresholdError(
                "Remaining units too small, incorrectly attempting max",
                units=remaining_units,
                threshold=self.dust_threshold,
            )

        to_position = set_details.find_position(to_token_address)
        new_to_units = (to_position.unit if to_position else 0) + quote_to_units
        if 0 < new_to_units < self.dust_threshold:
            raise DustThresholdError(
                "Receive units too small",
                units=new_to_units,
                threshold=self.dust_threshold,
            )

    def estimate_gas_cost(self, zeroex_gas: int) -> int:
        """0x gas plus the trade call overhead, with a percentage buffer."""
        gas = zeroex_gas + self.large_trade_gas_cost_base
        return gas * (100 + self.trade_quote_gas_buffer) // 100

    # ======================
    # Prices and display
    # ======================

    async def _fetch_prices_and_gas(
        self,
        chain: ChainConfig,
        from_token_address: str,
        to_token_address: str,
        gas_price: Optional[float],
    ) -> tuple[CoinPrices, float]:
        coingecko = self._coingecko(chain.chain_id)
        prices_task = coingecko.fetch_coin_prices(
            [chain.wrapped_native_address, from_token_address, to_token_address],
            [USD_CURRENCY_CODE, USD_CURRENCY_CODE, USD_CURRENCY_CODE],
        )

        if gas_price is not None:
            return await prices_task, gas_price

        gas_oracle = self._gas_oracle(chain.chain_id)
        tasks = [
            asyncio.ensure_future(prices_task),
            asyncio.ensure_future(gas_oracle.fetch_gas_price()),
        ]
        try:
            coin_prices, fetched_gas_price = await asyncio.gather(*tasks)
        except BaseException:
            # Don't leave the sibling fetch running after a failure
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return coin_prices, fetched_gas_price

    @staticmethod
    def _usd_price(coin_prices: CoinPrices, address: str) -> Decimal:
        return to_decimal(coin_prices.get(address, {}).get(USD_CURRENCY_CODE, 0))

    @staticmethod
    def token_response(token: TokenMetadata, address: str) -> TokenResponse:
        return TokenResponse(
            symbol=token.symbol,
            name=token.name,
            address=address,
            decimals=token.decimals,
        )

    def token_value_usd(
        self, amount: int, address: str, token: TokenMetadata, coin_prices: CoinPrices
    ) -> Decimal:
        return normalize_token_amount(amount, token.decimals) * self._usd_price(coin_prices, address)

    def token_price_usd(
        self, amount: int, address: str, token: TokenMetadata, coin_prices: CoinPrices
    ) -> str:
        return format_usd(self.token_value_usd(amount, address, token, coin_prices))

    @staticmethod
    def total_gas_cost(gas_price: float, gas: int) -> Decimal:
        """Gas cost in native currency; gas_price is in gwei."""
        return to_decimal(gas_price) / Decimal(10**9) * gas

    def gas_costs_usd(self, gas_price: float, gas: int, coin_prices: CoinPrices, chain: ChainConfig) -> str:
        native_price = self._usd_price(coin_prices, chain.wrapped_native_address)
        cost = self.total_gas_cost(gas_price, gas) * native_price
        return format_usd(cost, significant_digits=chain.usd_significant_digits)

    def gas_costs_chain_currency(self, gas_price: float, gas: int, chain: ChainConfig) -> str:
        cost = self.total_gas_cost(gas_price, gas).quantize(
            Decimal("0.0000001"), rounding=ROUND_HALF_UP
        )
        return f"{cost:f} {chain.currency_symbol}"

    def calculate_slippage(
        self,
        from_token_amount: int,
        to_token_amount: int,
        from_token_address: str,
        to_token_address: str,
        from_token: TokenMetadata,
        to_token: TokenMetadata,
        coin_prices: CoinPrices,
    ) -> str:
        """Realized slippage implied by USD prices of the quoted amounts.

        Uses the amounts as quoted, before the slippage tolerance is
        subtracted from the to units. Reports 0.00% when the from side has
        no USD value (e.g. prices unavailable).
        """
        from_total_usd = self.token_value_usd(
            from_token_amount, from_token_address, from_token, coin_prices
        )
        to_total_usd = self.token_value_usd(to_token_amount, to_token_address, to_token, coin_prices)

        if from_total_usd == 0:
            return format_percentage(0)

        slippage_raw = (from_total_usd - to_total_usd) / from_total_usd
        return format_percentage(slippage_raw * 100)
