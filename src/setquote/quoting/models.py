"""Quote request and response contracts.

Requests and responses are pydantic models; values that never leave the
library (Set reads, raw 0x quotes) are dataclasses.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass
class Position:
    """One SetToken position as returned by ``getPositions()``."""

    component: str
    module: str
    unit: int
    position_state: int = 0  # 0 = default, 1 = external
    data: bytes = b""

    @property
    def is_default(self) -> bool:
        return self.position_state == 0


@dataclass
class SetDetails:
    """Snapshot of a SetToken's composition, read fresh for every quote."""

    manager: str
    total_supply: int
    positions: list[Position] = field(default_factory=list)

    def find_position(self, component: str) -> Optional[Position]:
        """First default position for a component (case-insensitive)."""
        component = component.lower()
        for position in self.positions:
            if position.component.lower() == component and position.is_default:
                return position
        return None


@dataclass
class DexQuote:
    """A single-use swap quote returned by the 0x API."""

    guaranteed_price: float
    price: float
    sell_amount: int
    buy_amount: int
    calldata: str
    gas: int
    raw: dict = field(default_factory=dict)


class TokenMetadata(BaseModel):
    """Token list entry (CoinGecko / Uniswap token list format)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    chain_id: Optional[int] = Field(None, alias="chainId")
    address: str
    name: str
    symbol: str
    decimals: int = Field(..., ge=0, le=255)
    logo_uri: Optional[str] = Field(None, alias="logoURI")


class TokenResponse(BaseModel):
    """Token summary attached to a quote's display block."""

    symbol: str
    name: str
    address: str
    decimals: int


class QuoteRequest(BaseModel):
    """Request for a SetToken trade quote."""

    from_token: str = Field(..., description="Component to sell")
    to_token: str = Field(..., description="Component to buy")
    from_address: str = Field(..., description="SetToken address")
    raw_amount: str = Field(..., description="Human readable amount of from_token, e.g. '1.5'")
    chain_id: int
    token_map: dict[str, TokenMetadata] = Field(
        ..., description="Token metadata keyed by address (see CoinGeckoDataService.fetch_token_map)"
    )
    fee_percentage: float = Field(default=0.0, ge=0, description="Fee in percent, display only")
    is_firm_quote: bool = Field(default=False, description="Tell 0x the quote precedes a fill")
    slippage_percentage: Optional[float] = Field(
        default=None, ge=0, lt=100, description="Output slippage tolerance in percent"
    )
    gas_price: Optional[float] = Field(
        default=None, gt=0, description="Gas price in gwei; skips the gas oracle when set"
    )
    excluded_sources: Optional[list[str]] = None
    fee_recipient: Optional[str] = None

    @field_validator("raw_amount", mode="before")
    @classmethod
    def _amount_as_string(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("token_map")
    @classmethod
    def _lowercase_token_map(cls, value: dict[str, TokenMetadata]) -> dict[str, TokenMetadata]:
        return {address.lower(): entry for address, entry in value.items()}


class SwapQuoteRequest(BaseModel):
    """Request for a plain token swap quote (exchange issuance flows)."""

    from_token: str
    to_token: str
    from_address: str = Field(..., description="SetToken whose manager is the 0x taker")
    raw_amount: str = Field(..., description="Amount in integer base units")
    chain_id: int
    gas_price: float = Field(..., gt=0, description="Gas price in gwei")
    use_buy_amount: bool = Field(default=False, description="Treat raw_amount as the buy amount")
    is_firm_quote: bool = True
    slippage_percentage: Optional[float] = Field(default=None, ge=0, lt=100)
    fee_percentage: float = Field(default=0.0, ge=0)
    excluded_sources: Optional[list[str]] = None
    fee_recipient: Optional[str] = None

    @field_validator("raw_amount", mode="before")
    @classmethod
    def _amount_as_string(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class TradeQuoteDisplay(BaseModel):
    """Human formatted fields of a trade quote.

    ``slippage`` is the realized slippage implied by USD prices of the
    quoted amounts. It is not the tolerance applied to ``to_token_amount``;
    that one is reported in ``TradeQuote.slippage_percentage``.
    """

    input_amount_raw: str
    input_amount: str
    quote_amount: str
    from_token_display_amount: str
    to_token_display_amount: str
    from_token_price_usd: str
    to_token_price_usd: str
    gas_costs_usd: str
    gas_costs_chain_currency: str
    fee_percentage: str
    slippage: str
    from_token: TokenResponse
    to_token: TokenResponse


class TradeQuote(BaseModel):
    """Display-ready trade quote for a SetToken component trade."""

    from_address: str
    from_token_address: str
    to_token_address: str
    exchange_adapter_name: str
    calldata: str
    gas: str
    gas_price: str
    slippage_percentage: str
    from_token_amount: str = Field(..., description="Per-Set units of from_token to sell")
    to_token_amount: str = Field(..., description="Minimum per-Set units of to_token to receive")
    display: TradeQuoteDisplay

    def to_dict(self) -> dict:
        """Convert to the camelCase shape used by JavaScript consumers."""
        display = self.display
        return {
            "from": self.from_address,
            "fromTokenAddress": self.from_token_address,
            "toTokenAddress": self.to_token_address,
            "exchangeAdapterName": self.exchange_adapter_name,
            "calldata": self.calldata,
            "gas": self.gas,
            "gasPrice": self.gas_price,
            "slippagePercentage": self.slippage_percentage,
            "fromTokenAmount": self.from_token_amount,
            "toTokenAmount": self.to_token_amount,
            "display": {
                "inputAmountRaw": display.input_amount_raw,
                "inputAmount": display.input_amount,
                "quoteAmount": display.quote_amount,
                "fromTokenDisplayAmount": display.from_token_display_amount,
                "toTokenDisplayAmount": display.to_token_display_amount,
                "fromTokenPriceUsd": display.from_token_price_usd,
                "toTokenPriceUsd": display.to_token_price_usd,
                "gasCostsUsd": display.gas_costs_usd,
                "gasCostsChainCurrency": display.gas_costs_chain_currency,
                "feePercentage": display.fee_percentage,
                "slippage": display.slippage,
                "fromToken": display.from_token.model_dump(),
                "toToken": display.to_token.model_dump(),
            },
        }


class SwapQuote(BaseModel):
    """Raw 0x swap quote for a token pair, amounts in base units."""

    from_address: str
    from_token_address: str
    to_token_address: str
    calldata: str
    gas: str
    gas_price: str
    slippage_percentage: str
    from_token_amount: str
    to_token_amount: str
