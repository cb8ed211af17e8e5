#!/usr/bin/env python3
"""Fetch a SetToken trade quote and print it as JSON.

Usage:
    python scripts/fetch_trade_quote.py --set 0x... --from-token 0x... \
        --to-token 0x... --amount 1.5 [--chain-id 1] [--slippage 2] [--firm]

Options:
    --set         SetToken address
    --from-token  Component to sell
    --to-token    Component to buy
    --amount      Human readable amount of --from-token
    --chain-id    1 (Ethereum), 10 (Optimism) or 137 (Polygon)
    --slippage    Output slippage tolerance in percent
    --firm        Mark the 0x quote as firm
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv

from setquote.config import get_settings
from setquote.errors import SetQuoteError
from setquote.logging_setup import configure_logging
from setquote.quoting import CoinGeckoDataService, QuoteRequest, TradeQuoteAPI

load_dotenv()

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch a SetToken trade quote")
    parser.add_argument("--set", dest="set_address", required=True, help="SetToken address")
    parser.add_argument("--from-token", required=True, help="Component to sell")
    parser.add_argument("--to-token", required=True, help="Component to buy")
    parser.add_argument("--amount", required=True, help="Amount of --from-token, e.g. 1.5")
    parser.add_argument("--chain-id", type=int, default=1, help="Chain id (default: 1)")
    parser.add_argument("--slippage", type=float, default=None, help="Slippage tolerance in percent")
    parser.add_argument("--firm", action="store_true", help="Request a firm 0x quote")
    return parser.parse_args(argv)


async def fetch_quote(args: argparse.Namespace) -> dict:
    settings = get_settings()

    coingecko = CoinGeckoDataService(
        args.chain_id,
        api_url=settings.coingecko_api_url,
        timeout=settings.http_timeout,
    )
    token_map = await coingecko.fetch_token_map()

    api = TradeQuoteAPI.from_settings(args.chain_id, settings=settings)
    quote = await api.generate(
        QuoteRequest(
            from_token=args.from_token,
            to_token=args.to_token,
            from_address=args.set_address,
            raw_amount=args.amount,
            chain_id=args.chain_id,
            token_map=token_map,
            is_firm_quote=args.firm,
            slippage_percentage=args.slippage,
        )
    )
    return quote.to_dict()


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging()

    try:
        result = asyncio.run(fetch_quote(args))
    except SetQuoteError as e:
        logger.error(f"Quote failed: {type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
