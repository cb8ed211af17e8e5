"""Tests for JSON-RPC reads of SetToken composition."""

import json

import httpx
import pytest
from eth_abi import encode

from conftest import (
    MANAGER_ADDRESS,
    MODULE_ADDRESS,
    SET_ADDRESS,
    USDC,
    WBTC,
    WBTC_CHECKSUM,
    WETH,
)
from setquote.chain.rpc import JsonRpcClient
from setquote.chain.set_token import (
    GET_POSITIONS_SELECTOR,
    MANAGER_SELECTOR,
    POSITION_ABI,
    TOTAL_SUPPLY_SELECTOR,
    SetTokenReader,
)
from setquote.errors import ChainReadError, InputError

RPC_URL = "https://rpc.test"

POSITIONS = [
    (USDC, MODULE_ADDRESS, 200_000_000, 0, b""),
    (WBTC, MODULE_ADDRESS, 1_000, 0, b""),
    # External position of the same component, ignored when filtering
    (USDC, MODULE_ADDRESS, 5_000, 1, b"\x01"),
    (WETH, MODULE_ADDRESS, 10**17, 0, b""),
]


def set_token_node(manager=MANAGER_ADDRESS, total_supply=1000 * 10**18, positions=POSITIONS):
    """Handler answering eth_call for manager(), totalSupply() and getPositions()."""
    results = {
        MANAGER_SELECTOR: encode(["address"], [manager]),
        TOTAL_SUPPLY_SELECTOR: encode(["uint256"], [total_supply]),
        GET_POSITIONS_SELECTOR: encode([POSITION_ABI], [positions]),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        assert payload["method"] == "eth_call"
        call, block = payload["params"]
        assert block == "latest"
        result = "0x" + results[call["data"]].hex()
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    return handler


def make_reader(handler) -> SetTokenReader:
    return SetTokenReader(JsonRpcClient(RPC_URL, transport=httpx.MockTransport(handler)))


class TestSelectors:
    def test_known_selectors(self):
        assert MANAGER_SELECTOR == "0x481c6a75"
        assert TOTAL_SUPPLY_SELECTOR == "0x18160ddd"


class TestSetTokenReader:
    """Tests for SetTokenReader."""

    @pytest.mark.asyncio
    async def test_manager_and_supply(self):
        reader = make_reader(set_token_node())

        assert await reader.get_manager_address(SET_ADDRESS) == MANAGER_ADDRESS
        assert await reader.get_total_supply(SET_ADDRESS) == 1000 * 10**18

    @pytest.mark.asyncio
    async def test_all_positions(self):
        reader = make_reader(set_token_node())

        positions = await reader.get_positions(SET_ADDRESS)

        assert len(positions) == 4
        assert positions[0].component == USDC
        assert positions[0].module == MODULE_ADDRESS
        assert positions[0].unit == 200_000_000
        assert positions[0].is_default
        assert not positions[2].is_default
        assert positions[2].data == b"\x01"

    @pytest.mark.asyncio
    async def test_fetch_set_details_filters_components(self):
        reader = make_reader(set_token_node())

        details = await reader.fetch_set_details(SET_ADDRESS, [USDC, WBTC_CHECKSUM])

        assert details.manager == MANAGER_ADDRESS
        assert details.total_supply == 1000 * 10**18
        assert [(p.component, p.unit) for p in details.positions] == [
            (USDC, 200_000_000),
            (WBTC, 1_000),
        ]
        assert details.find_position(USDC).unit == 200_000_000

    @pytest.mark.asyncio
    async def test_fetch_set_details_without_filter(self):
        reader = make_reader(set_token_node())

        details = await reader.fetch_set_details(SET_ADDRESS)

        assert len(details.positions) == 4

    @pytest.mark.asyncio
    async def test_negative_units_decode(self):
        positions = [(USDC, MODULE_ADDRESS, -42, 0, b"")]
        reader = make_reader(set_token_node(positions=positions))

        (position,) = await reader.get_positions(SET_ADDRESS)

        assert position.unit == -42

    @pytest.mark.asyncio
    async def test_invalid_set_address(self):
        reader = make_reader(set_token_node())

        with pytest.raises(InputError):
            await reader.fetch_set_details("0x1234")

    @pytest.mark.asyncio
    async def test_rpc_error_raises(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "execution reverted"}},
            )

        reader = make_reader(handler)

        with pytest.raises(ChainReadError, match="execution reverted"):
            await reader.get_manager_address(SET_ADDRESS)

    @pytest.mark.asyncio
    async def test_empty_result_raises(self):
        def handler(request):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x"})

        reader = make_reader(handler)

        with pytest.raises(ChainReadError, match="empty data"):
            await reader.get_total_supply(SET_ADDRESS)

    @pytest.mark.asyncio
    async def test_undecodable_result_raises(self):
        def handler(request):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x1234"})

        reader = make_reader(handler)

        with pytest.raises(ChainReadError, match="Could not decode"):
            await reader.get_total_supply(SET_ADDRESS)


class TestJsonRpcClient:
    """Tests for JsonRpcClient error handling."""

    @pytest.mark.asyncio
    async def test_http_status_error(self):
        client = JsonRpcClient(
            RPC_URL, transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad"))
        )

        with pytest.raises(ChainReadError, match="HTTP 502"):
            await client.request("eth_blockNumber", [])

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = JsonRpcClient(RPC_URL, transport=httpx.MockTransport(handler))

        with pytest.raises(ChainReadError):
            await client.request("eth_blockNumber", [])

    @pytest.mark.asyncio
    async def test_request_ids_increment(self):
        ids = []

        def handler(request):
            payload = json.loads(request.content)
            ids.append(payload["id"])
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": "0x1"})

        client = JsonRpcClient(RPC_URL, transport=httpx.MockTransport(handler))
        await client.request("eth_blockNumber", [])
        await client.request("eth_blockNumber", [])

        assert ids == [1, 2]
