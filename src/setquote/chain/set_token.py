"""On-chain reads of SetToken composition.

Calls ``manager()``, ``totalSupply()`` and ``getPositions()`` on the SetToken
contract through ``eth_call`` and decodes the results with eth-abi.
"""

import logging
from typing import Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from setquote import assertions
from setquote.chain.rpc import JsonRpcClient
from setquote.errors import ChainReadError
from setquote.quoting.models import Position, SetDetails

logger = logging.getLogger(__name__)

MANAGER_SELECTOR = "0x" + function_signature_to_4byte_selector("manager()").hex()
TOTAL_SUPPLY_SELECTOR = "0x" + function_signature_to_4byte_selector("totalSupply()").hex()
GET_POSITIONS_SELECTOR = "0x" + function_signature_to_4byte_selector("getPositions()").hex()

# ISetToken.Position: component, module, unit, positionState, data
POSITION_ABI = "(address,address,int256,uint8,bytes)[]"


class SetTokenReader:
    """Reads the current composition of a SetToken."""

    def __init__(self, rpc: JsonRpcClient):
        self.rpc = rpc

    async def get_manager_address(self, set_address: str) -> str:
        """Get the manager of a SetToken (lower-cased)."""
        assertions.is_valid_address("setAddress", set_address)
        raw = await self.rpc.eth_call(set_address, MANAGER_SELECTOR)
        (manager,) = self._decode(["address"], raw, "manager()")
        return manager.lower()

    async def get_total_supply(self, set_address: str) -> int:
        assertions.is_valid_address("setAddress", set_address)
        raw = await self.rpc.eth_call(set_address, TOTAL_SUPPLY_SELECTOR)
        (total_supply,) = self._decode(["uint256"], raw, "totalSupply()")
        return total_supply

    async def get_positions(self, set_address: str) -> list[Position]:
        """Get every position (default and external) of a SetToken."""
        assertions.is_valid_address("setAddress", set_address)
        raw = await self.rpc.eth_call(set_address, GET_POSITIONS_SELECTOR)
        (entries,) = self._decode([POSITION_ABI], raw, "getPositions()")
        return [
            Position(
                component=component.lower(),
                module=module.lower(),
                unit=unit,
                position_state=state,
                data=data,
            )
            for component, module, unit, state, data in entries
        ]

    async def fetch_set_details(
        self,
        set_address: str,
        components: Optional[list[str]] = None,
    ) -> SetDetails:
        """Read manager, total supply and positions of a SetToken.

        Args:
            set_address: SetToken address
            components: When given, only default positions of these components
                are returned. Total supply is always read.

        Returns:
            SetDetails snapshot
        """
        set_address = set_address.lower()
        manager = await self.get_manager_address(set_address)
        total_supply = await self.get_total_supply(set_address)
        positions = await self.get_positions(set_address)

        if components is not None:
            wanted = {c.lower() for c in components}
            positions = [p for p in positions if p.is_default and p.component in wanted]

        logger.debug(
            f"Set {set_address}: manager={manager} supply={total_supply} "
            f"positions={len(positions)}"
        )
        return SetDetails(manager=manager, total_supply=total_supply, positions=positions)

    @staticmethod
    def _decode(types: list[str], raw: bytes, call: str) -> tuple:
        try:
            return decode(types, raw)
        except (DecodingError, ValueError) as e:
            raise ChainReadError(f"Could not decode {call} result: {e}", cause=e) from e
