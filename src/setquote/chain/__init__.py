"""Read-only access to deployed Set Protocol contracts."""

from setquote.chain.rpc import JsonRpcClient
from setquote.chain.set_token import SetTokenReader

__all__ = ["JsonRpcClient", "SetTokenReader"]
