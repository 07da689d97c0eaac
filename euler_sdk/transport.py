"""
RPC transport used by the SDK to read contracts and estimate gas.
"""
import logging
from typing import Any, Dict, Optional, Protocol

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import ContractLogicError

from .exceptions import ContractRevertError
from .utils import decode_revert_reason, to_raw_bytes

logger = logging.getLogger(__name__)

_REVERT_PREFIX = "execution reverted: "


class Transport(Protocol):
    """Protocol for the network capabilities the SDK depends on"""

    async def call(self, to: str, data: bytes, sender: Optional[str] = None) -> bytes:
        """Execute a read-only call and return the raw return data"""
        ...

    async def estimate_gas(self, to: str, data: bytes, sender: Optional[str] = None) -> int:
        """Estimate gas for a state-changing call"""
        ...


def revert_from_web3(e: ContractLogicError) -> ContractRevertError:
    """
    Convert a web3 revert into a ContractRevertError.

    The reason is decoded from the revert data when it carries an
    ``Error(string)`` payload, otherwise taken from the node's message.
    """
    data = e.data if isinstance(e.data, (bytes, bytearray, str)) else None
    try:
        raw = to_raw_bytes(data)
    except ValueError:
        raw = b""
    reason = decode_revert_reason(raw)
    message = getattr(e, "message", None) or str(e)
    if reason is None and isinstance(message, str) and not message.startswith("0x"):
        reason = message[len(_REVERT_PREFIX):] if message.startswith(_REVERT_PREFIX) else message
    return ContractRevertError(message, reason=reason, data=raw)


class Web3Transport:
    """
    Transport backed by an AsyncWeb3 instance.

    Reverts are raised as ContractRevertError; every other exception from
    web3 or the provider propagates unchanged.
    """

    def __init__(self, w3: AsyncWeb3, logger: Optional[logging.Logger] = None):
        self.w3 = w3
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_rpc_url(cls, rpc_url: str, timeout: int = 30) -> "Web3Transport":
        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        return cls(w3)

    def _tx(self, to: str, data: bytes, sender: Optional[str]) -> Dict[str, Any]:
        tx: Dict[str, Any] = {"to": to, "data": "0x" + bytes(data).hex()}
        if sender:
            tx["from"] = sender
        return tx

    async def call(self, to: str, data: bytes, sender: Optional[str] = None) -> bytes:
        try:
            result = await self.w3.eth.call(self._tx(to, data, sender))
        except ContractLogicError as e:
            self.logger.debug(f"eth_call to {to} reverted: {e}")
            raise revert_from_web3(e) from e
        return bytes(result)

    async def estimate_gas(self, to: str, data: bytes, sender: Optional[str] = None) -> int:
        try:
            gas = await self.w3.eth.estimate_gas(self._tx(to, data, sender))
        except ContractLogicError as e:
            self.logger.debug(f"eth_estimateGas to {to} reverted: {e}")
            raise revert_from_web3(e) from e
        return int(gas)
