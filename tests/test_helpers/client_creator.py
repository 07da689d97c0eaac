"""
Utility functions and fakes for creating test clients.
"""
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from euler_sdk.client import Euler
from euler_sdk.resolver import ContractCache

# Test constants used throughout tests
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"

EULER = "0x1111111111111111111111111111111111111111"
EXEC = "0x2222222222222222222222222222222222222222"
LIQUIDATION = "0x3333333333333333333333333333333333333333"
MARKETS = "0x4444444444444444444444444444444444444444"
SWAP = "0x5555555555555555555555555555555555555555"
WETH = "0x6666666666666666666666666666666666666666"

USDC = "0x1212121212121212121212121212121212121212"
USDC_ETOKEN = "0x1313131313131313131313131313131313131313"
USDC_DTOKEN = "0x1414141414141414141414141414141414141414"
USDC_PTOKEN = "0x1515151515151515151515151515151515151515"

ACCOUNT = "0x7777777777777777777777777777777777777777"

TEST_NETWORK = {
    "chainId": 1337,
    "rpc": "http://localhost:8545",
    "referenceAsset": WETH,
    "addresses": {
        "euler": EULER,
        "exec": EXEC,
        "liquidation": LIQUIDATION,
        "markets": MARKETS,
        "swap": SWAP,
    },
}

Response = Union[bytes, Exception, Callable[[bytes], bytes]]


def encode_error_string(reason: str) -> bytes:
    """Encode an ``Error(string)`` revert payload"""
    return bytes.fromhex("08c379a0") + encode(["string"], [reason])


def encode_simulation_error(responses: Sequence[Tuple[bool, bytes]]) -> bytes:
    """Encode a ``BatchDispatchSimulation`` revert payload"""
    selector = function_signature_to_4byte_selector("BatchDispatchSimulation((bool,bytes)[])")
    return selector + encode(["(bool,bytes)[]"], [list(responses)])


class FakeTransport:
    """
    In-memory transport answering calls by (address, calldata prefix).

    Every call and gas estimate is recorded for assertions.
    """

    def __init__(self, gas: int = 250000):
        self.calls: List[Tuple[str, bytes, Optional[str]]] = []
        self.gas_calls: List[Tuple[str, bytes, Optional[str]]] = []
        self.gas = gas
        self.gas_error: Optional[Exception] = None
        self._responses: List[Tuple[str, bytes, Response]] = []

    def respond(self, to: str, prefix: bytes, response: Response) -> None:
        self._responses.insert(0, (to, bytes(prefix), response))

    async def call(self, to: str, data: bytes, sender: Optional[str] = None) -> bytes:
        data = bytes(data)
        self.calls.append((to, data, sender))
        for address, prefix, response in self._responses:
            if address == to and data.startswith(prefix):
                if isinstance(response, Exception):
                    raise response
                if callable(response):
                    return response(data)
                return response
        raise AssertionError(f"Unexpected call to {to}: 0x{data.hex()}")

    async def estimate_gas(self, to: str, data: bytes, sender: Optional[str] = None) -> int:
        self.gas_calls.append((to, bytes(data), sender))
        if self.gas_error is not None:
            raise self.gas_error
        return self.gas


def create_test_client(
    transport: Optional[FakeTransport] = None,
    signer: Any = None,
    network: Optional[dict] = None,
    cache: Optional[ContractCache] = None,
    **kwargs
) -> Euler:
    """
    Create a client against the test network with consistent defaults.

    Args:
        transport: Transport (a fresh FakeTransport by default)
        signer: Optional signer
        network: Network config (TEST_NETWORK by default)
        cache: Optional contract cache (a fresh one by default)
        **kwargs: Additional parameters

    Returns:
        Configured Euler instance
    """
    return Euler(
        transport=transport if transport is not None else FakeTransport(),
        chain_id=(network or TEST_NETWORK)["chainId"],
        network=network or TEST_NETWORK,
        signer=signer,
        cache=cache if cache is not None else ContractCache(),
        **kwargs
    )
