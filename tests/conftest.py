"""
Pytest fixtures for the Euler SDK tests.
"""
import pytest
from eth_abi import encode

from euler_sdk.abis import MARKETS_ABI
from euler_sdk.config import NetworkConfig
from euler_sdk.schema import InterfaceSchema
from euler_sdk.signer.local import LocalSigner
from tests.test_helpers import (
    create_test_client,
    FakeTransport,
    TEST_PRIV_KEY,
    USDC,
    USDC_ETOKEN,
    USDC_DTOKEN,
    MARKETS,
)

_markets = InterfaceSchema(MARKETS_ABI, name="markets")


@pytest.fixture(autouse=True)
def _reset_network_cache():
    """Make every test load networks.json from scratch"""
    NetworkConfig._networks_cache = None
    yield
    NetworkConfig._networks_cache = None


@pytest.fixture
def transport():
    """Fake transport knowing the USDC market"""
    fake = FakeTransport()
    fake.respond(
        MARKETS,
        _markets.encode("underlyingToEToken", [USDC]),
        encode(["address"], [USDC_ETOKEN]),
    )
    fake.respond(
        MARKETS,
        _markets.encode("underlyingToDToken", [USDC]),
        encode(["address"], [USDC_DTOKEN]),
    )
    return fake


@pytest.fixture
def signer():
    """Deterministic local signer"""
    return LocalSigner(TEST_PRIV_KEY)


@pytest.fixture
def euler(transport, signer):
    """Client on the test network using the fake transport"""
    return create_test_client(transport=transport, signer=signer)
