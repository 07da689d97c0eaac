from .client_creator import (
    create_test_client,
    encode_error_string,
    encode_simulation_error,
    FakeTransport,
    TEST_PRIV_KEY,
    TEST_NETWORK,
    EULER,
    EXEC,
    LIQUIDATION,
    MARKETS,
    SWAP,
    WETH,
    USDC,
    USDC_ETOKEN,
    USDC_DTOKEN,
    USDC_PTOKEN,
    ACCOUNT,
)
