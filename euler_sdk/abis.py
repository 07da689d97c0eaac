"""
Interface definitions for the Euler modules and tokens.

Only the subset of each module interface used by the SDK and its callers is
bundled here. Full ABIs can be supplied per client with ``Euler.add_contract``.
"""
from typing import Any, Dict, List, Optional


def _params(*pairs: str) -> List[Dict[str, Any]]:
    params = []
    for pair in pairs:
        type_, _, name = pair.partition(" ")
        params.append({"internalType": type_, "name": name, "type": type_})
    return params


def _fn(name: str, inputs=(), outputs=(), mutability: str = "nonpayable") -> Dict[str, Any]:
    return {
        "inputs": _params(*inputs),
        "name": name,
        "outputs": _params(*outputs),
        "stateMutability": mutability,
        "type": "function",
    }


BATCH_ITEM_COMPONENTS = [
    {"internalType": "bool", "name": "allowError", "type": "bool"},
    {"internalType": "address", "name": "proxyAddr", "type": "address"},
    {"internalType": "bytes", "name": "data", "type": "bytes"},
]

BATCH_RESPONSE_COMPONENTS = [
    {"internalType": "bool", "name": "success", "type": "bool"},
    {"internalType": "bytes", "name": "result", "type": "bytes"},
]


def _batch_dispatch(name: str) -> Dict[str, Any]:
    return {
        "inputs": [
            {
                "components": BATCH_ITEM_COMPONENTS,
                "internalType": "struct Exec.EulerBatchItem[]",
                "name": "items",
                "type": "tuple[]",
            },
            {"internalType": "address[]", "name": "deferredLiquidityChecks", "type": "address[]"},
        ],
        "name": name,
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    }


EXEC_ABI = [
    _batch_dispatch("batchDispatch"),
    _batch_dispatch("batchDispatchSimulate"),
    {
        "inputs": [
            {
                "components": BATCH_RESPONSE_COMPONENTS,
                "internalType": "struct Exec.EulerBatchItemResponse[]",
                "name": "simulation",
                "type": "tuple[]",
            }
        ],
        "name": "BatchDispatchSimulation",
        "type": "error",
    },
    _fn("doStaticCall", ["address contractAddress", "bytes payload"], ["bytes"], "view"),
    _fn("getPrice", ["address underlying"], ["uint256 twap", "uint256 twapPeriod"], "view"),
    _fn(
        "getPriceFull",
        ["address underlying"],
        ["uint256 twap", "uint256 twapPeriod", "uint256 currPrice"],
        "view",
    ),
    _fn("pTokenWrap", ["address underlying", "uint256 amount"]),
    _fn("pTokenUnWrap", ["address underlying", "uint256 amount"]),
    _fn(
        "usePermit",
        ["address token", "uint256 value", "uint256 deadline", "uint8 v", "bytes32 r", "bytes32 s"],
    ),
    _fn(
        "usePermitAllowed",
        [
            "address token",
            "uint256 nonce",
            "uint256 expiry",
            "bool allowed",
            "uint8 v",
            "bytes32 r",
            "bytes32 s",
        ],
    ),
    _fn("usePermitPacked", ["address token", "uint256 value", "uint256 deadline", "bytes signature"]),
]

MARKETS_ABI = [
    _fn("activateMarket", ["address underlying"], ["address"]),
    _fn("activatePToken", ["address underlying"], ["address"]),
    _fn("enterMarket", ["uint256 subAccountId", "address newMarket"]),
    _fn("exitMarket", ["uint256 subAccountId", "address oldMarket"]),
    _fn("getEnteredMarkets", ["address account"], ["address[]"], "view"),
    _fn("underlyingToEToken", ["address underlying"], ["address"], "view"),
    _fn("underlyingToDToken", ["address underlying"], ["address"], "view"),
    _fn("underlyingToPToken", ["address underlying"], ["address"], "view"),
    _fn("eTokenToUnderlying", ["address eToken"], ["address underlying"], "view"),
    _fn("dTokenToUnderlying", ["address dToken"], ["address underlying"], "view"),
]

EULER_ABI = [
    _fn("moduleIdToProxy", ["uint256 moduleId"], ["address"], "view"),
    _fn("moduleIdToImplementation", ["uint256 moduleId"], ["address"], "view"),
]

LIQUIDATION_ABI = [
    _fn(
        "liquidate",
        [
            "address violator",
            "address underlying",
            "address collateral",
            "uint256 repay",
            "uint256 minYield",
        ],
    ),
]

SWAP_ABI = [
    {
        "inputs": [
            {
                "components": _params(
                    "uint256 subAccountIdIn",
                    "uint256 subAccountIdOut",
                    "address underlyingIn",
                    "address underlyingOut",
                    "uint256 amountIn",
                    "uint256 amountOutMinimum",
                    "uint256 deadline",
                    "uint24 fee",
                    "uint160 sqrtPriceLimitX96",
                ),
                "internalType": "struct Swap.SwapUniExactInputSingleParams",
                "name": "params",
                "type": "tuple",
            }
        ],
        "name": "swapUniExactInputSingle",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

ERC20_ABI = [
    _fn("name", [], ["string"], "view"),
    _fn("symbol", [], ["string"], "view"),
    _fn("decimals", [], ["uint8"], "view"),
    _fn("totalSupply", [], ["uint256"], "view"),
    _fn("balanceOf", ["address owner"], ["uint256"], "view"),
    _fn("allowance", ["address owner", "address spender"], ["uint256"], "view"),
    _fn("approve", ["address spender", "uint256 value"], ["bool"]),
    _fn("transfer", ["address to", "uint256 value"], ["bool"]),
    _fn("transferFrom", ["address from", "address to", "uint256 value"], ["bool"]),
]

ETOKEN_ABI = ERC20_ABI + [
    _fn("underlyingAsset", [], ["address"], "view"),
    _fn("balanceOfUnderlying", ["address account"], ["uint256"], "view"),
    _fn("convertBalanceToUnderlying", ["uint256 balance"], ["uint256"], "view"),
    _fn("deposit", ["uint256 subAccountId", "uint256 amount"]),
    _fn("withdraw", ["uint256 subAccountId", "uint256 amount"]),
    _fn("mint", ["uint256 subAccountId", "uint256 amount"]),
    _fn("burn", ["uint256 subAccountId", "uint256 amount"]),
]

DTOKEN_ABI = ERC20_ABI + [
    _fn("underlyingAsset", [], ["address"], "view"),
    _fn("borrow", ["uint256 subAccountId", "uint256 amount"]),
    _fn("repay", ["uint256 subAccountId", "uint256 amount"]),
    _fn("approveDebt", ["uint256 subAccountId", "address spender", "uint256 amount"], ["bool"]),
]

PTOKEN_ABI = ERC20_ABI + [
    _fn("underlying", [], ["address"], "view"),
    _fn("wrap", ["uint256 amount"]),
    _fn("unwrap", ["uint256 amount"]),
]

PERMIT_EIP2612_ABI = [
    _fn(
        "permit",
        [
            "address owner",
            "address spender",
            "uint256 value",
            "uint256 deadline",
            "uint8 v",
            "bytes32 r",
            "bytes32 s",
        ],
    ),
    _fn("nonces", ["address owner"], ["uint256"], "view"),
    _fn("_nonces", ["address owner"], ["uint256"], "view"),
]

PERMIT_EIP2612_PACKED_ABI = [
    _fn(
        "permit",
        ["address owner", "address spender", "uint256 value", "uint256 deadline", "bytes signature"],
    ),
    _fn("nonces", ["address owner"], ["uint256"], "view"),
]

PERMIT_ALLOWED_ABI = [
    _fn(
        "permit",
        [
            "address holder",
            "address spender",
            "uint256 nonce",
            "uint256 expiry",
            "bool allowed",
            "uint8 v",
            "bytes32 r",
            "bytes32 s",
        ],
    ),
    _fn("nonces", ["address owner"], ["uint256"], "view"),
]

EUL_ABI = ERC20_ABI + [PERMIT_EIP2612_ABI[0], PERMIT_EIP2612_ABI[1]]

DEFAULT_ABIS: Dict[str, List[Dict[str, Any]]] = {
    "euler": EULER_ABI,
    "exec": EXEC_ABI,
    "liquidation": LIQUIDATION_ABI,
    "markets": MARKETS_ABI,
    "swap": SWAP_ABI,
    "eul": EUL_ABI,
    "eToken": ETOKEN_ABI,
    "dToken": DTOKEN_ABI,
    "pToken": PTOKEN_ABI,
    "erc20": ERC20_ABI,
}


def get_abi(name: str) -> Optional[List[Dict[str, Any]]]:
    """Return the bundled ABI for a contract name, if any."""
    return DEFAULT_ABIS.get(name)
