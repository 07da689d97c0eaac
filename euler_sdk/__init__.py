"""
Euler SDK - client library for the Euler lending protocol.
"""
from .client import Euler
from .config import NetworkConfig
from .exceptions import (
    ContractRevertError,
    DecodingError,
    EncodingError,
    EulerError,
    InvalidAddressError,
    LengthMismatchError,
    LiquidityCheckError,
    MissingPermitConfigError,
    NoTokenForUnderlyingError,
    TransportError,
    UnknownContractError,
    UnsupportedPermitStandardError,
)
from .models import (
    BatchItem,
    BatchItemError,
    BatchItemResult,
    BatchResponse,
    ContractRef,
    EulerNetwork,
    PermitConfig,
    PermitStandard,
    Signature,
    SignedPermit,
    Token,
    TokenKind,
    WireDispatchEntry,
)
from .resolver import ContractCache, ContractResolver
from .schema import ContractTarget, InterfaceSchema
from .signer import Signer
from .signer.local import LocalSigner
from .simulation import SimulationResult
from .transport import Transport, Web3Transport
from .version import __version__

__all__ = [
    "Euler",
    "NetworkConfig",
    "Signer",
    "LocalSigner",
    "ContractCache",
    "ContractResolver",
    "ContractTarget",
    "InterfaceSchema",
    "Transport",
    "Web3Transport",
    "SimulationResult",
    "BatchItem",
    "BatchItemError",
    "BatchItemResult",
    "BatchResponse",
    "ContractRef",
    "EulerNetwork",
    "PermitConfig",
    "PermitStandard",
    "Signature",
    "SignedPermit",
    "Token",
    "TokenKind",
    "WireDispatchEntry",
    "EulerError",
    "InvalidAddressError",
    "UnknownContractError",
    "NoTokenForUnderlyingError",
    "EncodingError",
    "DecodingError",
    "LengthMismatchError",
    "MissingPermitConfigError",
    "UnsupportedPermitStandardError",
    "LiquidityCheckError",
    "TransportError",
    "ContractRevertError",
    "__version__",
]
