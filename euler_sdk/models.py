"""
Data models for the Euler SDK.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .exceptions import UnsupportedPermitStandardError
from .schema import ContractTarget

PACKED_VARIANT = "PACKED"
UNDERSCORE_NONCES_VARIANT = "UNDERSCORE_NONCES"


class TokenKind(str, Enum):
    """Per-asset token roles"""
    ETOKEN = "eToken"
    DTOKEN = "dToken"
    PTOKEN = "pToken"
    ERC20 = "erc20"


class ContractRef(BaseModel):
    """
    Logical reference to a contract.

    Either a singleton role (``exec``, ``markets``...), a token role bound to
    a token address, a token role bound to an underlying asset, or a named
    interface at an explicit address.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    address: Optional[str] = None
    underlying: Optional[str] = None

    @classmethod
    def singleton(cls, name: str) -> "ContractRef":
        return cls(name=name)

    @classmethod
    def token(cls, kind: Union[TokenKind, str], address: str) -> "ContractRef":
        return cls(name=TokenKind(kind).value, address=address)

    @classmethod
    def for_underlying(cls, kind: Union[TokenKind, str], underlying: str) -> "ContractRef":
        return cls(name=TokenKind(kind).value, underlying=underlying)


ContractLike = Union[str, ContractRef, ContractTarget]


class BatchItem(BaseModel):
    """One call in a batch, optionally wrapping a static call"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    contract: Optional[ContractLike] = None
    address: Optional[str] = None
    method: Optional[str] = None
    args: List[Any] = Field(default_factory=list)
    allow_error: bool = False
    static_call: Optional["BatchItem"] = None

    @model_validator(mode="after")
    def _check_shape(self) -> "BatchItem":
        if self.static_call is not None:
            if self.static_call.static_call is not None:
                raise ValueError("static calls cannot be nested")
            return self
        if self.contract is None or not self.method:
            raise ValueError("batch item requires a contract and a method")
        return self

    @classmethod
    def static(cls, inner: "BatchItem") -> "BatchItem":
        """Wrap ``inner`` so it is executed through ``exec.doStaticCall``"""
        return cls(static_call=inner)

    @property
    def is_static_call(self) -> bool:
        return self.static_call is not None

    @property
    def effective(self) -> "BatchItem":
        """The item whose method defines how results are decoded"""
        return self.static_call if self.static_call is not None else self


class WireDispatchEntry(BaseModel):
    """Entry consumed by ``exec.batchDispatch``"""
    model_config = ConfigDict(frozen=True)

    allow_error: bool
    proxy_addr: str
    data: bytes

    def as_tuple(self) -> Tuple[bool, str, bytes]:
        return (self.allow_error, self.proxy_addr, self.data)


class BatchResponse(BaseModel):
    """Raw per-item response of a batch dispatch"""
    model_config = ConfigDict(frozen=True)

    success: bool
    result: bytes = b""


class BatchItemError(BaseModel):
    """Why a batch item failed"""
    reason: Optional[str] = None
    message: str
    data: bytes = b""


class BatchItemResult(BaseModel):
    """Decoded result of one batch item"""
    success: bool
    values: Optional[List[Any]] = None
    error: Optional[BatchItemError] = None


class PermitStandard(str, Enum):
    EIP2612 = "EIP2612"
    EIP2612_PACKED = "EIP2612_PACKED"
    ALLOWED = "ALLOWED"


class Signature(BaseModel):
    """ECDSA signature, split and raw"""
    model_config = ConfigDict(frozen=True)

    v: int
    r: bytes
    s: bytes
    raw: bytes

    @classmethod
    def from_raw(cls, raw: bytes) -> "Signature":
        raw = bytes(raw)
        if len(raw) != 65:
            raise ValueError(f"Expected a 65-byte signature, got {len(raw)} bytes")
        v = raw[64]
        if v < 27:
            v += 27
        return cls(v=v, r=raw[:32], s=raw[32:64], raw=raw[:64] + bytes([v]))


class SignedPermit(BaseModel):
    """Permit signature with the nonce it was signed for"""
    model_config = ConfigDict(frozen=True)

    signature: Signature
    nonce: int


class PermitConfig(BaseModel):
    """``extensions.permit`` entry of a token list token"""
    model_config = ConfigDict(frozen=True)

    type: str
    variant: Optional[str] = None
    domain: Dict[str, Any]

    @property
    def standard(self) -> PermitStandard:
        """
        Map the token list type/variant pair onto a permit standard.

        Raises:
            UnsupportedPermitStandardError: If the type is not EIP2612 or ALLOWED
        """
        if self.type == "EIP2612":
            if self.variant == PACKED_VARIANT:
                return PermitStandard.EIP2612_PACKED
            return PermitStandard.EIP2612
        if self.type == "ALLOWED":
            return PermitStandard.ALLOWED
        raise UnsupportedPermitStandardError(f"Unknown permit type: {self.type}")

    @property
    def nonce_method(self) -> str:
        return "_nonces" if self.variant == UNDERSCORE_NONCES_VARIANT else "nonces"


class TokenExtensions(BaseModel):
    model_config = ConfigDict(extra="allow")

    permit: Optional[PermitConfig] = None


class Token(BaseModel):
    """Token list entry"""
    model_config = ConfigDict(populate_by_name=True)

    address: str
    chain_id: int = Field(1, alias="chainId")
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    image: Optional[str] = None
    extensions: Optional[TokenExtensions] = None

    @property
    def permit(self) -> Optional[PermitConfig]:
        return self.extensions.permit if self.extensions else None


class EulerNetwork(BaseModel):
    """Addresses and reference asset of a deployment"""
    model_config = ConfigDict(populate_by_name=True)

    chain_id: int = Field(..., alias="chainId")
    rpc: Optional[str] = None
    reference_asset: str = Field(..., alias="referenceAsset")
    addresses: Dict[str, str]
    eul: Optional[Token] = None
