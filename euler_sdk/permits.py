"""
Off-chain permit signing for EIP-2612, packed EIP-2612 and DAI-style
"allowed" permits, and conversion of signed permits into batch items.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from .abis import PERMIT_ALLOWED_ABI, PERMIT_EIP2612_ABI, PERMIT_EIP2612_PACKED_ABI
from .exceptions import MissingPermitConfigError, UnsupportedPermitStandardError
from .models import BatchItem, PermitConfig, PermitStandard, Signature, SignedPermit, Token
from .schema import InterfaceSchema
from .signer import Signer
from .transport import Transport
from .utils import validate_address

logger = logging.getLogger(__name__)

TYPES_PERMIT_EIP2612 = {
    "Permit": [
        {"name": "owner", "type": "address"},
        {"name": "spender", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ]
}

TYPES_PERMIT_ALLOWED = {
    "Permit": [
        {"name": "holder", "type": "address"},
        {"name": "spender", "type": "address"},
        {"name": "nonce", "type": "uint256"},
        {"name": "expiry", "type": "uint256"},
        {"name": "allowed", "type": "bool"},
    ]
}

PERMIT_SCHEMAS = {
    PermitStandard.EIP2612: InterfaceSchema(PERMIT_EIP2612_ABI, name="permitEIP2612"),
    PermitStandard.EIP2612_PACKED: InterfaceSchema(PERMIT_EIP2612_PACKED_ABI, name="permitEIP2612Packed"),
    PermitStandard.ALLOWED: InterfaceSchema(PERMIT_ALLOWED_ABI, name="permitAllowed"),
}


def get_permit_config(token: Union[Token, Dict[str, Any]]) -> Tuple[Token, PermitConfig]:
    """
    Return the token and its permit configuration.

    Raises:
        MissingPermitConfigError: If the token has no ``extensions.permit``
    """
    if not token:
        raise MissingPermitConfigError("Invalid token or missing permit config")
    if not isinstance(token, Token):
        token = Token.model_validate(token)
    if token.permit is None:
        raise MissingPermitConfigError("Invalid token or missing permit config")
    return token, token.permit


def build_permit_message(
    standard: PermitStandard,
    owner: str,
    spender: str,
    value: int,
    allowed: bool,
    nonce: int,
    deadline: int,
) -> Tuple[Dict[str, List[Dict[str, str]]], Dict[str, Any]]:
    """
    Build the EIP-712 types and message for a permit standard.

    EIP2612 (packed or not) signs ``{owner, spender, value, nonce, deadline}``;
    ALLOWED signs ``{holder, spender, nonce, expiry, allowed}``.
    """
    if standard in (PermitStandard.EIP2612, PermitStandard.EIP2612_PACKED):
        return TYPES_PERMIT_EIP2612, {
            "owner": owner,
            "spender": spender,
            "value": int(value),
            "nonce": int(nonce),
            "deadline": int(deadline),
        }
    if standard is PermitStandard.ALLOWED:
        return TYPES_PERMIT_ALLOWED, {
            "holder": owner,
            "spender": spender,
            "nonce": int(nonce),
            "expiry": int(deadline),
            "allowed": bool(allowed),
        }
    raise UnsupportedPermitStandardError(f"Unknown permit type: {standard}")


async def fetch_nonce(token_address: str, config: PermitConfig, owner: str, transport: Transport) -> int:
    """Read the current permit nonce of ``owner``; never cached."""
    schema = PERMIT_SCHEMAS[config.standard]
    method = config.nonce_method
    raw = await transport.call(token_address, schema.encode(method, [owner]))
    (nonce,) = schema.decode(method, raw)
    logger.debug(f"Fetched {method} for {owner} on {token_address}: {nonce}")
    return nonce


async def sign_permit(
    token: Union[Token, Dict[str, Any]],
    spender: str,
    value: int,
    allowed: bool,
    deadline: int,
    signer: Signer,
    transport: Transport,
) -> SignedPermit:
    """
    Sign a permit for ``token``.

    Args:
        token: Token list entry with ``extensions.permit``
        spender: Address allowed to spend
        value: Amount for EIP2612 permits
        allowed: Approval flag for ALLOWED permits
        deadline: Unix timestamp (expiry for ALLOWED permits)
        signer: Signer producing the typed-data signature
        transport: Transport used to read the nonce

    Returns:
        SignedPermit with the split and raw signature and the nonce used

    Raises:
        MissingPermitConfigError: If the token has no permit configuration
        UnsupportedPermitStandardError: If the permit type is unknown
    """
    if signer is None or not hasattr(signer, "sign_typed_data"):
        raise ValueError("Invalid signer")
    token, config = get_permit_config(token)
    standard = config.standard
    token_address = validate_address(token.address)
    spender = validate_address(spender)
    owner = signer.address

    nonce = await fetch_nonce(token_address, config, owner, transport)
    types, message = build_permit_message(standard, owner, spender, value, allowed, nonce, deadline)
    raw = await signer.sign_typed_data(config.domain, types, message)

    return SignedPermit(signature=Signature.from_raw(raw), nonce=nonce)


def permit_batch_item(
    token: Union[Token, Dict[str, Any]],
    signed: SignedPermit,
    value: int,
    deadline: int,
    allowed: bool = True,
    allow_error: bool = False,
) -> BatchItem:
    """
    Convert a signed permit into an ``exec`` batch item.

    - EIP2612 packed: ``usePermitPacked(token, value, deadline, signature)``
    - EIP2612: ``usePermit(token, value, deadline, v, r, s)``
    - ALLOWED: ``usePermitAllowed(token, nonce, deadline, allowed, v, r, s)``
    """
    token, config = get_permit_config(token)
    standard = config.standard
    signature = signed.signature

    if standard is PermitStandard.EIP2612_PACKED:
        method = "usePermitPacked"
        args = [token.address, value, deadline, signature.raw]
    elif standard is PermitStandard.EIP2612:
        method = "usePermit"
        args = [token.address, value, deadline, signature.v, signature.r, signature.s]
    elif standard is PermitStandard.ALLOWED:
        method = "usePermitAllowed"
        args = [token.address, signed.nonce, deadline, allowed, signature.v, signature.r, signature.s]
    else:
        raise UnsupportedPermitStandardError(f"Unknown permit type: {standard}")

    return BatchItem(contract="exec", method=method, args=args, allow_error=allow_error)
