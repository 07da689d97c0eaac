"""
Utility functions for the Euler SDK.
"""
from typing import Optional, Union

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError as AbiDecodingError
from eth_utils import is_address, to_bytes, to_checksum_address, to_int

from .exceptions import InvalidAddressError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_UINT256 = 2**256 - 1

# Error(string) and Panic(uint256) selectors
ERROR_STRING_SELECTOR = bytes.fromhex("08c379a0")
PANIC_SELECTOR = bytes.fromhex("4e487b71")


def uncapitalize(name: str) -> str:
    return name[:1].lower() + name[1:]


def validate_address(address: str) -> str:
    """
    Validate an address and return it in checksum form.

    Args:
        address: 20-byte hex address (lower-case or checksummed)

    Returns:
        Checksummed address

    Raises:
        InvalidAddressError: If the address is empty or malformed
    """
    if not address or not isinstance(address, str) or not is_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def to_raw_bytes(data: Union[bytes, bytearray, str, None]) -> bytes:
    """Convert hex strings or bytes-like values into plain bytes."""
    if data is None:
        return b""
    if isinstance(data, str):
        return to_bytes(hexstr=data) if data not in ("", "0x") else b""
    return bytes(data)


def decode_revert_reason(data: Union[bytes, str, None]) -> Optional[str]:
    """
    Extract a revert reason from raw revert data.

    ``Error(string)`` payloads yield the string, ``Panic(uint256)`` payloads
    yield ``"panic: 0x.."``. Anything else yields None.
    """
    raw = to_raw_bytes(data)
    try:
        if raw[:4] == ERROR_STRING_SELECTOR:
            (reason,) = abi_decode(["string"], raw[4:])
            return reason
        if raw[:4] == PANIC_SELECTOR:
            (code,) = abi_decode(["uint256"], raw[4:])
            return f"panic: {hex(code)}"
    except (AbiDecodingError, ValueError, OverflowError, UnicodeDecodeError):
        return None
    return None


def get_sub_account_id(primary_address: str, sub_account_address: str) -> int:
    """Return the sub-account id linking two addresses (their XOR)."""
    return to_int(hexstr=validate_address(primary_address)) ^ to_int(
        hexstr=validate_address(sub_account_address)
    )


def is_real_sub_account(primary_address: str, sub_account_address: str) -> bool:
    """Check whether an address is one of the 256 sub-accounts of a primary."""
    return get_sub_account_id(primary_address, sub_account_address) < 256


def get_sub_account(primary_address: str, sub_account_id: int) -> str:
    """
    Derive a sub-account address from a primary address.

    Raises:
        ValueError: If the id is not an integer between 0 and 256
    """
    if isinstance(sub_account_id, bool) or not isinstance(sub_account_id, int):
        raise ValueError(f"invalid subAccountId: {sub_account_id}")
    if sub_account_id < 0 or sub_account_id > 256:
        raise ValueError(f"invalid subAccountId: {sub_account_id}")
    value = to_int(hexstr=validate_address(primary_address)) ^ sub_account_id
    return to_checksum_address("0x" + format(value, "040x"))
