"""
Tests for the utils module.
"""
import pytest
from eth_abi import encode
from eth_utils import to_checksum_address

from euler_sdk.exceptions import InvalidAddressError
from euler_sdk.utils import (
    decode_revert_reason,
    get_sub_account,
    get_sub_account_id,
    is_real_sub_account,
    to_raw_bytes,
    uncapitalize,
    validate_address,
)
from tests.test_helpers import encode_error_string

PRIMARY = "0x1111111111111111111111111111111111111100"


def test_uncapitalize():
    assert uncapitalize("Exec") == "exec"
    assert uncapitalize("eToken") == "eToken"
    assert uncapitalize("") == ""


def test_validate_address_checksums():
    lower = "0xd9fcd98c322942075a5c3860693e9f4f03aae07b"
    checksummed = validate_address(lower)
    assert checksummed == to_checksum_address(lower)
    assert validate_address(checksummed) == checksummed


@pytest.mark.parametrize("address", ["", None, "0x1234", "not an address", 1234])
def test_validate_address_rejects(address):
    with pytest.raises(InvalidAddressError):
        validate_address(address)


def test_validate_address_rejects_bad_checksum():
    checksummed = to_checksum_address("0xd9fcd98c322942075a5c3860693e9f4f03aae07b")
    # Flip the case of the first letter to break the checksum
    index = next(i for i, c in enumerate(checksummed[2:], 2) if c.isalpha())
    broken = checksummed[:index] + checksummed[index].swapcase() + checksummed[index + 1:]
    with pytest.raises(InvalidAddressError):
        validate_address(broken)


def test_decode_revert_reason_error_string():
    assert decode_revert_reason(encode_error_string("e/collateral-violation")) == "e/collateral-violation"


def test_decode_revert_reason_hex_string():
    data = "0x" + encode_error_string("e/insufficient-balance").hex()
    assert decode_revert_reason(data) == "e/insufficient-balance"


def test_decode_revert_reason_panic():
    data = bytes.fromhex("4e487b71") + encode(["uint256"], [0x11])
    assert decode_revert_reason(data) == "panic: 0x11"


@pytest.mark.parametrize("data", [b"", None, b"\x01\x02", bytes.fromhex("08c379a0") + b"\x00"])
def test_decode_revert_reason_unknown(data):
    assert decode_revert_reason(data) is None


def test_to_raw_bytes():
    assert to_raw_bytes("0x") == b""
    assert to_raw_bytes("0x0102") == b"\x01\x02"
    assert to_raw_bytes(bytearray(b"\x03")) == b"\x03"


def test_sub_accounts():
    sub = get_sub_account(PRIMARY, 1)
    assert sub == "0x1111111111111111111111111111111111111101"
    assert get_sub_account_id(PRIMARY, sub) == 1
    assert is_real_sub_account(PRIMARY, sub)
    assert get_sub_account(PRIMARY, 0) == PRIMARY


def test_unrelated_account_is_not_sub_account():
    assert not is_real_sub_account(PRIMARY, "0x2222222222222222222222222222222222222222")


@pytest.mark.parametrize("sub_account_id", [257, -1, 1.5, "1", True])
def test_get_sub_account_invalid_id(sub_account_id):
    with pytest.raises(ValueError, match="invalid subAccountId"):
        get_sub_account(PRIMARY, sub_account_id)
