"""
Tests for permit signing and permit batch items.
"""
import pytest
from eth_abi import decode, encode
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import function_signature_to_4byte_selector

from euler_sdk.exceptions import MissingPermitConfigError, UnsupportedPermitStandardError
from euler_sdk.models import PermitConfig, PermitStandard, Signature, SignedPermit, Token
from euler_sdk.permits import build_permit_message, permit_batch_item, sign_permit
from euler_sdk.utils import MAX_UINT256
from tests.test_helpers import ACCOUNT, EULER, EXEC, FakeTransport

TOKEN = "0x8888888888888888888888888888888888888888"
DEADLINE = 1700000000

NONCES = function_signature_to_4byte_selector("nonces(address)")
UNDERSCORE_NONCES = function_signature_to_4byte_selector("_nonces(address)")


def make_token(type_="EIP2612", variant=None):
    permit = {
        "type": type_,
        "domain": {"name": "Test Token", "version": "1", "chainId": 1337, "verifyingContract": TOKEN},
    }
    if variant:
        permit["variant"] = variant
    return {
        "address": TOKEN,
        "chainId": 1337,
        "name": "Test Token",
        "symbol": "TST",
        "decimals": 18,
        "extensions": {"permit": permit},
    }


class RecordingSigner:
    """Signer returning a fixed signature and recording what it signed"""
    address = ACCOUNT

    def __init__(self):
        self.requests = []

    async def sign_typed_data(self, domain, types, message):
        self.requests.append((domain, types, message))
        return b"\x01" * 32 + b"\x02" * 32 + b"\x1b"


@pytest.fixture
def nonce_transport():
    transport = FakeTransport()
    transport.respond(TOKEN, NONCES, encode(["uint256"], [5]))
    transport.respond(TOKEN, UNDERSCORE_NONCES, encode(["uint256"], [9]))
    return transport


def test_permit_standards():
    assert PermitConfig(type="EIP2612", domain={}).standard is PermitStandard.EIP2612
    assert PermitConfig(type="EIP2612", variant="PACKED", domain={}).standard is PermitStandard.EIP2612_PACKED
    assert PermitConfig(type="EIP2612", variant="UNDERSCORE_NONCES", domain={}).standard is PermitStandard.EIP2612
    assert PermitConfig(type="ALLOWED", domain={}).standard is PermitStandard.ALLOWED


def test_unknown_permit_type():
    with pytest.raises(UnsupportedPermitStandardError, match="Unknown permit type: EIP3009"):
        PermitConfig(type="EIP3009", domain={}).standard


def test_eip2612_message_fields():
    types, message = build_permit_message(PermitStandard.EIP2612, ACCOUNT, EULER, 10, True, 3, DEADLINE)
    assert set(message) == {"owner", "spender", "value", "nonce", "deadline"}
    assert [f["name"] for f in types["Permit"]] == ["owner", "spender", "value", "nonce", "deadline"]


def test_allowed_message_fields():
    types, message = build_permit_message(PermitStandard.ALLOWED, ACCOUNT, EULER, 10, False, 3, DEADLINE)
    assert set(message) == {"holder", "spender", "nonce", "expiry", "allowed"}
    assert message["expiry"] == DEADLINE
    assert message["allowed"] is False
    assert [f["name"] for f in types["Permit"]] == ["holder", "spender", "nonce", "expiry", "allowed"]


async def test_sign_eip2612(nonce_transport):
    signer = RecordingSigner()
    signed = await sign_permit(make_token(), EULER, 100, True, DEADLINE, signer, nonce_transport)

    assert signed.nonce == 5
    domain, types, message = signer.requests[0]
    assert domain["verifyingContract"] == TOKEN
    assert message == {"owner": ACCOUNT, "spender": EULER, "value": 100, "nonce": 5, "deadline": DEADLINE}
    assert signed.signature.v == 27
    assert signed.signature.r == b"\x01" * 32
    assert signed.signature.s == b"\x02" * 32


async def test_sign_allowed(nonce_transport):
    signer = RecordingSigner()
    signed = await sign_permit(make_token("ALLOWED"), EULER, 100, True, DEADLINE, signer, nonce_transport)

    _, _, message = signer.requests[0]
    assert message == {"holder": ACCOUNT, "spender": EULER, "nonce": 5, "expiry": DEADLINE, "allowed": True}
    assert signed.nonce == 5


async def test_sign_underscore_nonces(nonce_transport):
    signer = RecordingSigner()
    signed = await sign_permit(
        make_token(variant="UNDERSCORE_NONCES"), EULER, 1, True, DEADLINE, signer, nonce_transport
    )
    assert signed.nonce == 9
    assert nonce_transport.calls[0][1][:4] == UNDERSCORE_NONCES


async def test_nonce_is_read_every_time(nonce_transport):
    signer = RecordingSigner()
    await sign_permit(make_token(), EULER, 1, True, DEADLINE, signer, nonce_transport)
    nonce_transport.respond(TOKEN, NONCES, encode(["uint256"], [6]))
    signed = await sign_permit(make_token(), EULER, 1, True, DEADLINE, signer, nonce_transport)

    assert signed.nonce == 6
    assert len(nonce_transport.calls) == 2


async def test_sign_with_local_signer(signer):
    transport = FakeTransport()
    transport.respond(TOKEN, NONCES, encode(["uint256"], [0]))
    token = make_token()

    signed = await sign_permit(token, EULER, MAX_UINT256, True, DEADLINE, signer, transport)

    types, message = build_permit_message(
        PermitStandard.EIP2612, signer.address, EULER, MAX_UINT256, True, 0, DEADLINE
    )
    encoded = encode_typed_data(
        domain_data=token["extensions"]["permit"]["domain"],
        message_types=types,
        message_data=message,
    )
    assert Account.recover_message(encoded, signature=signed.signature.raw) == signer.address
    assert signed.signature.v in (27, 28)
    assert len(signed.signature.raw) == 65


async def test_missing_permit_config(nonce_transport):
    token = make_token()
    del token["extensions"]
    with pytest.raises(MissingPermitConfigError):
        await sign_permit(token, EULER, 1, True, DEADLINE, RecordingSigner(), nonce_transport)


async def test_missing_token(nonce_transport):
    with pytest.raises(MissingPermitConfigError):
        await sign_permit(None, EULER, 1, True, DEADLINE, RecordingSigner(), nonce_transport)


async def test_invalid_signer(nonce_transport):
    with pytest.raises(ValueError, match="Invalid signer"):
        await sign_permit(make_token(), EULER, 1, True, DEADLINE, None, nonce_transport)


def signed_permit(nonce=5):
    return SignedPermit(signature=Signature.from_raw(b"\x01" * 32 + b"\x02" * 32 + b"\x01"), nonce=nonce)


def test_signature_from_raw_normalizes_v():
    signature = Signature.from_raw(b"\x01" * 32 + b"\x02" * 32 + b"\x00")
    assert signature.v == 27
    assert signature.raw[-1] == 27


def test_signature_from_raw_rejects_bad_length():
    with pytest.raises(ValueError):
        Signature.from_raw(b"\x01" * 64)


def test_packed_batch_item():
    signed = signed_permit()
    item = permit_batch_item(make_token(variant="PACKED"), signed, 100, DEADLINE)
    assert item.contract == "exec"
    assert item.method == "usePermitPacked"
    assert item.args == [TOKEN, 100, DEADLINE, signed.signature.raw]
    assert len(item.args) == 4


def test_eip2612_batch_item():
    signed = signed_permit()
    item = permit_batch_item(make_token(), signed, 100, DEADLINE, allow_error=True)
    assert item.method == "usePermit"
    assert item.args == [TOKEN, 100, DEADLINE, 28, b"\x01" * 32, b"\x02" * 32]
    assert item.allow_error is True


def test_allowed_batch_item():
    signed = signed_permit(nonce=7)
    item = permit_batch_item(make_token("ALLOWED"), signed, 100, DEADLINE, allowed=False)
    assert item.method == "usePermitAllowed"
    assert item.args == [TOKEN, 7, DEADLINE, False, 28, b"\x01" * 32, b"\x02" * 32]


async def test_permit_items_compile(euler):
    signed = signed_permit()
    for token in (make_token(), make_token(variant="PACKED"), make_token("ALLOWED")):
        item = permit_batch_item(Token.model_validate(token), signed, 100, DEADLINE)
        (entry,) = await euler.build_batch([item])
        assert entry.proxy_addr == EXEC
        assert entry.data[:4] == euler.contracts["exec"].schema.get_function(item.method).selector

    (entry,) = await euler.build_batch([permit_batch_item(make_token(variant="PACKED"), signed, 100, DEADLINE)])
    assert decode(["address", "uint256", "uint256", "bytes"], entry.data[4:])[3] == signed.signature.raw
