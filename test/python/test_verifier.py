import pytest
from eth_account import Account

from rejuve_registry import signer as signing
from rejuve_registry.config import DATA_DOMAIN_NAME, DOMAIN_VERSION
from rejuve_registry.digest import DigestBuilder, Domain
from rejuve_registry.errors import InvalidSignature, SignatureError, SignatureMismatch
from rejuve_registry.verifier import SECP256K1_N, recover, split_signature, verify

REGISTRY = "0xe7f1725e7734ce288f8367e1bb143e90bb3f0512"
DHASH = bytes.fromhex("622b1092273fe26f6a2c370a5c34a690337e7f802f2fa5006b40790bd3f7d69b")

ALICE = Account.from_key("0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d")
BOB = Account.from_key("0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a")


@pytest.fixture
def signed():
    """(digest, signature) for a DataSubmission signed by Alice"""
    builder = DigestBuilder(Domain(DATA_DOMAIN_NAME, DOMAIN_VERSION, 31337, REGISTRY))
    message = {"signer": ALICE.address, "dhash": DHASH, "nonce": 1}
    digest = builder.digest("DataSubmission", message)
    signature = signing.data_submission_signature(ALICE.address, DHASH, 1, 31337, REGISTRY, ALICE.key)
    return digest, signature


def test_recover_signer(signed):
    digest, signature = signed
    assert recover(digest, signature) == ALICE.address


def test_recover_accepts_hex_signature(signed):
    digest, signature = signed
    assert recover(digest, "0x" + signature.hex()) == ALICE.address


def test_recover_accepts_zero_based_v(signed):
    digest, signature = signed
    zero_based = signature[:64] + bytes([signature[64] - 27])
    assert recover(digest, zero_based) == ALICE.address


def test_other_digest_recovers_other_address(signed):
    digest, signature = signed
    tampered = bytes([digest[0] ^ 1]) + digest[1:]
    try:
        assert recover(tampered, signature) != ALICE.address
    except InvalidSignature:
        pass


def test_verify_mismatch(signed):
    digest, signature = signed
    with pytest.raises(SignatureMismatch) as exc:
        verify(digest, signature, BOB.address)
    assert exc.value.reason == "SignatureMismatch"
    assert exc.value.details["recovered"] == ALICE.address


def test_verify_match(signed):
    digest, signature = signed
    assert verify(digest, signature, ALICE.address.lower()) == ALICE.address


@pytest.mark.parametrize("length", [0, 64, 66])
def test_invalid_length(signed, length):
    digest, signature = signed
    bad = (signature * 2)[:length]
    with pytest.raises(InvalidSignature):
        recover(digest, bad)


@pytest.mark.parametrize("v", [2, 26, 29, 255])
def test_invalid_v(signed, v):
    digest, signature = signed
    with pytest.raises(InvalidSignature):
        recover(digest, signature[:64] + bytes([v]))


def test_zero_r_rejected(signed):
    digest, signature = signed
    with pytest.raises(InvalidSignature):
        recover(digest, b"\x00" * 32 + signature[32:])


def test_high_s_rejected(signed):
    digest, signature = signed
    v, r, s = split_signature(signature)
    malleable = r.to_bytes(32, 'big') + (SECP256K1_N - s).to_bytes(32, 'big') + bytes([55 - v])
    with pytest.raises(InvalidSignature):
        recover(digest, malleable)


def test_invalid_hex_rejected(signed):
    digest, _ = signed
    with pytest.raises(InvalidSignature):
        recover(digest, "0xnothex")


def test_invalid_signature_is_signature_error(signed):
    digest, _ = signed
    with pytest.raises(SignatureError):
        recover(digest, b"")


def test_digest_must_be_32_bytes(signed):
    _, signature = signed
    with pytest.raises(ValueError):
        recover(b"\x01" * 31, signature)
