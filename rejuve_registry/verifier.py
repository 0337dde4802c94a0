"""ECDSA signer recovery for detached 65 byte (r || s || v) signatures"""

import logging
from typing import Tuple

from eth_account import Account
from eth_keys.exceptions import BadSignature

from .encoding import BytesLike, as_bytes, normalize_address
from .errors import InvalidInput, InvalidSignature, SignatureMismatch

logger = logging.getLogger(__name__)

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SIGNATURE_LENGTH = 65


def split_signature(signature: BytesLike) -> Tuple[int, int, int]:
    """Split a signature into (v, r, s) with v normalised to 27/28"""
    try:
        sig = as_bytes(signature)
    except InvalidInput as e:
        raise InvalidSignature("ECDSA: invalid signature encoding") from e
    if len(sig) != SIGNATURE_LENGTH:
        raise InvalidSignature("ECDSA: invalid signature length", {"length": len(sig)})

    r = int.from_bytes(sig[0:32], 'big')
    s = int.from_bytes(sig[32:64], 'big')
    v = sig[64]
    if v in (0, 1):
        v += 27
    if v not in (27, 28):
        raise InvalidSignature("ECDSA: invalid signature 'v' value", {"v": sig[64]})
    if not 0 < r < SECP256K1_N or not 0 < s < SECP256K1_N:
        raise InvalidSignature("ECDSA: invalid signature 'r' or 's' value")
    # reject malleable signatures (EIP-2)
    if s > SECP256K1_N // 2:
        raise InvalidSignature("ECDSA: invalid signature 's' value")
    return v, r, s


def recover(digest: bytes, signature: BytesLike) -> str:
    """Recover the checksummed signer address of a 32 byte digest"""
    if len(digest) != 32:
        raise ValueError(f"Digest must be 32 bytes, got {len(digest)}")
    v, r, s = split_signature(signature)
    try:
        return Account._recover_hash(digest, vrs=(v, r, s))
    except (BadSignature, ValueError) as e:
        raise InvalidSignature("ECDSA: invalid signature") from e


def verify(digest: bytes, signature: BytesLike, expected_signer: str) -> str:
    """Recover the signer and require it to be expected_signer"""
    expected = normalize_address(expected_signer)
    recovered = recover(digest, signature)
    if recovered != expected:
        logger.warning("Signature mismatch: recovered %s, expected %s", recovered, expected)
        raise SignatureMismatch(details={"recovered": recovered, "expected": expected})
    return recovered
