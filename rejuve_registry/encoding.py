"""Normalisation helpers for addresses and byte fields"""

from typing import Union

from eth_utils import is_address, to_bytes, to_checksum_address

from .config import ZERO_ADDRESS
from .errors import InvalidInput, ZeroAddress

BytesLike = Union[bytes, bytearray, str]


def as_bytes(value: BytesLike) -> bytes:
    """Convert a hex string (0x-prefixed or bare) or bytes-like value to bytes"""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return to_bytes(hexstr=value)
        except ValueError as e:
            raise InvalidInput(f"REJUVE: Invalid hex value {value!r}") from e
    raise InvalidInput(f"REJUVE: Unsupported byte value type {type(value).__name__}")


def as_bytes32(value: BytesLike) -> bytes:
    """Convert to exactly 32 bytes, left padding short values like abi bytes32 literals"""
    raw = as_bytes(value)
    if len(raw) > 32:
        raise InvalidInput(f"REJUVE: Expected 32 bytes, got {len(raw)}")
    return raw.rjust(32, b"\x00")


def normalize_address(value: str) -> str:
    """Return the checksummed form of an address"""
    if not isinstance(value, str) or not is_address(value):
        raise InvalidInput(f"REJUVE: Invalid address {value!r}")
    return to_checksum_address(value)


def require_address(value: str) -> str:
    """Checksum an address and reject the zero address"""
    address = normalize_address(value)
    if address == ZERO_ADDRESS:
        raise ZeroAddress()
    return address
