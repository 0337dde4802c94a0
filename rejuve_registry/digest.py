"""
EIP712 digest construction for sponsored registry operations.

Every signed operation is hashed as

    keccak256(0x1901 || domainSeparator || hashStruct(message))

where the domain separator binds the registry name, version, chain id and
the verifying registry address, so a signature for one deployment can not
be replayed against another. Dynamic ``string`` and ``bytes`` members are
hashed individually before abi encoding which keeps the encoding injective.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from eth_abi import encode
from eth_utils import keccak

from .encoding import as_bytes, as_bytes32, normalize_address

logger = logging.getLogger(__name__)

EIP712_DOMAIN_FIELDS = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

# Operation types (matching the typed data signed by wallets)
OPERATION_TYPES: Dict[str, List[Dict[str, str]]] = {
    "Identity": [
        {"name": "kyc", "type": "bytes32"},
        {"name": "signer", "type": "address"},
        {"name": "uri", "type": "string"},
        {"name": "nonce", "type": "uint256"},
    ],
    "DataSubmission": [
        {"name": "signer", "type": "address"},
        {"name": "dhash", "type": "bytes"},
        {"name": "nonce", "type": "uint256"},
    ],
    "Permission": [
        {"name": "dataowner", "type": "address"},
        {"name": "requesterId", "type": "uint256"},
        {"name": "dhash", "type": "bytes"},
        {"name": "productId", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "expiration", "type": "uint256"},
    ],
    "Agreement": [
        {"name": "distributor", "type": "address"},
        {"name": "terms", "type": "bytes"},
        {"name": "nonce", "type": "uint256"},
    ],
}


def encode_type(primary_type: str, members: List[Dict[str, str]]) -> str:
    """Build the EIP712 type string, e.g. DataSubmission(address signer,bytes dhash,uint256 nonce)"""
    return f"{primary_type}(" + ",".join(f"{m['type']} {m['name']}" for m in members) + ")"


DOMAIN_TYPE = encode_type("EIP712Domain", EIP712_DOMAIN_FIELDS)
DOMAIN_TYPE_HASH = keccak(text=DOMAIN_TYPE)

TYPE_HASHES: Dict[str, bytes] = {
    name: keccak(text=encode_type(name, members)) for name, members in OPERATION_TYPES.items()
}


def _encode_value(field_type: str, value: Any) -> Tuple[str, Any]:
    if field_type == "string":
        return "bytes32", keccak(text=value)
    if field_type == "bytes":
        return "bytes32", keccak(as_bytes(value))
    if field_type == "bytes32":
        return "bytes32", as_bytes32(value)
    if field_type == "address":
        return "address", normalize_address(value)
    if field_type == "uint256":
        value = int(value)
        if value < 0 or value >= 2 ** 256:
            raise ValueError(f"uint256 out of range: {value}")
        return "uint256", value
    raise ValueError(f"Unsupported field type: {field_type}")


def hash_struct(primary_type: str, message: Dict[str, Any]) -> bytes:
    """keccak256(abi.encode(typeHash, encodeData(message)))"""
    members = OPERATION_TYPES.get(primary_type)
    if members is None:
        raise ValueError(f"Unsupported primary type: {primary_type}")

    abi_types = ["bytes32"]
    values: List[Any] = [TYPE_HASHES[primary_type]]
    for member in members:
        if member["name"] not in message:
            raise ValueError(f"Missing field {member['name']!r} for {primary_type}")
        abi_type, value = _encode_value(member["type"], message[member["name"]])
        abi_types.append(abi_type)
        values.append(value)
    return keccak(encode(abi_types, values))


def compute_domain_separator(name: str, version: str, chain_id: int, verifying_contract: str) -> bytes:
    """Compute the EIP712 domain separator"""
    return keccak(encode(
        ["bytes32", "bytes32", "bytes32", "uint256", "address"],
        [DOMAIN_TYPE_HASH, keccak(text=name), keccak(text=version), chain_id, normalize_address(verifying_contract)]
    ))


def get_eip712_digest(domain_separator: bytes, struct_hash: bytes) -> bytes:
    """Compute the EIP712 digest"""
    return keccak(b"\x19\x01" + domain_separator + struct_hash)


@dataclass(frozen=True)
class Domain:
    name: str
    version: str
    chain_id: int
    verifying_contract: str

    @property
    def separator(self) -> bytes:
        return compute_domain_separator(self.name, self.version, self.chain_id, self.verifying_contract)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": normalize_address(self.verifying_contract),
        }


class DigestBuilder:
    """Digest factory bound to one registry domain"""

    def __init__(self, domain: Domain):
        self.domain = domain
        self.domain_separator = domain.separator

    def digest(self, primary_type: str, message: Dict[str, Any]) -> bytes:
        struct_hash = hash_struct(primary_type, message)
        digest = get_eip712_digest(self.domain_separator, struct_hash)
        logger.debug("%s digest for %s: 0x%s", primary_type, self.domain.name, digest.hex())
        return digest

    def typed_data(self, primary_type: str, message: Dict[str, Any]) -> Dict[str, Any]:
        """Full eth_signTypedData_v4 payload for a message"""
        if primary_type not in OPERATION_TYPES:
            raise ValueError(f"Unsupported primary type: {primary_type}")
        message = dict(message)
        for member in OPERATION_TYPES[primary_type]:
            if member["type"] == "address" and member["name"] in message:
                message[member["name"]] = normalize_address(message[member["name"]])
        return {
            "types": {
                "EIP712Domain": EIP712_DOMAIN_FIELDS,
                primary_type: OPERATION_TYPES[primary_type],
            },
            "domain": self.domain.to_dict(),
            "primaryType": primary_type,
            "message": message,
        }
