"""
Client side signing helpers.

Build the same eth_signTypedData_v4 payload a wallet would sign for each
operation and sign it with a local key. Used by relayer test harnesses and
vector generation; the registries themselves never see private keys.
"""

from typing import Any, Dict

from eth_account import Account
from eth_account.messages import encode_typed_data

from .config import AGREEMENT_DOMAIN_NAME, DATA_DOMAIN_NAME, DOMAIN_VERSION, IDENTITY_DOMAIN_NAME
from .digest import Domain, DigestBuilder
from .encoding import BytesLike, as_bytes, as_bytes32, normalize_address


def create_payload(primary_type: str, message: Dict[str, Any], domain: Domain) -> Dict[str, Any]:
    return DigestBuilder(domain).typed_data(primary_type, message)


def sign_typed_data(payload: Dict[str, Any], private_key: str) -> bytes:
    """Sign a full typed data payload, returning the 65 byte r || s || v signature"""
    signable = encode_typed_data(full_message=payload)
    signed = Account.sign_message(signable, private_key)
    return bytes(signed.signature)


def identity_request_signature(
    kyc: BytesLike,
    signer: str,
    uri: str,
    nonce: int,
    chain_id: int,
    verifying_contract: str,
    private_key: str,
    name: str = IDENTITY_DOMAIN_NAME,
    version: str = DOMAIN_VERSION,
) -> bytes:
    message = {
        "kyc": as_bytes32(kyc),
        "signer": normalize_address(signer),
        "uri": uri,
        "nonce": nonce,
    }
    domain = Domain(name, version, chain_id, verifying_contract)
    return sign_typed_data(create_payload("Identity", message, domain), private_key)


def data_submission_signature(
    signer: str,
    dhash: BytesLike,
    nonce: int,
    chain_id: int,
    verifying_contract: str,
    private_key: str,
    name: str = DATA_DOMAIN_NAME,
    version: str = DOMAIN_VERSION,
) -> bytes:
    message = {
        "signer": normalize_address(signer),
        "dhash": as_bytes(dhash),
        "nonce": nonce,
    }
    domain = Domain(name, version, chain_id, verifying_contract)
    return sign_typed_data(create_payload("DataSubmission", message, domain), private_key)


def access_permission_signature(
    dataowner: str,
    requester_id: int,
    dhash: BytesLike,
    product_id: int,
    nonce: int,
    expiration: int,
    chain_id: int,
    verifying_contract: str,
    private_key: str,
    name: str = DATA_DOMAIN_NAME,
    version: str = DOMAIN_VERSION,
) -> bytes:
    message = {
        "dataowner": normalize_address(dataowner),
        "requesterId": requester_id,
        "dhash": as_bytes(dhash),
        "productId": product_id,
        "nonce": nonce,
        "expiration": expiration,
    }
    domain = Domain(name, version, chain_id, verifying_contract)
    return sign_typed_data(create_payload("Permission", message, domain), private_key)


def agreement_signature(
    distributor: str,
    terms: BytesLike,
    nonce: int,
    chain_id: int,
    verifying_contract: str,
    private_key: str,
    name: str = AGREEMENT_DOMAIN_NAME,
    version: str = DOMAIN_VERSION,
) -> bytes:
    message = {
        "distributor": normalize_address(distributor),
        "terms": as_bytes(terms),
        "nonce": nonce,
    }
    domain = Domain(name, version, chain_id, verifying_contract)
    return sign_typed_data(create_payload("Agreement", message, domain), private_key)
