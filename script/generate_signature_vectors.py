#!/usr/bin/env python3
"""
Generate signed request vectors for relayer integration tests
"""

import argparse
import json
import sys
from pathlib import Path

from eth_account import Account

sys.path.append(str(Path(__file__).resolve().parents[1]))

from rejuve_registry import signer as signing
from rejuve_registry.config import (
    AGREEMENT_DOMAIN_NAME,
    DATA_DOMAIN_NAME,
    DOMAIN_VERSION,
    IDENTITY_DOMAIN_NAME,
    load_config,
)
from rejuve_registry.digest import DigestBuilder, Domain

# Hardhat dev accounts used as request signers
ACTORS = {
    "alice": "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "bob": "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
    "distributor": "0x8b3a350cf5c34c9194ca85829a2df0ec3153be0318b5e2d3348e872092edffba",
}

KYC = "0x7924fbcf9a7f76ca5412304f2bf47e326b638e9e7c42ecad878ed9c22a8f1428"
TOKEN_URI = "/tokenURIHere"
DATA_HASH = "0x622b1092273fe26f6a2c370a5c34a690337e7f802f2fa5006b40790bd3f7d69b"
TERMS = "0x" + b"distribution terms v1".hex()


def build_vector(domain, primary_type, message, signature):
    """Collect payload, digest and signature for one request"""
    builder = DigestBuilder(domain)
    return {
        "typed_data": json.loads(json.dumps(builder.typed_data(primary_type, message), default=_hexify)),
        "digest": "0x" + builder.digest(primary_type, message).hex(),
        "signature": "0x" + signature.hex(),
    }


def _hexify(value):
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def main():
    parser = argparse.ArgumentParser(description="Generate signed request vectors for the Rejuve registries")
    parser.add_argument("--config", help="JSON deployment config (addresses, chain id)")
    parser.add_argument("--env-file", help=".env file with REJUVE_* overrides")
    parser.add_argument("--output", default="signature_vectors.json", help="Output JSON file")
    args = parser.parse_args()

    config = load_config(args.config, args.env_file)
    chain_id = config.chain_id
    identity_domain = Domain(IDENTITY_DOMAIN_NAME, DOMAIN_VERSION, chain_id, config.identity_address)
    data_domain = Domain(DATA_DOMAIN_NAME, DOMAIN_VERSION, chain_id, config.data_address)
    agreement_domain = Domain(AGREEMENT_DOMAIN_NAME, DOMAIN_VERSION, chain_id, config.agreement_address)

    alice = Account.from_key(ACTORS["alice"])
    bob = Account.from_key(ACTORS["bob"])
    distributor = Account.from_key(ACTORS["distributor"])
    print(f"🔧 Generating vectors for chain {chain_id}")

    vectors = {}

    print(f"📝 Identity requests for alice ({alice.address}) and bob ({bob.address})")
    vectors["identity"] = []
    for nonce, account in enumerate((alice, bob), start=1):
        message = {"kyc": KYC, "signer": account.address, "uri": TOKEN_URI, "nonce": nonce}
        signature = signing.identity_request_signature(
            KYC, account.address, TOKEN_URI, nonce, chain_id, config.identity_address, account.key
        )
        vectors["identity"].append(build_vector(identity_domain, "Identity", message, signature))

    print("📝 Data submission for alice")
    message = {"signer": alice.address, "dhash": DATA_HASH, "nonce": 3}
    signature = signing.data_submission_signature(
        alice.address, DATA_HASH, 3, chain_id, config.data_address, alice.key
    )
    vectors["data_submission"] = [build_vector(data_domain, "DataSubmission", message, signature)]

    # bob holds identity 2 once both identity vectors are applied in order
    print("📝 Permission from alice to bob's identity")
    expiration = 2 * 24 * 60 * 60
    message = {
        "dataowner": alice.address,
        "requesterId": 2,
        "dhash": DATA_HASH,
        "productId": 100,
        "nonce": 4,
        "expiration": expiration,
    }
    signature = signing.access_permission_signature(
        alice.address, 2, DATA_HASH, 100, 4, expiration, chain_id, config.data_address, alice.key
    )
    vectors["permission"] = [build_vector(data_domain, "Permission", message, signature)]

    print(f"📝 Agreement for distributor ({distributor.address})")
    message = {"distributor": distributor.address, "terms": TERMS, "nonce": 1}
    signature = signing.agreement_signature(
        distributor.address, TERMS, 1, chain_id, config.agreement_address, distributor.key
    )
    vectors["agreement"] = [build_vector(agreement_domain, "Agreement", message, signature)]

    output = Path(args.output)
    with open(output, 'w') as f:
        json.dump(vectors, f, indent=2)
    print(f"✅ Wrote {sum(len(v) for v in vectors.values())} vectors to {output}")


if __name__ == "__main__":
    main()
