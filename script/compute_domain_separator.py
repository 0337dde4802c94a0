#!/usr/bin/env python3
"""
Compute the EIP712 domain separators and type hashes for deployed registries
"""

import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from rejuve_registry.config import (
    AGREEMENT_DOMAIN_NAME,
    DATA_DOMAIN_NAME,
    DOMAIN_VERSION,
    IDENTITY_DOMAIN_NAME,
    load_config,
)
from rejuve_registry.digest import DOMAIN_TYPE, OPERATION_TYPES, TYPE_HASHES, compute_domain_separator, encode_type


def main():
    parser = argparse.ArgumentParser(description="Compute domain separators for the Rejuve registries")
    parser.add_argument("--config", help="JSON deployment config (addresses, chain id)")
    parser.add_argument("--env-file", help=".env file with REJUVE_* overrides")
    parser.add_argument("--chain-id", type=int, help="Override the configured chain id")
    args = parser.parse_args()

    config = load_config(args.config, args.env_file)
    chain_id = args.chain_id if args.chain_id is not None else config.chain_id

    print(f"Chain ID: {chain_id}")
    print(f"Domain type: {DOMAIN_TYPE}")

    deployments = [
        (IDENTITY_DOMAIN_NAME, config.identity_address),
        (DATA_DOMAIN_NAME, config.data_address),
        (AGREEMENT_DOMAIN_NAME, config.agreement_address),
    ]
    for name, address in deployments:
        separator = compute_domain_separator(name, DOMAIN_VERSION, chain_id, address)
        print(f"\n{name} ({address})")
        print(f"Domain Separator: 0x{separator.hex()}")

    print("\nType hashes:")
    for primary_type, members in OPERATION_TYPES.items():
        print(f'{encode_type(primary_type, members)} = "0x{TYPE_HASHES[primary_type].hex()}"')


if __name__ == "__main__":
    main()
