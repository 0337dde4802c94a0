# Registry configuration
# Domain separator values and deployment settings used for EIP712 structured signing

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from eth_utils import keccak

# Domain parameters
IDENTITY_DOMAIN_NAME = "Rejuve Identities"
IDENTITY_SYMBOL = "RUI"
DATA_DOMAIN_NAME = "Data management"
AGREEMENT_DOMAIN_NAME = "Distributor Agreement"
DOMAIN_VERSION = "1.0.0"

# Local hardhat / anvil devnet
DEFAULT_CHAIN_ID = 31337

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
UINT256_MAX = 2**256 - 1

# Role ids (matching OpenZeppelin AccessControl)
DEFAULT_ADMIN_ROLE = b"\x00" * 32
PAUSER_ROLE = keccak(text="PAUSER_ROLE")
SIGNER_ROLE = keccak(text="SIGNER_ROLE")

# ERC165 interface ids
ERC165_INTERFACE_ID = bytes.fromhex("01ffc9a7")
ACCESS_CONTROL_INTERFACE_ID = bytes.fromhex("7965db0b")
ERC721_INTERFACE_ID = bytes.fromhex("80ac58cd")
ERC721_METADATA_INTERFACE_ID = bytes.fromhex("5b5e139f")

ENV_PREFIX = "REJUVE_"


@dataclass
class RegistryConfig:
    """Deployment settings shared by the three registries"""
    chain_id: int = DEFAULT_CHAIN_ID
    identity_address: str = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
    data_address: str = "0xe7f1725e7734ce288f8367e1bb143e90bb3f0512"
    agreement_address: str = "0x9fe46736679d2d9a65f0992f2272de9f3c7fa6e0"
    # Upper bound (seconds) for permission expiration offsets, None disables the check
    max_expiration: Optional[int] = None
    unique_data_hashes: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _coerce(name: str, raw: str) -> Any:
    if name in ("chain_id", "max_expiration"):
        return int(raw) if raw else None
    if name == "unique_data_hashes":
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return raw


def load_config(path: Optional[str] = None, env_file: Optional[str] = None) -> RegistryConfig:
    """Load registry configuration from a JSON file with REJUVE_* environment overrides"""
    if env_file is not None:
        # variables already set in the environment win over the file
        load_dotenv(env_file)

    data: Dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, 'r') as f:
            data = json.load(f)

    for f in fields(RegistryConfig):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is not None:
            data[f.name] = _coerce(f.name, raw)

    return RegistryConfig.from_dict(data)
