"""Sponsored identity, data permission and agreement registries backed by EIP712 signatures"""

from .agreement import Agreement, AgreementRegistry
from .config import (
    DEFAULT_ADMIN_ROLE,
    PAUSER_ROLE,
    SIGNER_ROLE,
    ZERO_ADDRESS,
    RegistryConfig,
    load_config,
)
from .data_management import DataManagement, DataRecord, Permission, PermissionState, calculate_permission_hash
from .digest import DigestBuilder, Domain, compute_domain_separator, get_eip712_digest, hash_struct
from .identity import Identity, IdentityToken, RegistrationStatus
from .ledger import Event, Ledger
from .replay import ReplayGuard


def deploy_registries(ledger: Ledger, admin: str, sponsor: str, config: RegistryConfig = None):
    """Deploy the identity, data management and agreement registries on one ledger"""
    config = config or RegistryConfig()
    identity = IdentityToken(ledger, admin, sponsor, config.identity_address, chain_id=config.chain_id)
    data = DataManagement(
        ledger,
        identity,
        admin,
        sponsor,
        config.data_address,
        chain_id=config.chain_id,
        max_expiration=config.max_expiration,
        unique_data_hashes=config.unique_data_hashes,
    )
    agreements = AgreementRegistry(ledger, admin, config.agreement_address, chain_id=config.chain_id)
    return identity, data, agreements


__all__ = [
    "Agreement",
    "AgreementRegistry",
    "DEFAULT_ADMIN_ROLE",
    "DataManagement",
    "DataRecord",
    "DigestBuilder",
    "Domain",
    "Event",
    "Identity",
    "IdentityToken",
    "Ledger",
    "PAUSER_ROLE",
    "Permission",
    "PermissionState",
    "RegistrationStatus",
    "RegistryConfig",
    "ReplayGuard",
    "SIGNER_ROLE",
    "ZERO_ADDRESS",
    "calculate_permission_hash",
    "compute_domain_separator",
    "deploy_registries",
    "get_eip712_digest",
    "hash_struct",
    "load_config",
]
