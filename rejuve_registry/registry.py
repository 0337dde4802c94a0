"""Common base for registries that act on detached EIP712 signatures"""

import logging
from typing import Any, Dict, FrozenSet

from . import verifier
from .access import AccessGate, PauseSwitch
from .config import (
    ACCESS_CONTROL_INTERFACE_ID,
    DEFAULT_ADMIN_ROLE,
    DEFAULT_CHAIN_ID,
    ERC165_INTERFACE_ID,
    PAUSER_ROLE,
    UINT256_MAX,
)
from .digest import Domain, DigestBuilder
from .encoding import BytesLike, as_bytes, normalize_address
from .errors import EmptyField, InvalidInput, ZeroNonce
from .ledger import Ledger
from .replay import ReplayGuard

logger = logging.getLogger(__name__)


class SignedRegistry:
    """
    Owns a domain, a role table and a pause switch, and runs the shared
    digest -> replay -> recover sequence for every signed operation.
    """

    SUPPORTED_INTERFACES: FrozenSet[bytes] = frozenset({ERC165_INTERFACE_ID, ACCESS_CONTROL_INTERFACE_ID})

    def __init__(
        self,
        ledger: Ledger,
        name: str,
        version: str,
        address: str,
        admin: str,
        chain_id: int = DEFAULT_CHAIN_ID,
    ):
        self.ledger = ledger
        self.name = name
        self.version = version
        self.address = normalize_address(address)
        self.chain_id = chain_id
        self.domain = Domain(name, version, chain_id, self.address)
        self.digests = DigestBuilder(self.domain)
        self.replay_guard = ReplayGuard(ledger)
        self.access = AccessGate(ledger, name)
        self.pause_switch = PauseSwitch(ledger, self.access)

        self.access.setup_role(DEFAULT_ADMIN_ROLE, admin)
        self.access.setup_role(PAUSER_ROLE, admin)

    @property
    def domain_separator(self) -> bytes:
        return self.digests.domain_separator

    def supports_interface(self, interface_id: BytesLike) -> bool:
        """ERC165 lookup over the 4-byte interface ids this registry implements"""
        interface_id = as_bytes(interface_id)
        return len(interface_id) == 4 and interface_id in self.SUPPORTED_INTERFACES

    # Access control / pause passthroughs

    def has_role(self, role: bytes, account: str) -> bool:
        return self.access.has_role(account, role)

    def grant_role(self, caller: str, role: bytes, account: str) -> None:
        self.access.grant_role(caller, role, account)

    def revoke_role(self, caller: str, role: bytes, account: str) -> None:
        self.access.revoke_role(caller, role, account)

    def renounce_role(self, caller: str, role: bytes, account: str) -> None:
        self.access.renounce_role(caller, role, account)

    @property
    def paused(self) -> bool:
        return self.pause_switch.paused

    def pause(self, caller: str) -> None:
        self.pause_switch.pause(caller)

    def unpause(self, caller: str) -> None:
        self.pause_switch.unpause(caller)

    # Signed operation helpers

    @staticmethod
    def _require_signature(signature: BytesLike) -> bytes:
        sig = as_bytes(signature)
        if not sig:
            raise EmptyField("signature", "REJUVE: Empty signature")
        return sig

    @staticmethod
    def _require_uint(value: int, label: str) -> int:
        """Coerce to int and require it to fit a uint256 message field"""
        value = int(value)
        if value < 0:
            raise InvalidInput(f"REJUVE: Negative {label}", {label: value})
        if value > UINT256_MAX:
            raise InvalidInput(f"REJUVE: {label} exceeds uint256", {label: value})
        return value

    @classmethod
    def _require_nonce(cls, nonce: int) -> int:
        if int(nonce) == 0:
            raise ZeroNonce()
        return cls._require_uint(nonce, "nonce")

    def _authenticate(self, primary_type: str, message: Dict[str, Any], signature: bytes, signer: str) -> bytes:
        """
        Consume the operation digest and require ``signer`` to have signed it.

        Must be called inside ``ledger.atomic()`` before any other write, so a
        failed signature check rolls the consumption back with everything else.
        """
        digest = self.digests.digest(primary_type, message)
        self.replay_guard.check_and_consume(digest)
        verifier.verify(digest, signature, signer)
        return digest
