"""
Soulbound identity tokens.

A sponsor mints one identity per user on presentation of the user's
Identity(bytes32 kyc,address signer,string uri,uint256 nonce) signature.
Only the owner can burn it, and it can never be transferred or approved.
Token ids start at 1 and are never reused.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional

from .config import (
    DEFAULT_CHAIN_ID,
    DOMAIN_VERSION,
    ERC721_INTERFACE_ID,
    ERC721_METADATA_INTERFACE_ID,
    IDENTITY_DOMAIN_NAME,
    IDENTITY_SYMBOL,
    SIGNER_ROLE,
    ZERO_ADDRESS,
)
from .encoding import BytesLike, as_bytes32, normalize_address, require_address
from .errors import AlreadyRegistered, EmptyField, InvalidInput, NonTransferable, Unauthorized
from .ledger import Ledger, read_view
from .registry import SignedRegistry

logger = logging.getLogger(__name__)


class RegistrationStatus(IntEnum):
    NOT_REGISTERED = 0
    REGISTERED = 1


@dataclass(frozen=True)
class Identity:
    id: int
    owner: str
    registered: bool


class IdentityToken(SignedRegistry):
    """Sponsor-minted, owner-burnable, non-transferable identity registry"""

    SUPPORTED_INTERFACES = SignedRegistry.SUPPORTED_INTERFACES | {ERC721_INTERFACE_ID, ERC721_METADATA_INTERFACE_ID}

    def __init__(
        self,
        ledger: Ledger,
        admin: str,
        sponsor: str,
        address: str,
        name: str = IDENTITY_DOMAIN_NAME,
        symbol: str = IDENTITY_SYMBOL,
        version: str = DOMAIN_VERSION,
        chain_id: int = DEFAULT_CHAIN_ID,
    ):
        super().__init__(ledger, name, version, address, admin, chain_id)
        self.symbol = symbol
        self.access.setup_role(SIGNER_ROLE, sponsor)

        self._counter = {"last_id": 0}
        self._owners: Dict[int, str] = {}
        self._identity_of: Dict[str, int] = {}
        self._registered: Dict[str, RegistrationStatus] = {}
        self._token_uris: Dict[int, str] = {}

    # ------------------------------------------------------------------
    # Mint / burn
    # ------------------------------------------------------------------

    def create_identity(
        self,
        caller: str,
        signature: BytesLike,
        kyc: BytesLike,
        signer: str,
        token_uri: str,
        nonce: int,
    ) -> int:
        """Mint an identity for ``signer`` on behalf of a sponsor. Returns the new token id."""
        with self.ledger.atomic():
            self.pause_switch.check_not_paused()
            self.access.check_role(caller, SIGNER_ROLE)

            signer = require_address(signer)
            sig = self._require_signature(signature)
            kyc = as_bytes32(kyc)
            if kyc == b"\x00" * 32:
                raise EmptyField("kyc", "REJUVE: Empty KYC data")
            if not token_uri:
                raise EmptyField("token_uri", "REJUVE: Empty token URI")
            nonce = self._require_nonce(nonce)

            digest = self._authenticate(
                "Identity",
                {"kyc": kyc, "signer": signer, "uri": token_uri, "nonce": nonce},
                sig,
                signer,
            )
            # after authentication: a replayed request reports DigestReused
            if self.is_registered(signer):
                raise AlreadyRegistered(details={"signer": signer})

            token_id = self._counter["last_id"] + 1
            self.ledger.write(self._counter, "last_id", token_id)
            self.ledger.write(self._owners, token_id, signer)
            self.ledger.write(self._identity_of, signer, token_id)
            self.ledger.write(self._registered, signer, RegistrationStatus.REGISTERED)
            self.ledger.write(self._token_uris, token_id, token_uri)

            self.ledger.emit(self.name, "Transfer", from_=ZERO_ADDRESS, to=signer, token_id=token_id)
            self.ledger.emit(
                self.name,
                "IdentityCreated",
                token_id=token_id,
                owner=signer,
                kyc=kyc,
                uri=token_uri,
                nonce=nonce,
                sponsor=normalize_address(caller),
                digest=digest,
            )

        logger.info("Identity %d created for %s", token_id, signer)
        return token_id

    def burn_identity(self, caller: str, token_id: int) -> None:
        """Destroy an identity. Only its current owner may do this."""
        token_id = int(token_id)
        with self.ledger.atomic():
            self.pause_switch.check_not_paused()
            owner = self._owners.get(token_id)
            if owner is None or owner != normalize_address(caller):
                raise Unauthorized("REJUVE: Only Identity Owner", {"token_id": token_id})

            self.ledger.delete(self._owners, token_id)
            self.ledger.delete(self._identity_of, owner)
            self.ledger.write(self._registered, owner, RegistrationStatus.NOT_REGISTERED)
            self.ledger.delete(self._token_uris, token_id)

            self.ledger.emit(self.name, "Transfer", from_=owner, to=ZERO_ADDRESS, token_id=token_id)
            self.ledger.emit(self.name, "IdentityDestroyed", token_id=token_id, owner=owner)

        logger.info("Identity %d burned by %s", token_id, owner)

    # ------------------------------------------------------------------
    # Soulbound: every ownership change outside mint/burn is rejected
    # ------------------------------------------------------------------

    def transfer_from(self, caller: str, from_: str, to: str, token_id: int) -> None:
        raise NonTransferable()

    def safe_transfer_from(self, caller: str, from_: str, to: str, token_id: int, data: bytes = b"") -> None:
        raise NonTransferable()

    def approve(self, caller: str, to: str, token_id: int) -> None:
        raise NonTransferable()

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        raise NonTransferable()

    @read_view
    def get_approved(self, token_id: int) -> str:
        self.owner_of(token_id)
        return ZERO_ADDRESS

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return False

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @read_view
    def balance_of(self, owner: str) -> int:
        owner = require_address(owner)
        return 1 if owner in self._identity_of else 0

    @read_view
    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(int(token_id))
        if owner is None:
            raise InvalidInput("ERC721: invalid token ID", {"token_id": token_id})
        return owner

    @read_view
    def token_uri(self, token_id: int) -> str:
        self.owner_of(token_id)
        return self._token_uris[int(token_id)]

    @read_view
    def get_owner_identity(self, owner: str) -> int:
        """Identity id of ``owner``, 0 when unregistered"""
        return self._identity_of.get(normalize_address(owner), 0)

    @read_view
    def identity_of(self, principal: str) -> int:
        return self.get_owner_identity(principal)

    @read_view
    def if_registered(self, principal: str) -> RegistrationStatus:
        return self._registered.get(normalize_address(principal), RegistrationStatus.NOT_REGISTERED)

    @read_view
    def is_registered(self, principal: str) -> bool:
        return self.if_registered(principal) == RegistrationStatus.REGISTERED

    @read_view
    def get_identity(self, token_id: int) -> Optional[Identity]:
        owner = self._owners.get(int(token_id))
        if owner is None:
            return None
        return Identity(int(token_id), owner, self.is_registered(owner))

    @property
    @read_view
    def total_identities(self) -> int:
        """Number of identities ever minted (burned ones included)"""
        return self._counter["last_id"]
