"""
Data hash submission and requester access permissions.

Sponsors submit data hashes signed by registered data owners
(DataSubmission(address signer,bytes dhash,uint256 nonce)). Registered
requesters obtain time bounded access to a (data hash, product) pair with
the owner's Permission(address dataowner,uint256 requesterId,bytes dhash,
uint256 productId,uint256 nonce,uint256 expiration) signature.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

from web3 import Web3

from .config import DATA_DOMAIN_NAME, DEFAULT_CHAIN_ID, DOMAIN_VERSION, SIGNER_ROLE, UINT256_MAX
from .encoding import BytesLike, as_bytes, normalize_address, require_address
from .errors import (
    DuplicateData,
    EmptyField,
    ExpirationTooLong,
    InvalidAmount,
    InvalidInput,
    NotDataOwner,
    NotRegistered,
)
from .identity import IdentityToken
from .ledger import Ledger, read_view
from .registry import SignedRegistry

logger = logging.getLogger(__name__)


class PermissionState(IntEnum):
    NOT_PERMITTED = 0
    PERMITTED = 1


@dataclass(frozen=True)
class DataRecord:
    data_hash: bytes
    owner_identity_id: int
    index: int


@dataclass(frozen=True)
class Permission:
    state: PermissionState
    deadline: int


NO_PERMISSION = Permission(PermissionState.NOT_PERMITTED, 0)


def calculate_permission_hash(requester_id: int, data_hash: BytesLike, product_id: int) -> bytes:
    """keccak256(abi.encodePacked(uint256 requesterId, bytes dataHash, uint256 productId))"""
    return bytes(Web3.solidity_keccak(
        ['uint256', 'bytes', 'uint256'],
        [requester_id, as_bytes(data_hash), product_id]
    ))


class DataManagement(SignedRegistry):
    """Append-only data hash log with per-owner indexes and access permissions"""

    def __init__(
        self,
        ledger: Ledger,
        identity: IdentityToken,
        admin: str,
        sponsor: str,
        address: str,
        name: str = DATA_DOMAIN_NAME,
        version: str = DOMAIN_VERSION,
        chain_id: int = DEFAULT_CHAIN_ID,
        max_expiration: Optional[int] = None,
        unique_data_hashes: bool = False,
    ):
        super().__init__(ledger, name, version, address, admin, chain_id)
        self.identity = identity
        self.max_expiration = max_expiration
        self.unique_data_hashes = unique_data_hashes
        self.access.setup_role(SIGNER_ROLE, sponsor)

        # arena of every submitted record plus per-owner positions into it
        self._data: List[DataRecord] = []
        self._data_by_owner: Dict[int, List[int]] = {}
        self._data_owner: Dict[bytes, int] = {}

        self._permissions: Dict[Tuple[bytes, int], Permission] = {}
        self._permission_hashes: Dict[int, List[bytes]] = {}

    def _push(self, index: Dict[int, list], key: int, value) -> None:
        if key not in index:
            self.ledger.write(index, key, [])
        self.ledger.append(index[key], value)

    # ------------------------------------------------------------------
    # Data submission
    # ------------------------------------------------------------------

    def submit_data(self, caller: str, signer: str, signature: BytesLike, data_hash: BytesLike, nonce: int) -> int:
        """Record ``data_hash`` for the registered ``signer``. Returns its global index."""
        with self.ledger.atomic():
            self.pause_switch.check_not_paused()
            self.access.check_role(caller, SIGNER_ROLE)

            signer = require_address(signer)
            sig = self._require_signature(signature)
            dhash = as_bytes(data_hash)
            if not dhash:
                raise EmptyField("data_hash", "REJUVE: Empty data hash")
            nonce = self._require_nonce(nonce)
            if not self.identity.is_registered(signer):
                raise NotRegistered(details={"principal": signer})

            digest = self._authenticate(
                "DataSubmission",
                {"signer": signer, "dhash": dhash, "nonce": nonce},
                sig,
                signer,
            )
            if self.unique_data_hashes and dhash in self._data_owner:
                raise DuplicateData(details={"data_hash": "0x" + dhash.hex()})

            owner_id = self.identity.identity_of(signer)
            index = len(self._data)
            self.ledger.append(self._data, DataRecord(dhash, owner_id, index))
            self._push(self._data_by_owner, owner_id, index)
            self.ledger.write(self._data_owner, dhash, owner_id)

            self.ledger.emit(
                self.name,
                "DataSubmitted",
                owner=signer,
                owner_identity_id=owner_id,
                data_hash=dhash,
                index=index,
                nonce=nonce,
                sponsor=normalize_address(caller),
                digest=digest,
            )

        logger.info("Data 0x%s submitted for identity %d", dhash.hex(), owner_id)
        return index

    # ------------------------------------------------------------------
    # Access permission
    # ------------------------------------------------------------------

    def get_permission(
        self,
        caller: str,
        data_owner: str,
        signature: BytesLike,
        data_hash: BytesLike,
        product_id: int,
        nonce: int,
        expiration: int,
    ) -> bytes:
        """
        Grant the caller (a registered requester) access to ``data_hash`` for
        ``product_id`` until now + ``expiration`` seconds.

        ``data_owner`` must be the recorded owner of the hash: a valid signature
        from any other principal is rejected with NotDataOwner.

        Returns the permission hash appended to the owner's history.
        """
        with self.ledger.atomic():
            self.pause_switch.check_not_paused()

            data_owner = require_address(data_owner)
            sig = self._require_signature(signature)
            dhash = as_bytes(data_hash)
            if not dhash:
                raise EmptyField("data_hash", "REJUVE: Empty data hash")
            product_id = self._require_uint(product_id, "product id")
            nonce = self._require_nonce(nonce)
            expiration = self._require_uint(expiration, "expiration")
            if expiration <= 0:
                raise InvalidAmount("Expiration")
            if self.max_expiration is not None and expiration > self.max_expiration:
                raise ExpirationTooLong(details={"expiration": expiration, "max": self.max_expiration})
            if self.ledger.now() + expiration > UINT256_MAX:
                raise InvalidInput("REJUVE: Permission deadline exceeds uint256", {"expiration": expiration})

            if not self.identity.is_registered(caller):
                raise NotRegistered(details={"principal": normalize_address(caller)})
            requester_id = self.identity.identity_of(caller)
            if not self.identity.is_registered(data_owner):
                raise NotRegistered(details={"principal": data_owner})
            owner_id = self.identity.identity_of(data_owner)
            if self._data_owner.get(dhash) != owner_id:
                raise NotDataOwner(details={"data_owner": data_owner, "data_hash": "0x" + dhash.hex()})

            digest = self._authenticate(
                "Permission",
                {
                    "dataowner": data_owner,
                    "requesterId": requester_id,
                    "dhash": dhash,
                    "productId": product_id,
                    "nonce": nonce,
                    "expiration": expiration,
                },
                sig,
                data_owner,
            )

            deadline = self.ledger.now() + expiration
            permission_hash = calculate_permission_hash(requester_id, dhash, product_id)
            self.ledger.write(self._permissions, (dhash, product_id), Permission(PermissionState.PERMITTED, deadline))
            self._push(self._permission_hashes, owner_id, permission_hash)

            self.ledger.emit(
                self.name,
                "PermissionGranted",
                data_owner=data_owner,
                owner_identity_id=owner_id,
                requester=normalize_address(caller),
                requester_id=requester_id,
                data_hash=dhash,
                product_id=product_id,
                nonce=nonce,
                expiration=expiration,
                deadline=deadline,
                permission_hash=permission_hash,
                digest=digest,
            )

        logger.info("Permission for product %d granted to identity %d until %d", product_id, requester_id, deadline)
        return permission_hash

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @read_view
    def get_data_by_token_id(self, identity_id: int, index: int) -> bytes:
        positions = self._data_by_owner.get(int(identity_id), [])
        if not 0 <= index < len(positions):
            raise IndexError(f"No data at index {index} for identity {identity_id}")
        return self._data[positions[index]].data_hash

    @read_view
    def get_data_count(self, identity_id: int) -> int:
        return len(self._data_by_owner.get(int(identity_id), []))

    @read_view
    def get_data_owner_id(self, data_hash: BytesLike) -> int:
        return self._data_owner.get(as_bytes(data_hash), 0)

    @read_view
    def get_data_record(self, index: int) -> DataRecord:
        return self._data[index]

    @property
    @read_view
    def total_data(self) -> int:
        return len(self._data)

    @read_view
    def get_permission_record(self, data_hash: BytesLike, product_id: int) -> Permission:
        return self._permissions.get((as_bytes(data_hash), int(product_id)), NO_PERMISSION)

    @read_view
    def get_permission_status(self, data_hash: BytesLike, product_id: int) -> PermissionState:
        return self.get_permission_record(data_hash, product_id).state

    @read_view
    def get_permission_deadline(self, data_hash: BytesLike, product_id: int) -> int:
        return self.get_permission_record(data_hash, product_id).deadline

    @read_view
    def is_permission_active(self, data_hash: BytesLike, product_id: int) -> bool:
        permission = self.get_permission_record(data_hash, product_id)
        return permission.state == PermissionState.PERMITTED and self.ledger.now() <= permission.deadline

    @read_view
    def get_permission_hashes(self, owner: str) -> List[bytes]:
        """Permission history of the identity currently held by ``owner``"""
        owner_id = self.identity.identity_of(owner)
        return list(self._permission_hashes.get(owner_id, []))

    @read_view
    def get_permission_hashes_by_id(self, identity_id: int) -> List[bytes]:
        return list(self._permission_hashes.get(int(identity_id), []))
