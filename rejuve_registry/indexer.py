"""
Off-chain reconstruction of registry state from committed events.

Signed-operation events carry their full parameters and the consumed
digest, so the replay-protection set and every registry map can be rebuilt
without re-checking signatures.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from .agreement import Agreement
from .data_management import DataRecord, Permission, PermissionState
from .ledger import Event


@dataclass
class IndexedState:
    consumed_digests: Set[bytes] = field(default_factory=set)
    identity_owners: Dict[int, str] = field(default_factory=dict)
    identity_of: Dict[str, int] = field(default_factory=dict)
    burned_identities: Set[int] = field(default_factory=set)
    data: List[DataRecord] = field(default_factory=list)
    data_by_owner: Dict[int, List[int]] = field(default_factory=dict)
    data_owner: Dict[bytes, int] = field(default_factory=dict)
    permissions: Dict[Tuple[bytes, int], Permission] = field(default_factory=dict)
    permission_hashes: Dict[int, List[bytes]] = field(default_factory=dict)
    agreements: Dict[str, Agreement] = field(default_factory=dict)
    paused: Dict[str, bool] = field(default_factory=dict)

    def is_registered(self, principal: str) -> bool:
        return principal in self.identity_of


def _identity_created(state: IndexedState, args: dict) -> None:
    state.identity_owners[args["token_id"]] = args["owner"]
    state.identity_of[args["owner"]] = args["token_id"]


def _identity_destroyed(state: IndexedState, args: dict) -> None:
    state.identity_owners.pop(args["token_id"], None)
    state.identity_of.pop(args["owner"], None)
    state.burned_identities.add(args["token_id"])


def _data_submitted(state: IndexedState, args: dict) -> None:
    owner_id = args["owner_identity_id"]
    state.data.append(DataRecord(args["data_hash"], owner_id, args["index"]))
    state.data_by_owner.setdefault(owner_id, []).append(args["index"])
    state.data_owner[args["data_hash"]] = owner_id


def _permission_granted(state: IndexedState, args: dict) -> None:
    key = (args["data_hash"], args["product_id"])
    state.permissions[key] = Permission(PermissionState.PERMITTED, args["deadline"])
    state.permission_hashes.setdefault(args["owner_identity_id"], []).append(args["permission_hash"])


def _agreement_created(state: IndexedState, args: dict) -> None:
    state.agreements[args["distributor"]] = Agreement(
        args["terms_hash"], args["product_id"], args["units"], args["unit_price"], args["percentage"]
    )


HANDLERS = {
    "IdentityCreated": _identity_created,
    "IdentityDestroyed": _identity_destroyed,
    "DataSubmitted": _data_submitted,
    "PermissionGranted": _permission_granted,
    "AgreementCreated": _agreement_created,
}


def rebuild(events: Iterable[Event]) -> IndexedState:
    """Replay committed events, in sequence order, into a fresh IndexedState"""
    state = IndexedState()
    for event in sorted(events, key=lambda e: e.seq):
        if "digest" in event.args:
            state.consumed_digests.add(event.args["digest"])
        if event.name == "Paused":
            state.paused[event.source] = True
        elif event.name == "Unpaused":
            state.paused[event.source] = False
        handler = HANDLERS.get(event.name)
        if handler is not None:
            handler(state, event.args)
    return state
