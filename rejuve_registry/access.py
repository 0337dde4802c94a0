"""
Role based access control and the pause circuit breaker.

The caller of an operation (the relayer paying for it) is checked here. The
principal whose consent is exercised is checked separately by signature
recovery.
"""

import logging
from typing import Dict, List, Set

from .config import DEFAULT_ADMIN_ROLE, PAUSER_ROLE
from .encoding import normalize_address
from .errors import Paused, Unauthorized
from .ledger import Ledger, read_view

logger = logging.getLogger(__name__)


def role_name(role: bytes) -> str:
    return "0x" + role.hex()


class AccessGate:
    """Role membership table. Only holders of a role's admin role may change it."""

    def __init__(self, ledger: Ledger, source: str):
        self.ledger = ledger
        self.source = source
        self._members: Dict[bytes, Set[str]] = {}

    @read_view
    def has_role(self, principal: str, role: bytes) -> bool:
        return normalize_address(principal) in self._members.get(role, set())

    def check_role(self, principal: str, role: bytes) -> None:
        if not self.has_role(principal, role):
            account = normalize_address(principal)
            raise Unauthorized(
                f"AccessControl: account {account.lower()} is missing role {role_name(role)}",
                {"account": account, "role": role_name(role)},
            )

    @read_view
    def get_role_members(self, role: bytes) -> List[str]:
        return sorted(self._members.get(role, set()))

    def _grant(self, role: bytes, account: str, sender: str) -> None:
        if self.has_role(account, role):
            return
        members = self._members.get(role)
        if members is None:
            members = set()
            self.ledger.write(self._members, role, members)
        self.ledger.add(members, account)
        self.ledger.emit(self.source, "RoleGranted", role=role, account=account, sender=sender)
        logger.info("%s: granted role %s to %s", self.source, role_name(role), account)

    def _revoke(self, role: bytes, account: str, sender: str) -> None:
        if not self.has_role(account, role):
            return
        self.ledger.discard(self._members[role], account)
        self.ledger.emit(self.source, "RoleRevoked", role=role, account=account, sender=sender)
        logger.info("%s: revoked role %s from %s", self.source, role_name(role), account)

    def setup_role(self, role: bytes, account: str) -> None:
        """Initial role assignment at deployment time"""
        with self.ledger.atomic():
            self._grant(role, normalize_address(account), normalize_address(account))

    def grant_role(self, caller: str, role: bytes, account: str) -> None:
        with self.ledger.atomic():
            self.check_role(caller, DEFAULT_ADMIN_ROLE)
            self._grant(role, normalize_address(account), normalize_address(caller))

    def revoke_role(self, caller: str, role: bytes, account: str) -> None:
        with self.ledger.atomic():
            self.check_role(caller, DEFAULT_ADMIN_ROLE)
            self._revoke(role, normalize_address(account), normalize_address(caller))

    def renounce_role(self, caller: str, role: bytes, account: str) -> None:
        if normalize_address(caller) != normalize_address(account):
            raise Unauthorized("AccessControl: can only renounce roles for self")
        with self.ledger.atomic():
            self._revoke(role, normalize_address(account), normalize_address(caller))


class PauseSwitch:
    """Coarse per-registry circuit breaker toggled by PAUSER_ROLE holders"""

    def __init__(self, ledger: Ledger, gate: AccessGate):
        self.ledger = ledger
        self.gate = gate
        self._state = {"paused": False}

    @property
    @read_view
    def paused(self) -> bool:
        return self._state["paused"]

    def check_not_paused(self) -> None:
        if self.paused:
            raise Paused()

    def pause(self, caller: str) -> None:
        with self.ledger.atomic():
            self.gate.check_role(caller, PAUSER_ROLE)
            self.check_not_paused()
            self.ledger.write(self._state, "paused", True)
            self.ledger.emit(self.gate.source, "Paused", account=normalize_address(caller))
        logger.info("%s paused by %s", self.gate.source, caller)

    def unpause(self, caller: str) -> None:
        with self.ledger.atomic():
            self.gate.check_role(caller, PAUSER_ROLE)
            if not self.paused:
                raise Paused("Pausable: not paused")
            self.ledger.write(self._state, "paused", False)
            self.ledger.emit(self.gate.source, "Unpaused", account=normalize_address(caller))
        logger.info("%s unpaused by %s", self.gate.source, caller)
