"""Replay protection: the ledger-wide set of consumed operation digests"""

import logging

from .errors import DigestReused
from .ledger import Ledger, read_view

logger = logging.getLogger(__name__)


class ReplayGuard:
    """
    Check-then-set over the ledger's consumed digest set.

    The insert is journaled by the ledger, so it commits or rolls back
    together with the operation that consumed it. Digests are never removed
    once committed.
    """

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    @read_view
    def is_consumed(self, digest: bytes) -> bool:
        return digest in self.ledger.consumed_digests

    def check_and_consume(self, digest: bytes) -> None:
        if self.is_consumed(digest):
            logger.warning("Rejected reused digest 0x%s", digest.hex())
            raise DigestReused(details={"digest": "0x" + digest.hex()})
        self.ledger.add(self.ledger.consumed_digests, digest)

    def __contains__(self, digest: bytes) -> bool:
        return self.is_consumed(digest)

    @read_view
    def __len__(self) -> int:
        return len(self.ledger.consumed_digests)
