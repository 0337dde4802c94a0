"""
Shared transactional ledger.

All registries deployed against one ledger mutate state only through
``Ledger.atomic()``. Writes are journaled so that a failing operation is
undone completely (consumed digest included) and its events are never
published.

Event-sourced design:
- state maps are owned by each registry
- every committed operation appends immutable events
- indexers rebuild registry state by replaying events
"""

import functools
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, MutableMapping, MutableSequence, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


def read_view(method):
    """Run a registry view under its ledger lock so it never sees uncommitted writes"""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.ledger.read():
            return method(self, *args, **kwargs)
    return wrapper


@dataclass(frozen=True)
class Event:
    """A committed registry event."""
    seq: int
    name: str
    source: str
    timestamp: int
    args: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        args = {k: ("0x" + v.hex() if isinstance(v, bytes) else v) for k, v in self.args.items()}
        return {
            "seq": self.seq,
            "name": self.name,
            "source": self.source,
            "timestamp": self.timestamp,
            "args": args,
        }


class Transaction:
    """Undo journal and pending events of one atomic operation"""

    def __init__(self, timestamp: int):
        self.timestamp = timestamp
        self._undo: List[Callable[[], None]] = []
        self.pending: List[tuple] = []

    def record(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()
        self.pending.clear()


class Ledger:
    """Single shared state authority for a set of registries"""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._lock = threading.RLock()
        self._tx: Optional[Transaction] = None
        self._subscribers: List[Callable[[Event], None]] = []
        self.events: List[Event] = []
        # digests consumed by any registry on this ledger
        self.consumed_digests: set = set()

    def now(self) -> int:
        """Current ledger time in whole seconds"""
        with self._lock:
            if self._tx is not None:
                return self._tx.timestamp
            return int(self._clock())

    @property
    def in_transaction(self) -> bool:
        return self._tx is not None

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the ledger lock for a consistent view; waits out in-flight transactions"""
        with self._lock:
            yield

    @contextmanager
    def atomic(self) -> Iterator[Transaction]:
        """Run a block as one indivisible operation; nested calls join the outer one"""
        with self._lock:
            if self._tx is not None:
                yield self._tx
                return

            tx = Transaction(int(self._clock()))
            self._tx = tx
            try:
                yield tx
            except Exception:
                tx.rollback()
                logger.debug("Transaction rolled back")
                raise
            finally:
                self._tx = None
            self._publish(tx)

    def _require_tx(self) -> Transaction:
        if self._tx is None:
            raise RuntimeError("Ledger writes must happen inside Ledger.atomic()")
        return self._tx

    def write(self, mapping: MutableMapping, key: Any, value: Any) -> None:
        tx = self._require_tx()
        previous = mapping.get(key, _MISSING)

        def undo():
            if previous is _MISSING:
                mapping.pop(key, None)
            else:
                mapping[key] = previous

        mapping[key] = value
        tx.record(undo)

    def delete(self, mapping: MutableMapping, key: Any) -> None:
        tx = self._require_tx()
        if key not in mapping:
            return
        previous = mapping.pop(key)
        tx.record(lambda: mapping.__setitem__(key, previous))

    def append(self, sequence: MutableSequence, value: Any) -> int:
        tx = self._require_tx()
        sequence.append(value)
        tx.record(sequence.pop)
        return len(sequence) - 1

    def add(self, members: set, value: Any) -> None:
        tx = self._require_tx()
        if value in members:
            return
        members.add(value)
        tx.record(lambda: members.discard(value))

    def discard(self, members: set, value: Any) -> None:
        tx = self._require_tx()
        if value not in members:
            return
        members.discard(value)
        tx.record(lambda: members.add(value))

    def emit(self, source: str, name: str, **args: Any) -> None:
        """Queue an event; it is published only if the transaction commits"""
        self._require_tx().pending.append((source, name, args))

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self._subscribers.append(callback)

    def _publish(self, tx: Transaction) -> None:
        committed = []
        for source, name, args in tx.pending:
            event = Event(len(self.events), name, source, tx.timestamp, args)
            self.events.append(event)
            committed.append(event)
            logger.debug("Event %s from %s: %s", name, source, args)

        # state is committed: subscriber failures are logged, never raised
        for event in committed:
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception:
                    logger.exception("Subscriber %r failed on event %s #%d", callback, event.name, event.seq)

    def get_events(self, name: Optional[str] = None, source: Optional[str] = None) -> List[Event]:
        with self._lock:
            return [
                e for e in self.events
                if (name is None or e.name == name) and (source is None or e.source == source)
            ]
