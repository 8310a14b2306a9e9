"""
Document Store for Bluffdict

Atomic document store used by every service. Documents live at slash
separated paths ("rooms/abc/players/u1") and are plain dicts.

State changes go through transactions: a transaction records the version of
every document it reads, stages its writes, and commits only if none of
those versions moved in the meantime. A conflicting transaction is re-run
from scratch, so callers must keep their transaction bodies free of side
effects other than staged writes.
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from bluffdict.core.errors import ErrorCode, GameError

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Optional[Dict[str, Any]]]
ChangeListener = Callable[[List[str]], None]

DEFAULT_MAX_ATTEMPTS = 5


class TransactionConflictError(GameError):
    """Raised when a transaction keeps losing races after every retry."""
    default_code = ErrorCode.TRANSACTION_CONFLICT


class _StaleReadError(Exception):
    """Internal signal that a transaction's read set changed before commit."""


def parent_collection(path: str) -> str:
    """Collection path of a document path."""
    return path.rsplit("/", 1)[0]


class Transaction:
    """Read set plus staged writes of one transaction attempt."""

    def __init__(self, store: 'DocumentStore'):
        self._store = store
        self._reads: Dict[str, int] = {}
        self._writes: List[Tuple[str, str, Any]] = []

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Read a document and add it to the read set."""
        data, version = self._store._read_versioned(path)
        self._reads.setdefault(path, version)
        return data

    def set(self, path: str, data: Mapping[str, Any]) -> 'Transaction':
        self._writes.append(("set", path, copy.deepcopy(dict(data))))
        return self

    def update(self, path: str, fields: Mapping[str, Any]) -> 'Transaction':
        self._writes.append(("update", path, copy.deepcopy(dict(fields))))
        return self

    def increment(self, path: str, field: str, amount: int) -> 'Transaction':
        """Add to a numeric field at commit time, without reading it."""
        self._writes.append(("increment", path, (field, amount)))
        return self

    @property
    def read_versions(self) -> Dict[str, int]:
        return dict(self._reads)

    @property
    def writes(self) -> List[Tuple[str, str, Any]]:
        return list(self._writes)


class DocumentStore(ABC):
    """Store capability the game services are written against."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @abstractmethod
    def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Get a copy of a document, or None if it doesn't exist."""

    @abstractmethod
    def set(self, path: str, data: Mapping[str, Any]) -> None:
        """Create or replace a document."""

    @abstractmethod
    def update(self, path: str, fields: Mapping[str, Any]) -> None:
        """Merge fields into a document, creating it if missing."""

    @abstractmethod
    def increment(self, path: str, field: str, amount: int) -> None:
        """Atomically add to a numeric field."""

    @abstractmethod
    def list_collection(self, collection_path: str) -> List[Tuple[str, Dict[str, Any]]]:
        """List (doc_id, data) pairs of a collection in creation order."""

    @abstractmethod
    def query(self, collection_path: str, field: str, value: Any) -> List[Tuple[str, Dict[str, Any]]]:
        """List documents of a collection whose field equals value."""

    @abstractmethod
    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback receiving the paths changed by each commit."""

    @abstractmethod
    def remove_listener(self, listener: ChangeListener) -> None:
        """Unregister a change callback."""

    @abstractmethod
    def _read_versioned(self, path: str) -> Tuple[Optional[Dict[str, Any]], int]:
        """Read a document together with its version."""

    @abstractmethod
    def _commit(self, transaction: Transaction) -> List[str]:
        """
        Apply a transaction's writes if its read set is still current.

        Returns:
            Paths that changed

        Raises:
            _StaleReadError: If a document read by the transaction moved
        """

    @abstractmethod
    def _notify(self, changed_paths: List[str]) -> None:
        """Deliver changed paths to listeners."""

    def run_transaction(self, body: Callable[[Transaction], Any]) -> Any:
        """
        Run body inside a transaction, retrying it on read conflicts.

        Args:
            body: Callable receiving the Transaction; its return value is
                returned once the transaction commits

        Returns:
            The body's return value from the attempt that committed

        Raises:
            TransactionConflictError: If every attempt conflicted
        """
        for attempt in range(1, self.max_attempts + 1):
            transaction = Transaction(self)
            result = body(transaction)
            try:
                changed = self._commit(transaction)
            except _StaleReadError:
                logger.debug(f"Transaction conflict on attempt {attempt}, retrying")
                continue
            if changed:
                self._notify(changed)
            return result

        raise TransactionConflictError(
            ErrorCode.TRANSACTION_CONFLICT,
            f"Transaction failed after {self.max_attempts} attempts"
        )

    def run_atomic(self, read_paths: Sequence[str],
                   validate: Callable[[Snapshot], bool],
                   write: Callable[[Snapshot, Transaction], None]) -> bool:
        """
        Read a set of documents, check a guard, and write in one transaction.

        Args:
            read_paths: Documents to read into the snapshot
            validate: Guard over the snapshot. Returning False turns the
                transaction into a no-op; raising aborts it
            write: Stages writes on the transaction from the snapshot

        Returns:
            True if the writes were committed, False if the guard declined
        """
        def body(transaction: Transaction) -> bool:
            snapshot = {path: transaction.get(path) for path in read_paths}
            if not validate(snapshot):
                return False
            write(snapshot, transaction)
            return True

        return self.run_transaction(body)


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe in-process store with optimistic concurrency control."""

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self.max_attempts = max_attempts
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._versions: Dict[str, int] = {}
        self._lock = threading.RLock()
        self._listeners: List[ChangeListener] = []
        self._listeners_lock = threading.Lock()

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        return self._read_versioned(path)[0]

    def set(self, path: str, data: Mapping[str, Any]) -> None:
        self.run_transaction(lambda transaction: transaction.set(path, data))

    def update(self, path: str, fields: Mapping[str, Any]) -> None:
        self.run_transaction(lambda transaction: transaction.update(path, fields))

    def increment(self, path: str, field: str, amount: int) -> None:
        self.run_transaction(lambda transaction: transaction.increment(path, field, amount))

    def list_collection(self, collection_path: str) -> List[Tuple[str, Dict[str, Any]]]:
        prefix = collection_path.rstrip("/") + "/"
        with self._lock:
            return [
                (path[len(prefix):], copy.deepcopy(data))
                for path, data in self._documents.items()
                if path.startswith(prefix) and "/" not in path[len(prefix):]
            ]

    def query(self, collection_path: str, field: str, value: Any) -> List[Tuple[str, Dict[str, Any]]]:
        return [
            (doc_id, data)
            for doc_id, data in self.list_collection(collection_path)
            if data.get(field) == value
        ]

    def add_listener(self, listener: ChangeListener) -> None:
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def clear(self) -> None:
        """Drop every document (useful for testing)."""
        with self._lock:
            self._documents.clear()
            self._versions.clear()

    def version_of(self, path: str) -> int:
        with self._lock:
            return self._versions.get(path, 0)

    def _read_versioned(self, path: str) -> Tuple[Optional[Dict[str, Any]], int]:
        with self._lock:
            data = self._documents.get(path)
            return (copy.deepcopy(data) if data is not None else None), self._versions.get(path, 0)

    def _commit(self, transaction: Transaction) -> List[str]:
        changed: List[str] = []
        with self._lock:
            for path, version in transaction.read_versions.items():
                if self._versions.get(path, 0) != version:
                    raise _StaleReadError(path)

            for operation, path, payload in transaction.writes:
                if operation == "set":
                    self._documents[path] = payload
                elif operation == "update":
                    self._documents.setdefault(path, {}).update(payload)
                elif operation == "increment":
                    field, amount = payload
                    document = self._documents.setdefault(path, {})
                    document[field] = (document.get(field) or 0) + amount
                else:
                    raise ValueError(f"Unknown write operation: {operation}")
                self._versions[path] = self._versions.get(path, 0) + 1
                if path not in changed:
                    changed.append(path)

        if changed:
            logger.debug(f"Committed {len(transaction.writes)} writes to {len(changed)} documents")
        return changed

    def _notify(self, changed_paths: List[str]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(changed_paths)
            except Exception as e:
                logger.error(f"Error in store change listener: {e}")


def server_timestamp() -> datetime:
    """Timestamp stamped on documents at write time."""
    return datetime.now()
