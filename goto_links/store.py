"""In-memory mapping store with append-only persistence."""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .errors import (
    AlreadyRegistered,
    InvalidIdentifier,
    IoFailure,
    MalformedTarget,
)
from .hasher import Hasher
from .persistence import PersistenceLog
from .rwlock import RWLock
from .common.validators import is_valid_url, is_valid_identifier


class UpsertMode(enum.Enum):
    """How upsert treats an identifier that is already registered."""

    CREATE_ONLY = "create_only"
    UPDATE_ONLY = "update_only"


@dataclass(frozen=True)
class UpsertEffect:
    """Outcome of a successful upsert."""

    identifier: str
    target: str
    mode: UpsertMode
    previous: Optional[str] = None

    def describe(self) -> str:
        """Human readable description, as returned to HTTP callers."""
        message = f"/{self.identifier} now redirects to {self.target}"
        if self.previous is not None:
            message += f" (was {self.previous})"
        return message


class Store:
    """Identifier to target URL table guarded by one reader/writer lock.

    Lookups share the lock; upserts take it exclusively and keep it across
    the persistence append, so the log sees writes in the same order as the
    table does.
    """

    def __init__(
        self,
        mapping: Optional[Dict[str, str]] = None,
        log: Optional[PersistenceLog] = None,
        hasher: Optional[Hasher] = None,
        persist_updates: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize store.

        Args:
            mapping: Optional initial table (copied)
            log: Optional persistence log, owned by the store from now on
            hasher: Optional hasher for derived identifiers
            persist_updates: Whether overwrites are appended to the log too
            logger: Optional logger
        """
        self._table: Dict[str, str] = dict(mapping or {})
        self._log = log
        self._lock = RWLock()
        self.hasher = hasher or Hasher()
        self.persist_updates = persist_updates
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_path(
        cls,
        path: str,
        hasher: Optional[Hasher] = None,
        persist_updates: bool = True,
        fsync: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> "Store":
        """Build a store seeded from, and persisting to, a log file.

        If the file cannot be opened the store still works, in memory only.

        Raises:
            CorruptLog: If the file exists but cannot be parsed
        """
        logger = logger or logging.getLogger(__name__)
        log = PersistenceLog.open(path, fsync=fsync, logger=logger)
        if log is None:
            return cls(hasher=hasher, persist_updates=persist_updates, logger=logger)

        try:
            mapping = log.load()
        except Exception:
            log.close()
            raise

        return cls(
            mapping=mapping,
            log=log,
            hasher=hasher,
            persist_updates=persist_updates,
            logger=logger,
        )

    @property
    def persistent(self) -> bool:
        return self._log is not None and not self._log.closed

    def lookup(self, identifier: str) -> Optional[str]:
        """Get the target registered for an identifier.

        Raises:
            LockFailure: If the lock is poisoned
        """
        with self._lock.read():
            return self._table.get(identifier)

    def upsert(
        self,
        target: str,
        identifier: Optional[str] = None,
        mode: UpsertMode = UpsertMode.CREATE_ONLY,
    ) -> UpsertEffect:
        """Create or update a mapping.

        Args:
            target: Absolute target URL
            identifier: Explicit identifier, or None to derive one from the target
            mode: CREATE_ONLY refuses existing identifiers, UPDATE_ONLY
                overwrites them (and creates missing ones)

        Returns:
            Description of the applied write

        Raises:
            MalformedTarget: If target is not an absolute URL
            InvalidIdentifier: If an explicit identifier is unusable
            AlreadyRegistered: If CREATE_ONLY meets an existing identifier
            IoFailure: If the log append failed; the table is already updated
            LockFailure: If the lock is poisoned
        """
        is_valid, error = is_valid_url(target)
        if not is_valid:
            raise MalformedTarget(error)

        if identifier is None:
            identifier = self.hasher.derive_id(target)
        else:
            is_valid, error = is_valid_identifier(identifier)
            if not is_valid:
                raise InvalidIdentifier(error)

        conflict = False
        io_error: Optional[OSError] = None

        with self._lock.write():
            previous = self._table.get(identifier)

            if mode is UpsertMode.CREATE_ONLY and previous is not None:
                conflict = True
            else:
                self._table[identifier] = target
                if self._log is not None and (previous is None or self.persist_updates):
                    try:
                        self._log.append(identifier, target)
                    except OSError as e:
                        io_error = e

        if conflict:
            self.logger.debug(f"Refused create for existing identifier {identifier}")
            raise AlreadyRegistered(identifier)

        if io_error is not None:
            self.logger.error(f"Persisting {identifier} -> {target} failed: {io_error}")
            raise IoFailure(str(io_error)) from io_error

        if previous is None:
            self.logger.info(f"Registered {identifier} -> {target}")
        else:
            self.logger.info(f"Updated {identifier} -> {target} (was {previous})")

        return UpsertEffect(
            identifier=identifier,
            target=target,
            mode=mode,
            previous=previous,
        )

    def snapshot(self) -> Dict[str, str]:
        """Copy of the whole table, taken under the read lock."""
        with self._lock.read():
            return dict(self._table)

    def recover(self) -> None:
        """Acknowledge a poisoned lock and resume serving.

        Every mutation is a single dict assignment, so the table is left
        either before or after the failed write.
        """
        if self._lock.poisoned:
            self.logger.warning("Clearing poisoned store lock")
            self._lock.clear_poison()

    def close(self) -> None:
        """Close the persistence log, if any."""
        if self._log is not None:
            self._log.close()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._table)

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
