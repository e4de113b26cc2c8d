"""Core of the goto URL shortener: store, hasher and persistence log."""

from .errors import (
    StoreError,
    MalformedTarget,
    InvalidIdentifier,
    AlreadyRegistered,
    IoFailure,
    LockFailure,
    CorruptLog,
)
from .hasher import Hasher, derive_id
from .persistence import PersistenceLog
from .store import Store, UpsertEffect, UpsertMode

__version__ = "0.3.0"

__all__ = [
    "StoreError",
    "MalformedTarget",
    "InvalidIdentifier",
    "AlreadyRegistered",
    "IoFailure",
    "LockFailure",
    "CorruptLog",
    "Hasher",
    "derive_id",
    "PersistenceLog",
    "Store",
    "UpsertEffect",
    "UpsertMode",
]
