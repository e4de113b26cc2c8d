"""Error taxonomy for the mapping store."""


class StoreError(Exception):
    """Base class for every error the store reports to its callers."""


class MalformedTarget(StoreError):
    """The target does not parse as an absolute URL."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"malformed URL: {reason}")


class InvalidIdentifier(StoreError):
    """The identifier cannot be used as a short URL."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"invalid identifier: {reason}")


class AlreadyRegistered(StoreError):
    """A create was attempted for an identifier that already exists."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__("already registered")


class IoFailure(StoreError):
    """Appending to the persistence log failed.

    The in-memory mutation has already been applied when this is raised.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"persistence failure: {reason}")


class LockFailure(StoreError):
    """The store lock was poisoned by a writer that failed mid-write."""

    def __init__(self, reason: str = "a writer failed while holding the lock"):
        self.reason = reason
        super().__init__(f"store lock poisoned: {reason}")


class CorruptLog(StoreError):
    """The persistence log exists but is not a key/value document."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot load {path}: {reason}")
