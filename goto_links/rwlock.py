"""Reader/writer lock with explicit poisoning."""

import threading
from contextlib import contextmanager
from typing import Iterator

from .errors import LockFailure


class RWLock:
    """Many readers or one writer.

    Waiting writers block new readers so a steady stream of lookups cannot
    starve an upsert. If an exception escapes while the write lock is held,
    the lock becomes poisoned: every later acquisition raises LockFailure
    until clear_poison() is called.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0
        self._poisoned = False
        self._poison_reason = ""

    @property
    def poisoned(self) -> bool:
        with self._cond:
            return self._poisoned

    def clear_poison(self) -> None:
        with self._cond:
            self._poisoned = False
            self._poison_reason = ""

    def _check_poison(self) -> None:
        if self._poisoned:
            raise LockFailure(self._poison_reason)

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock shared for the duration of the block."""
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._check_poison()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock exclusively for the duration of the block."""
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            if self._poisoned:
                # readers may be parked on our waiting count
                self._cond.notify_all()
                raise LockFailure(self._poison_reason)
            self._writer = True
        try:
            yield
        except BaseException as e:
            with self._cond:
                self._poisoned = True
                self._poison_reason = f"writer failed with {type(e).__name__}: {e}"
            raise
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()
