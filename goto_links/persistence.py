"""Append-only persistence log for URL mappings.

Each accepted write becomes one line::

    hello: "https://example.com"

The whole file is therefore a YAML mapping document, which is how it is read
back when the store starts. Later lines win over earlier ones for the same key.
Characters a YAML reader would refuse are written as ``\\uXXXX`` escapes.
"""

import json
import logging
import os
import re
from typing import Dict, Optional, TextIO

import yaml
from yaml.nodes import ScalarNode
from yaml.reader import Reader
from yaml.resolver import Resolver

from .common.validators import is_valid_identifier, is_valid_url
from .errors import CorruptLog


_PLAIN_KEY = re.compile(r"^[A-Za-z0-9_-]+$")
_STR_TAG = "tag:yaml.org,2002:str"
_resolver = Resolver()

# Characters a YAML reader refuses raw, plus the ones it folds as line breaks
_UNSAFE = re.compile(f"[\x85\u2028\u2029]|{Reader.NON_PRINTABLE.pattern}")


def _escape(match) -> str:
    return f"\\u{ord(match.group()):04x}"


def _quote(value: str) -> str:
    """Double-quote a scalar, escaping everything YAML cannot carry raw."""
    return _UNSAFE.sub(_escape, json.dumps(value, ensure_ascii=False))


def _format_key(identifier: str) -> str:
    """Write the key plain only when YAML would read it back as the same string."""
    if _PLAIN_KEY.match(identifier):
        tag = _resolver.resolve(ScalarNode, identifier, (True, False))
        if tag == _STR_TAG:
            return identifier
    return _quote(identifier)


def format_entry(identifier: str, target: str) -> str:
    """Format one log line for a mapping.

    Args:
        identifier: The short identifier
        target: The target URL

    Returns:
        A newline-terminated ``key: "value"`` line
    """
    return f"{_format_key(identifier)}: {_quote(target)}\n"


class PersistenceLog:
    """Append-only file sink for accepted mappings."""

    def __init__(
        self,
        handle: TextIO,
        path: str,
        fsync: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize persistence log.

        Args:
            handle: Open text handle in append mode
            path: Path of the file behind the handle
            fsync: Whether to fsync after every append
            logger: Optional logger instance
        """
        self._handle = handle
        self.path = path
        self.fsync = fsync
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def open(
        cls,
        path: str,
        fsync: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> Optional["PersistenceLog"]:
        """Open (or create) the log file without truncating it.

        Args:
            path: Path of the log file
            fsync: Whether to fsync after every append
            logger: Optional logger instance

        Returns:
            The log, or None when the file cannot be opened
        """
        logger = logger or logging.getLogger(__name__)
        try:
            # a+ reads from anywhere but always writes at the end
            handle = open(path, "a+", encoding="utf-8")
        except OSError as e:
            logger.warning(f"Cannot open persistence log {path}: {e} - running in memory only")
            return None

        logger.info(f"Opened persistence log {path}")
        return cls(handle, path, fsync=fsync, logger=logger)

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def load(self) -> Dict[str, str]:
        """Parse the whole file into a mapping.

        A last line missing its newline is terminated here, so the next
        append starts on a line of its own.

        Returns:
            Identifier to target mapping, empty for an empty file

        Raises:
            CorruptLog: If the content is not a key/value document of
                identifiers and absolute URLs
        """
        self._handle.seek(0)
        content = self._handle.read()

        if content and not content.endswith("\n"):
            self._handle.write("\n")
            self._handle.flush()

        if not content.strip():
            return {}

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise CorruptLog(self.path, str(e)) from e

        if not isinstance(data, dict):
            raise CorruptLog(self.path, f"expected a mapping, got {type(data).__name__}")

        mapping = {}
        for key, value in data.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise CorruptLog(self.path, f"entry {key!r}: {value!r} is not a pair of strings")
            is_valid, error = is_valid_identifier(key)
            if not is_valid:
                raise CorruptLog(self.path, f"entry {key!r}: {error}")
            is_valid, error = is_valid_url(value)
            if not is_valid:
                raise CorruptLog(self.path, f"entry {key!r}: {error}")
            mapping[key] = value

        self.logger.info(f"Loaded {len(mapping)} mappings from {self.path}")
        return mapping

    def append(self, identifier: str, target: str) -> None:
        """Append one mapping to the end of the file.

        Args:
            identifier: The short identifier
            target: The target URL

        Raises:
            OSError: If the write fails or the log is closed
        """
        if self._handle.closed:
            raise OSError(f"persistence log {self.path} is closed")

        self._handle.write(format_entry(identifier, target))
        self._handle.flush()
        if self.fsync:
            os.fsync(self._handle.fileno())

    def close(self) -> None:
        """Close the underlying file."""
        if not self._handle.closed:
            self._handle.close()
            self.logger.info(f"Closed persistence log {self.path}")
