"""Validation utilities for targets and identifiers."""

import re
from urllib.parse import urlparse
from typing import Tuple


_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")

# Schemes whose URLs are meaningless without a host
_HOST_SCHEMES = {"http", "https", "ws", "wss", "ftp"}


def _has_forbidden_chars(value: str) -> bool:
    return any(c.isspace() or ord(c) < 0x20 or ord(c) == 0x7f for c in value)


def _is_utf8(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate that a target is an absolute URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if not _is_utf8(url):
        return False, "URL is not valid UTF-8"

    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"invalid URL format: {e}"

    if not result.scheme:
        return False, "relative URL without a base"

    if _has_forbidden_chars(url):
        return False, "URL contains whitespace or control characters"

    if not _SCHEME.match(result.scheme):
        return False, f"invalid scheme '{result.scheme}'"

    if result.scheme in _HOST_SCHEMES:
        if not result.netloc:
            return False, "empty host"
        try:
            # raises on a malformed port
            result.port
        except ValueError as e:
            return False, f"invalid port: {e}"
        if not result.hostname:
            return False, "empty host"

    return True, ""


def is_valid_identifier(identifier: str) -> Tuple[bool, str]:
    """Validate an explicit identifier.

    Identifiers are single path segments and single log lines, so slashes,
    whitespace and control characters are rejected.

    Args:
        identifier: The identifier to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not identifier or not isinstance(identifier, str):
        return False, "identifier is required"

    if not _is_utf8(identifier):
        return False, "identifier is not valid UTF-8"

    if "/" in identifier:
        return False, "identifier cannot contain '/'"

    if _has_forbidden_chars(identifier):
        return False, "identifier cannot contain whitespace or control characters"

    return True, ""
