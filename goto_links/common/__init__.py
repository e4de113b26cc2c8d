"""Common utilities for goto."""

from .validators import is_valid_url, is_valid_identifier
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_valid_identifier",
    "setup_logging",
]
