"""Middleware for the goto web app."""

from .logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
