"""Shared helpers."""

from .retry import compute_backoff, retry_io

__all__ = ["compute_backoff", "retry_io"]
