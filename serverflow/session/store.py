"""Key/value abstraction behind the session store."""

from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """Protocol for durable string key/value backends."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None``."""

    def put(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""
