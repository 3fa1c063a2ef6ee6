"""In-memory implementation of the key/value store."""

from __future__ import annotations

from typing import Dict, Optional

from .store import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Keep values in local memory.

    Useful for tests or when no durable store is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._values)
