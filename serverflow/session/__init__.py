"""Session identity persistence for serverflow clients."""

from __future__ import annotations

import os
from typing import Optional

from ..config import ServerflowConfig, load_config
from .inmemory import InMemoryKeyValueStore
from .manager import SESSION_ID_KEY, WORKFLOW_ID_KEY, SessionStore
from .sqlite import SQLiteKeyValueStore
from .store import KeyValueStore


def get_key_value_store(
    url: Optional[str] = None, config: Optional[ServerflowConfig] = None
) -> KeyValueStore:
    """Factory function to obtain the key/value backend for session identity.

    The backend is selected from ``url``, the ``SERVERFLOW_SESSION_STORE``
    environment variable or the loaded configuration. When nothing is
    configured an in-memory store is returned.
    """

    if url is None:
        config = config or load_config()
        url = os.getenv("SERVERFLOW_SESSION_STORE") or config.session_store

    if not url:
        return InMemoryKeyValueStore()

    if url.startswith("sqlite://"):
        path = url.replace("sqlite://", "", 1)
        return SQLiteKeyValueStore(path)
    raise ValueError(f"Unsupported session store backend: {url}")


__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "SessionStore",
    "SESSION_ID_KEY",
    "WORKFLOW_ID_KEY",
    "get_key_value_store",
]
