"""Durable ownership of the client session and workflow identifiers."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Optional

from .store import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "workflow_session_id"
WORKFLOW_ID_KEY = "workflow_workflow_id"


class SessionStore:
    """Reads and writes ``session_id``/``workflow_id`` through a key/value store.

    The session id is generated locally on first use and then replaced by
    whatever the server echoes back.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._lock = threading.Lock()

    def get_session_id(self) -> str:
        """Return the current session id, creating and persisting one if absent."""
        with self._lock:
            existing = self._store.get(SESSION_ID_KEY)
            if existing is not None:
                return existing
            session_id = str(uuid.uuid4())
            self._store.put(SESSION_ID_KEY, session_id)
        logger.debug(f"Created local session id {session_id}")
        return session_id

    def update_session_id(self, session_id: str) -> None:
        self._store.put(SESSION_ID_KEY, session_id)

    def clear_session(self) -> None:
        self._store.remove(SESSION_ID_KEY)

    def has_active_session(self) -> bool:
        return self._store.get(SESSION_ID_KEY) is not None

    def save_workflow_id(self, workflow_id: str) -> None:
        self._store.put(WORKFLOW_ID_KEY, workflow_id)

    def get_workflow_id(self) -> Optional[str]:
        return self._store.get(WORKFLOW_ID_KEY)

    def clear_workflow_id(self) -> None:
        self._store.remove(WORKFLOW_ID_KEY)
