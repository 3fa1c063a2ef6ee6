"""High-level facade over the workflow session repository."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Awaitable, Mapping, Optional

from ..reactive import StateCell
from ..result import Result
from .models import HealthCheckResponse, StateSet, WorkflowState
from .repository import WorkflowSessionRepository

logger = logging.getLogger(__name__)


class WorkflowManager:
    """Simplified verbs for presentation layers.

    ``start_workflow`` begins a flow, ``send_event`` advances it,
    ``restore_session`` resumes after a restart and ``end_session`` forgets
    the local session.
    """

    def __init__(self, repository: WorkflowSessionRepository) -> None:
        self._repository = repository

    @property
    def repository(self) -> WorkflowSessionRepository:
        return self._repository

    async def start_workflow(
        self, workflow_id: Optional[str], initial_context: Optional[Mapping[str, Any]] = None
    ) -> Result[WorkflowState]:
        """Start ``workflow_id`` sending ``initial_context`` with the first request.

        Args:
            workflow_id: Workflow to run; ``None`` resumes the stored one.
            initial_context: Seed values such as user id or device type.
        """
        return await self._guarded(
            "starting workflow", self._repository.start_workflow(workflow_id, initial_context)
        )

    async def send_event(
        self, event_name: str, additional_context: Optional[Mapping[str, Any]] = None
    ) -> Result[WorkflowState]:
        return await self._guarded(
            f"sending event {event_name}",
            self._repository.send_event(event_name, additional_context),
        )

    async def update_context(self, updates: Mapping[str, Any]) -> Result[WorkflowState]:
        return await self._guarded("updating context", self._repository.update_context(updates))

    async def restore_session(self, session_id: Optional[str] = None) -> Optional[Result[WorkflowState]]:
        """Resume the stored session after an app restart.

        Returns ``None`` when no session id resolves, telling the caller to
        start a fresh flow. A passed ``session_id`` only gates the restore;
        the stored session is what gets resumed.
        """
        current_session_id = session_id or self._repository.get_current_session_id()
        if current_session_id is None:
            return None
        return await self._repository.start_workflow()

    def end_session(self, forget_workflow: bool = False) -> None:
        """Forget the local session; the server expires it by TTL."""
        self._repository.clear_session(forget_workflow=forget_workflow)

    def get_current_session_id(self) -> Optional[str]:
        return self._repository.get_current_session_id()

    def get_current_workflow_id(self) -> Optional[str]:
        return self._repository.get_current_workflow_id()

    def has_active_session(self) -> bool:
        return self._repository.get_current_session_id() is not None

    def observe_workflow_state(self) -> StateCell[Optional[WorkflowState]]:
        return self._repository.observe_workflow_state()

    async def save_workflow(
        self, states: StateSet, predefined_context: Optional[Mapping[str, Any]] = None
    ) -> Result[str]:
        """Store a workflow definition (admin operation)."""
        return await self._repository.save_workflow(states, predefined_context)

    async def health_check(self) -> Result[HealthCheckResponse]:
        return await self._repository.health_check()

    @staticmethod
    async def _guarded(
        what: str, call: Awaitable[Result[WorkflowState]]
    ) -> Result[WorkflowState]:
        try:
            return await call
        except Exception as exc:
            logger.exception(f"Unexpected failure {what}")
            return Result.failure(exc)

    @staticmethod
    def generate_session_id(user_id: Optional[str] = None) -> str:
        """Return ``session_{user}_{millis}_{random}``."""
        user_part = user_id or "anonymous"
        timestamp = int(time.time() * 1000)
        random_part = str(uuid.uuid4())[:8]
        return f"session_{user_part}_{timestamp}_{random_part}"
