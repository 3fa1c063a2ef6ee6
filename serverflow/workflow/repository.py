"""Session continuity between the client and the server workflow FSM."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..errors import SessionExpired, ValidationError
from ..reactive import StateCell
from ..result import Result
from ..session import SessionStore
from .context import context_to_wire, to_workflow_state
from .models import (
    HealthCheckResponse,
    SaveWorkflowRequest,
    StateSet,
    WorkflowExecutionRequest,
    WorkflowState,
)

if TYPE_CHECKING:
    from ..transports import WorkflowTransport

logger = logging.getLogger(__name__)


class WorkflowSessionRepository:
    """Drives the server FSM and owns the single current ``WorkflowState``.

    Every execute call sends the stored session id, the effective workflow
    id and the context delta; the server's answer replaces the published
    state wholesale. Calls are serialized so only one writer updates the
    session store and the state cell at a time; a response that arrives
    after the session was cleared is dropped.
    """

    def __init__(self, transport: "WorkflowTransport", session_store: SessionStore) -> None:
        self._transport = transport
        self._sessions = session_store
        self._state: StateCell[Optional[WorkflowState]] = StateCell(None)
        self._lock = asyncio.Lock()
        self._generation = 0

    @property
    def current_state(self) -> Optional[WorkflowState]:
        return self._state.value

    def observe_workflow_state(self) -> StateCell[Optional[WorkflowState]]:
        return self._state

    async def save_workflow(
        self, states: StateSet, predefined_context: Optional[Mapping[str, Any]] = None
    ) -> Result[str]:
        """Store a workflow definition and remember its id for later starts."""
        request = SaveWorkflowRequest(
            states=states, predefined_context=context_to_wire(predefined_context)
        )
        result = await self._transport.save_workflow(request)

        def remember(response) -> str:
            self._sessions.save_workflow_id(response.wf_description_id)
            logger.info(f"Saved workflow {response.wf_description_id}")
            return response.wf_description_id

        return result.map(remember)

    async def start_workflow(
        self,
        workflow_id: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> Result[WorkflowState]:
        """Start a new session or resume the stored one.

        A workflow id is required unless a session already exists.
        """
        effective_workflow_id = workflow_id or self._sessions.get_workflow_id()
        if effective_workflow_id is None and not self._sessions.has_active_session():
            return Result.failure(ValidationError("workflow_id is required for new session"))
        return await self._execute(
            workflow_id=effective_workflow_id,
            context=context,
            persist_workflow_id=bool(workflow_id),
        )

    async def send_event(
        self, event_name: str, context: Optional[Mapping[str, Any]] = None
    ) -> Result[WorkflowState]:
        """Fire ``event_name`` with an optional context delta."""
        return await self._execute(
            workflow_id=self._sessions.get_workflow_id(),
            context=context,
            event_name=event_name,
        )

    async def update_context(self, context: Mapping[str, Any]) -> Result[WorkflowState]:
        """Merge ``context`` into the session without firing an event."""
        return await self._execute(workflow_id=self._sessions.get_workflow_id(), context=context)

    async def health_check(self) -> Result[HealthCheckResponse]:
        return await self._transport.health_check()

    def get_current_session_id(self) -> Optional[str]:
        if self._sessions.has_active_session():
            return self._sessions.get_session_id()
        return None

    def get_current_workflow_id(self) -> Optional[str]:
        return self._sessions.get_workflow_id()

    def clear_session(self, forget_workflow: bool = False) -> None:
        """Drop the stored session id and publish ``None`` to observers."""
        self._generation += 1
        self._sessions.clear_session()
        if forget_workflow:
            self._sessions.clear_workflow_id()
        self._state.set(None)
        logger.info("Workflow session cleared")

    async def _execute(
        self,
        workflow_id: Optional[str],
        context: Optional[Mapping[str, Any]],
        event_name: Optional[str] = None,
        persist_workflow_id: bool = False,
    ) -> Result[WorkflowState]:
        async with self._lock:
            generation = self._generation
            session_id = self._sessions.get_session_id()
            request = WorkflowExecutionRequest(
                client_session_id=session_id,
                client_workflow_id=workflow_id,
                context=context_to_wire(context),
                event_name=event_name,
            )
            logger.debug(
                f"Executing workflow session={session_id} workflow={workflow_id} event={event_name}"
            )
            result = await self._transport.execute_workflow(request)
            if result.is_failure:
                logger.warning(f"Workflow call failed for session {session_id}: {result.error}")
                return Result.failure(result.error)

            if generation != self._generation:
                logger.info(f"Dropping response for session {session_id}: session was cleared")
                return Result.failure(SessionExpired("Workflow session was cleared"))

            response = result.get_or_raise()
            self._sessions.update_session_id(response.session_id)
            if persist_workflow_id and workflow_id:
                self._sessions.save_workflow_id(workflow_id)
            state = to_workflow_state(response)
            self._state.set(state)
            logger.info(
                f"Workflow session {state.session_id} now in {state.current_state} ({state.state_type.value})"
            )
            return Result.success(state)
