"""In-memory workflow transport for tests and offline runs."""

from __future__ import annotations

import asyncio
import uuid
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, List, Optional, Union

from ..result import Result
from ..workflow.models import (
    CREATED_AT_KEY,
    INIT_STATE_KEY,
    WORKFLOW_ID_KEY,
    HealthCheckResponse,
    SaveWorkflowRequest,
    SaveWorkflowResponse,
    StateSet,
    StateType,
    WorkflowExecutionRequest,
    WorkflowExecutionResponse,
)
from .base import WorkflowTransport
from .http import map_http_error

Scripted = Union[WorkflowExecutionResponse, BaseException]
Responder = Callable[[WorkflowExecutionRequest, Dict[str, Any]], WorkflowExecutionResponse]


class InMemoryWorkflowTransport(WorkflowTransport):
    """Simple in-process stand-in for the workflow API.

    Scripted responses (or exceptions) queued with :meth:`enqueue` are
    returned in order. Without a script, each session accumulates the context
    it is sent and the configured ``responder`` (by default one that echoes
    the accumulated context in the ``__init__`` service state) builds the reply.
    Every request is recorded in :attr:`requests`.
    """

    def __init__(self, responder: Optional[Responder] = None) -> None:
        self._script: Deque[Scripted] = deque()
        self._responder = responder or self._echo
        self._lock = asyncio.Lock()
        self.requests: List[WorkflowExecutionRequest] = []
        self.sessions: Dict[str, Dict[str, Any]] = defaultdict(dict)
        self.workflows: Dict[str, StateSet] = {}
        self.healthy = True

    def enqueue(self, *responses: Scripted) -> None:
        self._script.extend(responses)

    async def save_workflow(self, request: SaveWorkflowRequest) -> Result[SaveWorkflowResponse]:
        workflow_id = str(uuid.uuid4())
        async with self._lock:
            self.workflows[workflow_id] = request.states
        return Result.success(
            SaveWorkflowResponse(
                status="ok", wf_description_id=workflow_id, wf_context_id=str(uuid.uuid4())
            )
        )

    async def execute_workflow(
        self, request: WorkflowExecutionRequest
    ) -> Result[WorkflowExecutionResponse]:
        async with self._lock:
            self.requests.append(request)
            context = self.sessions[request.client_session_id]
            if request.client_workflow_id and WORKFLOW_ID_KEY not in context:
                context[WORKFLOW_ID_KEY] = request.client_workflow_id
            context.update(request.context)
            scripted = self._script.popleft() if self._script else None

        if isinstance(scripted, BaseException):
            return Result.failure(map_http_error(scripted))
        if scripted is not None:
            return Result.success(scripted)
        try:
            return Result.success(self._responder(request, dict(context)))
        except Exception as exc:
            return Result.failure(map_http_error(exc))

    async def health_check(self) -> Result[HealthCheckResponse]:
        return Result.success(HealthCheckResponse(status="ok" if self.healthy else "degraded"))

    @staticmethod
    def _echo(request: WorkflowExecutionRequest, context: Dict[str, Any]) -> WorkflowExecutionResponse:
        context.setdefault(CREATED_AT_KEY, "1970-01-01T00:00:00Z")
        return WorkflowExecutionResponse(
            session_id=request.client_session_id,
            context=context,
            current_state=INIT_STATE_KEY,
            state_type=StateType.SERVICE,
        )
