"""Base transport interface for the workflow API."""

from __future__ import annotations

import abc

from ..result import Result
from ..workflow.models import (
    HealthCheckResponse,
    SaveWorkflowRequest,
    SaveWorkflowResponse,
    WorkflowExecutionRequest,
    WorkflowExecutionResponse,
)


class WorkflowTransport(metaclass=abc.ABCMeta):
    """Stateless request/response mapping to the workflow endpoints.

    Implementations never raise for remote failures; they return a failed
    ``Result`` holding a :class:`~serverflow.errors.WorkflowError`.
    """

    async def connect(self) -> None:
        """Open underlying resources (no-op by default)."""
        pass

    async def disconnect(self) -> None:
        """Release underlying resources (no-op by default)."""
        pass

    @abc.abstractmethod
    async def save_workflow(self, request: SaveWorkflowRequest) -> Result[SaveWorkflowResponse]:
        """Store a workflow definition (``POST /workflow/save``)."""
        raise NotImplementedError

    @abc.abstractmethod
    async def execute_workflow(
        self, request: WorkflowExecutionRequest
    ) -> Result[WorkflowExecutionResponse]:
        """Create or advance a session (``POST /client/workflow``)."""
        raise NotImplementedError

    @abc.abstractmethod
    async def health_check(self) -> Result[HealthCheckResponse]:
        """Probe the API (``GET /healthcheck``)."""
        raise NotImplementedError
