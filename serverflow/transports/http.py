"""HTTP transport for the workflow API built on httpx."""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config import RetryConfig, TimeoutConfig
from ..errors import (
    NetworkError,
    ParseError,
    ServerError,
    SessionExpired,
    UnknownError,
    ValidationError,
    WorkflowError,
)
from ..result import Result
from ..utils.retry import retry_io
from ..workflow.models import (
    HealthCheckResponse,
    SaveWorkflowRequest,
    SaveWorkflowResponse,
    WorkflowExecutionRequest,
    WorkflowExecutionResponse,
)
from .base import WorkflowTransport

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
T = TypeVar("T")

SESSION_EXPIRED_STATUSES = (401, 410)
VALIDATION_STATUSES = (400, 422)


def build_http_client(
    base_url: str, timeouts: Optional[TimeoutConfig] = None, **kwargs: Any
) -> httpx.AsyncClient:
    """Create the shared ``httpx.AsyncClient`` with connect/request/socket timeouts."""
    timeouts = timeouts or TimeoutConfig()
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=httpx.Timeout(
            timeouts.request,
            connect=timeouts.connect,
            read=timeouts.socket,
            write=timeouts.socket,
        ),
        headers={"Accept": "application/json"},
        **kwargs,
    )


def _response_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return json.dumps(body)[:200]


def map_http_error(error: BaseException) -> WorkflowError:
    """Translate transport, HTTP status and decoding failures into the error taxonomy."""
    if isinstance(error, WorkflowError):
        return error
    if isinstance(error, httpx.HTTPStatusError):
        code = error.response.status_code
        detail = _response_detail(error.response)
        if code in SESSION_EXPIRED_STATUSES:
            return SessionExpired(f"Workflow session expired: {detail}")
        if code in VALIDATION_STATUSES:
            return ValidationError(f"Validation error: {detail}")
        return ServerError(code, f"Server error: {detail}")
    if isinstance(error, httpx.TransportError):
        return NetworkError(f"Network error: {str(error) or type(error).__name__}")
    if isinstance(error, (PydanticValidationError, ValueError)):
        return ParseError(f"Unexpected response body: {error}")
    return UnknownError(f"Unknown error: {str(error) or type(error).__name__}")


async def guarded_call(
    call: Callable[[], Awaitable[T]], retry: Optional[RetryConfig] = None
) -> Result[T]:
    """Run ``call`` (optionally with backoff) and map any failure into the taxonomy."""
    if retry is not None:
        result = await retry_io(
            call,
            times=retry.times,
            initial_delay=retry.initial_delay,
            factor=retry.factor,
            max_delay=retry.max_delay,
        )
    else:
        try:
            result = Result.success(await call())
        except Exception as exc:
            result = Result.failure(exc)

    if result.is_failure:
        return Result.failure(map_http_error(result.error))
    return result


class HttpWorkflowTransport(WorkflowTransport):
    """Talks to the workflow API over HTTP.

    Only the idempotent health check is retried; ``POST`` calls are sent once
    so an event is never delivered twice.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeouts: Optional[TimeoutConfig] = None,
        retry: Optional[RetryConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._retry = retry
        self._owns_client = client is None
        self._client = client or build_http_client(self.base_url, timeouts)

    async def disconnect(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def save_workflow(self, request: SaveWorkflowRequest) -> Result[SaveWorkflowResponse]:
        return await self._send("POST", "/workflow/save", SaveWorkflowResponse, request.to_wire())

    async def execute_workflow(
        self, request: WorkflowExecutionRequest
    ) -> Result[WorkflowExecutionResponse]:
        return await self._send(
            "POST", "/client/workflow", WorkflowExecutionResponse, request.to_wire()
        )

    async def health_check(self) -> Result[HealthCheckResponse]:
        return await self._send("GET", "/healthcheck", HealthCheckResponse, retry=self._retry)

    async def _send(
        self,
        method: str,
        path: str,
        model: Type[ModelT],
        payload: Optional[Dict[str, Any]] = None,
        retry: Optional[RetryConfig] = None,
    ) -> Result[ModelT]:
        async def call() -> ModelT:
            logger.debug(f"{method} {self.base_url}{path}")
            response = await self._client.request(method, path, json=payload)
            response.raise_for_status()
            return model.model_validate(response.json())

        result = await guarded_call(call, retry)
        if result.is_failure:
            logger.error(f"{method} {path} failed: {result.error}")
        return result
