"""Error taxonomy for workflow and screen calls."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class WorkflowError(Exception):
    """Base class for every failure surfaced by the workflow client."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class NetworkError(WorkflowError):
    """Transport-level I/O failure (DNS, connect, timeout, reset)."""


class ServerError(WorkflowError):
    """Non-2xx response carrying an identifiable status code."""

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message)
        self.code = code


class ValidationError(WorkflowError):
    """A local precondition or the request payload was rejected."""


class SessionExpired(WorkflowError):
    """The server no longer recognises the client session."""

    def __init__(self, message: str = "Workflow session expired") -> None:
        super().__init__(message)


class ParseError(WorkflowError):
    """Response body does not match the expected shape."""


class UnknownError(WorkflowError):
    """Anything that could not be categorised."""


class ErrorCategory(str, Enum):
    NETWORK = "network"
    SERVER = "server"
    SESSION = "session"
    VALIDATION = "validation"
    PARSE = "parse"
    UNKNOWN = "unknown"


class RecoveryAction(str, Enum):
    RETRY = "retry"
    REAUTHENTICATE = "reauthenticate"
    RESTART_FLOW = "restart_flow"
    FIX_INPUT = "fix_input"
    CONTACT_SUPPORT = "contact_support"


class ErrorDescription(BaseModel):
    """User-facing rendering of a failure."""

    category: ErrorCategory
    message: str
    recovery: RecoveryAction
    detail: Optional[str] = None


def describe_error(error: BaseException) -> ErrorDescription:
    """Map ``error`` to a non-technical message and a recovery hint."""

    detail = str(error) or None
    if isinstance(error, NetworkError):
        return ErrorDescription(
            category=ErrorCategory.NETWORK,
            message="No connection. Check your network and try again.",
            recovery=RecoveryAction.RETRY,
            detail=detail,
        )
    if isinstance(error, SessionExpired):
        return ErrorDescription(
            category=ErrorCategory.SESSION,
            message="Your session has expired. Please start again.",
            recovery=RecoveryAction.REAUTHENTICATE,
            detail=detail,
        )
    if isinstance(error, ServerError):
        return ErrorDescription(
            category=ErrorCategory.SERVER,
            message="The service is temporarily unavailable. Please try again later.",
            recovery=RecoveryAction.RETRY,
            detail=f"HTTP {error.code}: {detail}" if detail else f"HTTP {error.code}",
        )
    if isinstance(error, ValidationError):
        return ErrorDescription(
            category=ErrorCategory.VALIDATION,
            message="Some information is missing or invalid.",
            recovery=RecoveryAction.FIX_INPUT,
            detail=detail,
        )
    if isinstance(error, ParseError):
        return ErrorDescription(
            category=ErrorCategory.PARSE,
            message="We received an unexpected response. Please restart the flow.",
            recovery=RecoveryAction.RESTART_FLOW,
            detail=detail,
        )
    return ErrorDescription(
        category=ErrorCategory.UNKNOWN,
        message="Something went wrong.",
        recovery=RecoveryAction.CONTACT_SUPPORT,
        detail=detail,
    )


__all__ = [
    "WorkflowError",
    "NetworkError",
    "ServerError",
    "ValidationError",
    "SessionExpired",
    "ParseError",
    "UnknownError",
    "ErrorCategory",
    "RecoveryAction",
    "ErrorDescription",
    "describe_error",
]
