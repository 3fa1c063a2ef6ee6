"""Serverflow: client runtime for server-driven workflows and screens."""

from .actions import ActionDispatcher, ActionParser, UiAction
from .controllers import ScreenController, WorkflowController
from .errors import WorkflowError, describe_error
from .result import Result
from .schema import ScreenSchema
from .screens import ScreenCache, get_screen_source
from .session import SessionStore, get_key_value_store
from .transports import get_transport
from .workflow import WorkflowManager, WorkflowSessionRepository, WorkflowState

__version__ = "0.1.0"
__all__ = [
    "ActionDispatcher",
    "ActionParser",
    "UiAction",
    "ScreenController",
    "WorkflowController",
    "WorkflowError",
    "describe_error",
    "Result",
    "ScreenSchema",
    "ScreenCache",
    "get_screen_source",
    "SessionStore",
    "get_key_value_store",
    "get_transport",
    "WorkflowManager",
    "WorkflowSessionRepository",
    "WorkflowState",
]
