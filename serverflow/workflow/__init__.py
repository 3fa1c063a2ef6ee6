"""Workflow session engine."""

from .context import context_from_wire, context_to_wire, to_json_value, to_native, to_workflow_state
from .manager import WorkflowManager
from .models import (
    CREATED_AT_KEY,
    DEFAULT_COMPLETION_STATES,
    ERROR_STATE_KEY,
    INIT_STATE_KEY,
    WORKFLOW_ID_KEY,
    ActionData,
    ButtonData,
    CardItem,
    ComponentData,
    Expression,
    FieldData,
    HealthCheckResponse,
    IntegrationConfig,
    LinkData,
    SaveWorkflowRequest,
    SaveWorkflowResponse,
    ScreenData,
    StateModel,
    StateSet,
    StateType,
    StatusStyle,
    Transition,
    ValidationConfig,
    WorkflowExecutionRequest,
    WorkflowExecutionResponse,
    WorkflowState,
    filter_user_visible_context,
)
from .repository import WorkflowSessionRepository

__all__ = [
    "CREATED_AT_KEY",
    "DEFAULT_COMPLETION_STATES",
    "ERROR_STATE_KEY",
    "INIT_STATE_KEY",
    "WORKFLOW_ID_KEY",
    "ActionData",
    "ButtonData",
    "CardItem",
    "ComponentData",
    "Expression",
    "FieldData",
    "HealthCheckResponse",
    "IntegrationConfig",
    "LinkData",
    "SaveWorkflowRequest",
    "SaveWorkflowResponse",
    "ScreenData",
    "StateModel",
    "StateSet",
    "StateType",
    "StatusStyle",
    "Transition",
    "ValidationConfig",
    "WorkflowExecutionRequest",
    "WorkflowExecutionResponse",
    "WorkflowState",
    "WorkflowManager",
    "WorkflowSessionRepository",
    "context_from_wire",
    "context_to_wire",
    "filter_user_visible_context",
    "to_json_value",
    "to_native",
    "to_workflow_state",
]
