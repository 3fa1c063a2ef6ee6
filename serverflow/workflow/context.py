"""Conversion between native context values and wire JSON values."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Mapping

from pydantic import JsonValue

from .models import (
    CREATED_AT_KEY,
    ERROR_STATE_KEY,
    WORKFLOW_ID_KEY,
    WorkflowExecutionResponse,
    WorkflowState,
)

logger = logging.getLogger(__name__)


def to_json_value(value: Any) -> JsonValue:
    """Encode a native value as JSON.

    Mappings become objects (keys stringified), lists and tuples become
    arrays, ``None``/bool/int/str pass through, non-finite floats and any
    other object are rendered as strings.
    """
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, Mapping):
        return {str(key): to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    return str(value)


def to_native(value: JsonValue) -> Any:
    """Decode a JSON value into native types.

    Strings stay strings; numbers keep their integral or fractional kind.
    Objects become dicts and arrays become lists, preserving order.
    """
    if value is None or isinstance(value, (bool, str, int, float)):
        return value
    if isinstance(value, Mapping):
        return {key: to_native(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_native(item) for item in value]
    return str(value)


def context_to_wire(context: Mapping[str, Any] | None) -> Dict[str, JsonValue]:
    return {str(key): to_json_value(value) for key, value in (context or {}).items()}


def context_from_wire(context: Mapping[str, JsonValue]) -> Dict[str, Any]:
    return {key: to_native(value) for key, value in context.items()}


def to_workflow_state(response: WorkflowExecutionResponse) -> WorkflowState:
    """Build the domain state from an execution response."""
    context = context_from_wire(response.context)
    workflow_id = context.get(WORKFLOW_ID_KEY)
    created_at = context.get(CREATED_AT_KEY)
    return WorkflowState(
        session_id=response.session_id,
        workflow_id=workflow_id if isinstance(workflow_id, str) else "",
        current_state=response.current_state,
        state_type=response.state_type,
        context=context,
        screen=response.screen,
        created_at=created_at if isinstance(created_at, str) else None,
        is_error=response.current_state == ERROR_STATE_KEY,
    )
