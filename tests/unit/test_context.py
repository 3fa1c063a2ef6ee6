"""Tests for context conversion and the workflow state snapshot."""

import math

import pytest

from serverflow.workflow import (
    StateType,
    WorkflowExecutionResponse,
    context_from_wire,
    context_to_wire,
    filter_user_visible_context,
    to_json_value,
    to_native,
    to_workflow_state,
)


def test_context_round_trip_preserves_kinds_and_order():
    native = {
        "name": "Ann",
        "age": 30,
        "ratio": 0.5,
        "verified": True,
        "nickname": None,
        "digits": "007",
        "address": {"city": "Riga", "zip": "1001"},
        "tags": ["a", 1, [2, 3]],
    }

    decoded = context_from_wire(context_to_wire(native))

    assert decoded == native
    assert isinstance(decoded["age"], int)
    assert isinstance(decoded["digits"], str)
    assert list(decoded["address"]) == ["city", "zip"]


def test_to_json_value_stringifies_unsupported_values():
    class Token:
        def __str__(self):
            return "token-1"

    assert to_json_value(Token()) == "token-1"
    assert to_json_value((1, 2)) == [1, 2]
    assert to_json_value({1: "one"}) == {"1": "one"}
    assert to_json_value(math.inf) == "inf"


def test_to_native_passes_primitives_through():
    assert to_native(3) == 3
    assert to_native(2.0) == 2.0
    assert to_native("3") == "3"
    assert to_native(None) is None
    assert to_native({"a": [True]}) == {"a": [True]}


def test_filter_user_visible_context():
    context = {
        "__workflow_id": "wf-1",
        "__created_at": "2024-01-01T00:00:00Z",
        "__error__": "boom",
        "name": "Ann",
        "step": 2,
    }
    assert filter_user_visible_context(context) == {"name": "Ann", "step": 2}


def response(current_state="profile", state_type=StateType.SCREEN, context=None):
    return WorkflowExecutionResponse(
        session_id="srv-1",
        context=context
        if context is not None
        else {"__workflow_id": "wf-1", "__created_at": "2024-01-01T00:00:00Z", "name": "Ann"},
        current_state=current_state,
        state_type=state_type,
    )


def test_to_workflow_state_extracts_reserved_keys():
    state = to_workflow_state(response())

    assert state.session_id == "srv-1"
    assert state.workflow_id == "wf-1"
    assert state.created_at == "2024-01-01T00:00:00Z"
    assert state.visible_context == {"name": "Ann"}
    assert state.context["__workflow_id"] == "wf-1"
    assert state.is_interactive
    assert not state.is_error


def test_to_workflow_state_without_reserved_keys():
    state = to_workflow_state(response(context={"name": "Ann"}))
    assert state.workflow_id == ""
    assert state.created_at is None


def test_error_sentinel_sets_is_error():
    assert to_workflow_state(response("__error__", StateType.SERVICE)).is_error
    assert not to_workflow_state(response("__init__", StateType.SERVICE)).is_error


@pytest.mark.parametrize(
    "state_type,transient",
    [
        (StateType.TECHNICAL, True),
        (StateType.INTEGRATION, True),
        (StateType.SCREEN, False),
        (StateType.SERVICE, False),
    ],
)
def test_transient_state_types(state_type, transient):
    assert to_workflow_state(response(state_type=state_type)).is_transient is transient


def test_completion_is_detected_by_state_name():
    assert to_workflow_state(response("__end__", StateType.SERVICE)).is_completed()
    assert not to_workflow_state(response("profile")).is_completed()
    assert to_workflow_state(response("done", StateType.SERVICE)).is_completed(["done"])
