"""Tests for the screen and workflow controllers."""

import asyncio

import pytest

from serverflow.controllers import ScreenController, ScreenUiState, WorkflowController
from serverflow.errors import ErrorCategory, RecoveryAction, UnknownError
from serverflow.schema import ScreenSchema
from serverflow.screens import Error, InMemoryScreenSource, Loading, ScreenCache, Success
from serverflow.session import InMemoryKeyValueStore, SessionStore
from serverflow.transports import InMemoryWorkflowTransport
from serverflow.workflow import (
    StateType,
    WorkflowExecutionResponse,
    WorkflowManager,
    WorkflowSessionRepository,
)


def make_schema(screen_id):
    return ScreenSchema.model_validate(
        {
            "document": {"documentId": "d", "name": "Doc", "exportedAt": "2024-01-01"},
            "screen": {
                "id": screen_id,
                "type": "screen",
                "sections": {"body": {"id": "b", "type": "column"}},
            },
        }
    )


async def loaded(controller, screen_id):
    return await asyncio.wait_for(
        controller.state.wait_for(lambda s: s.screen_id == screen_id and not s.is_loading),
        timeout=1,
    )


def test_screen_ui_state_reduce():
    schema = make_schema("home")
    state = ScreenUiState(screen_id="home")

    state = state.reduce(Success(schema=schema, received_at=123))
    assert (state.is_loading, state.loaded_schema, state.last_updated) == (False, schema, 123)

    state = state.reduce(Loading())
    assert state.is_loading and state.loaded_schema == schema

    state = state.reduce(Error(cause=LookupError("gone")))
    assert not state.is_loading
    assert state.error == "gone"


@pytest.mark.asyncio
async def test_screen_controller_loads_and_navigates():
    source = InMemoryScreenSource({"home": make_schema("home"), "profile": make_schema("profile")})
    controller = ScreenController(ScreenCache(source))

    controller.load_screen("home")
    home = await loaded(controller, "home")
    assert home.loaded_schema.screen.id == "home"

    task = controller.dispatch({"type": "navigate", "screenId": "profile"})
    assert (await task).is_success
    profile = await loaded(controller, "profile")
    assert profile.error is None
    assert controller.back_stack == ["home"]

    assert (await controller.dispatch({"type": "back"})).is_success
    await loaded(controller, "home")
    assert controller.back_stack == []

    await controller.close()
    assert controller.active_tasks == 0


@pytest.mark.asyncio
async def test_screen_controller_reports_load_errors():
    controller = ScreenController(ScreenCache(InMemoryScreenSource({})))

    controller.load_screen("missing")
    state = await loaded(controller, "missing")

    assert "missing" in state.error
    await controller.close()


@pytest.mark.asyncio
async def test_screen_controller_dispatch_edge_cases():
    received = []
    controller = ScreenController(
        ScreenCache(InMemoryScreenSource({})),
        on_show_snackbar=lambda message, duration, label: received.append(message),
    )

    assert controller.dispatch({"type": "unknown"}) is None
    assert controller.dispatch(None) is None

    result = await controller.dispatch({"type": "api_call", "endpoint": "/x"})
    assert isinstance(result.error, UnknownError)

    await controller.dispatch({"type": "snackbar", "message": "Hi"})
    assert received == ["Hi"]
    await controller.close()


@pytest.mark.asyncio
async def test_close_cancels_running_load():
    source = InMemoryScreenSource({"slow": make_schema("slow")}, delay=10)
    cache = ScreenCache(source)
    controller = ScreenController(cache)
    task = controller.load_screen("slow")
    await asyncio.sleep(0)

    await controller.close()
    await cache.close()

    assert task.cancelled()


def make_manager(transport):
    repository = WorkflowSessionRepository(transport, SessionStore(InMemoryKeyValueStore()))
    return WorkflowManager(repository)


@pytest.mark.asyncio
async def test_workflow_controller_start_and_event():
    transport = InMemoryWorkflowTransport()
    async with WorkflowController(make_manager(transport)) as controller:
        result = await controller.start("wf-1", {"name": "Ann"})
        assert result.is_success

        state = controller.state.value
        assert state.current_state == "__init__"
        assert state.state_type is StateType.SERVICE
        assert not state.is_loading
        assert state.workflow_id == "wf-1"
        assert state.visible_context == {"name": "Ann"}

        transport.enqueue(
            WorkflowExecutionResponse(
                session_id=state.session_id,
                context={},
                current_state="__end__",
                state_type=StateType.SERVICE,
            )
        )
        await controller.send_event("finish")
        assert controller.state.value.is_completed

    assert controller.active_tasks == 0


@pytest.mark.asyncio
async def test_workflow_controller_renders_errors():
    transport = InMemoryWorkflowTransport()
    async with WorkflowController(make_manager(transport)) as controller:
        await controller.start()
        state = controller.state.value
        assert state.error_category is ErrorCategory.VALIDATION
        assert state.recovery is RecoveryAction.FIX_INPUT
        assert not state.is_loading

        controller.clear_error()
        assert controller.state.value.error is None

        transport.enqueue(
            WorkflowExecutionResponse(
                session_id="s", context={}, current_state="__error__", state_type=StateType.SERVICE
            )
        )
        await controller.start("wf-1")
        state = controller.state.value
        assert state.error_category is ErrorCategory.SERVER
        assert state.recovery is RecoveryAction.RESTART_FLOW
        assert not state.is_completed

        controller.reset()
        assert controller.state.value.current_state is None


@pytest.mark.asyncio
async def test_navigate_back_refetches_screen_that_failed():
    source = InMemoryScreenSource({"profile": make_schema("profile")})
    controller = ScreenController(ScreenCache(source))

    controller.load_screen("home")
    assert "home" in (await loaded(controller, "home")).error

    controller.navigate("profile")
    await loaded(controller, "profile")
    source.put(make_schema("home"))

    controller.navigate_back()
    state = await loaded(controller, "home")

    assert state.error is None
    assert state.loaded_schema.screen.id == "home"
    await controller.close()
