"""Tests for the workflow session repository and manager."""

import asyncio

import pytest

from serverflow.errors import NetworkError, SessionExpired, ValidationError
from serverflow.session import InMemoryKeyValueStore, SessionStore
from serverflow.transports import InMemoryWorkflowTransport
from serverflow.workflow import (
    StateModel,
    StateSet,
    StateType,
    WorkflowExecutionResponse,
    WorkflowManager,
    WorkflowSessionRepository,
)


def make_repository(transport=None, store=None):
    transport = transport or InMemoryWorkflowTransport()
    sessions = SessionStore(store or InMemoryKeyValueStore())
    return WorkflowSessionRepository(transport, sessions), transport, sessions


def screen_response(session_id, state="profile", context=None):
    return WorkflowExecutionResponse(
        session_id=session_id,
        context=context or {"__workflow_id": "wf-1", "name": "Ann"},
        current_state=state,
        state_type=StateType.SCREEN,
    )


@pytest.mark.asyncio
async def test_start_without_workflow_or_session_is_validation_error():
    repository, transport, sessions = make_repository()

    result = await repository.start_workflow(None)

    assert result.is_failure
    assert isinstance(result.error, ValidationError)
    assert transport.requests == []
    assert not sessions.has_active_session()


@pytest.mark.asyncio
async def test_start_sends_session_workflow_and_context():
    repository, transport, sessions = make_repository()

    result = await repository.start_workflow("wf-1", {"user_id": 42, "platform": "cli"})

    state = result.get_or_raise()
    request = transport.requests[0]
    assert request.client_session_id == sessions.get_session_id()
    assert request.client_workflow_id == "wf-1"
    assert request.context == {"user_id": 42, "platform": "cli"}
    assert request.event_name is None
    assert state.workflow_id == "wf-1"
    assert state.context["user_id"] == 42
    assert sessions.get_workflow_id() == "wf-1"
    assert repository.current_state == state


@pytest.mark.asyncio
async def test_server_session_id_overwrites_local_one():
    repository, transport, sessions = make_repository()
    transport.enqueue(screen_response("server-issued"))

    await repository.start_workflow("wf-1")

    assert sessions.get_session_id() == "server-issued"
    await repository.send_event("next", {"name": "Ann"})
    assert transport.requests[-1].client_session_id == "server-issued"
    assert transport.requests[-1].event_name == "next"
    assert transport.requests[-1].client_workflow_id == "wf-1"


@pytest.mark.asyncio
async def test_start_with_existing_session_resumes_without_workflow_id():
    store = InMemoryKeyValueStore({"workflow_session_id": "existing"})
    repository, transport, _ = make_repository(store=store)

    result = await repository.start_workflow()

    assert result.is_success
    assert transport.requests[0].client_session_id == "existing"
    assert transport.requests[0].client_workflow_id is None


@pytest.mark.asyncio
async def test_context_accumulates_across_calls():
    repository, _, _ = make_repository()

    await repository.start_workflow("wf-1", {"a": 1})
    await repository.update_context({"b": [1, 2]})
    state = (await repository.send_event("submit", {"c": {"d": True}})).get_or_raise()

    assert state.visible_context == {"a": 1, "b": [1, 2], "c": {"d": True}}


@pytest.mark.asyncio
async def test_error_state_is_flagged():
    repository, transport, _ = make_repository()
    transport.enqueue(
        WorkflowExecutionResponse(
            session_id="s", context={}, current_state="__error__", state_type=StateType.SERVICE
        )
    )

    state = (await repository.start_workflow("wf-1")).get_or_raise()

    assert state.is_error
    assert not state.is_completed()


@pytest.mark.asyncio
async def test_transport_failure_keeps_previous_state():
    repository, transport, sessions = make_repository()
    first = (await repository.start_workflow("wf-1")).get_or_raise()
    transport.enqueue(NetworkError("offline"))

    result = await repository.send_event("next")

    assert isinstance(result.error, NetworkError)
    assert repository.current_state == first
    assert sessions.get_session_id() == first.session_id


@pytest.mark.asyncio
async def test_clear_session_publishes_none():
    repository, _, sessions = make_repository()
    await repository.start_workflow("wf-1")
    cell = repository.observe_workflow_state()
    stream = cell.subscribe()
    assert (await stream.__anext__()) is not None

    repository.clear_session()

    assert (await stream.__anext__()) is None
    await stream.aclose()
    assert not sessions.has_active_session()
    assert sessions.get_workflow_id() == "wf-1"


@pytest.mark.asyncio
async def test_save_workflow_remembers_id():
    repository, transport, sessions = make_repository()
    states = StateSet(states=[StateModel(state_type=StateType.SCREEN, name="welcome", initial_state=True)])

    workflow_id = (await repository.save_workflow(states, {"locale": "en"})).get_or_raise()

    assert sessions.get_workflow_id() == workflow_id
    assert transport.workflows[workflow_id] == states


@pytest.mark.asyncio
async def test_manager_restore_without_session_returns_none():
    repository, transport, _ = make_repository()
    manager = WorkflowManager(repository)

    assert await manager.restore_session() is None
    assert transport.requests == []


@pytest.mark.asyncio
async def test_manager_restore_resumes_stored_session():
    store = InMemoryKeyValueStore({"workflow_session_id": "stored", "workflow_workflow_id": "wf-1"})
    repository, transport, _ = make_repository(store=store)
    manager = WorkflowManager(repository)

    result = await manager.restore_session("ignored-id")

    assert result.is_success
    assert transport.requests[0].client_session_id == "stored"
    assert transport.requests[0].client_workflow_id == "wf-1"


@pytest.mark.asyncio
async def test_manager_end_session_and_session_expired():
    repository, transport, _ = make_repository()
    manager = WorkflowManager(repository)
    await manager.start_workflow("wf-1")
    assert manager.has_active_session()

    transport.enqueue(SessionExpired())
    result = await manager.send_event("next")
    assert isinstance(result.error, SessionExpired)

    manager.end_session(forget_workflow=True)
    assert not manager.has_active_session()
    assert manager.get_current_workflow_id() is None
    assert manager.observe_workflow_state().value is None


def test_generate_session_id_format():
    session_id = WorkflowManager.generate_session_id("u1")
    prefix, user, millis, random_part = session_id.split("_")
    assert (prefix, user) == ("session", "u1")
    assert millis.isdigit()
    assert len(random_part) == 8
    assert WorkflowManager.generate_session_id().startswith("session_anonymous_")


class GatedTransport(InMemoryWorkflowTransport):
    """Holds every execute call until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def execute_workflow(self, request):
        self.entered.set()
        await self.release.wait()
        return await super().execute_workflow(request)


@pytest.mark.asyncio
async def test_response_arriving_after_end_session_is_dropped():
    transport = GatedTransport()
    repository, _, sessions = make_repository(transport=transport)
    manager = WorkflowManager(repository)

    pending = asyncio.create_task(manager.start_workflow("wf-1"))
    await asyncio.wait_for(transport.entered.wait(), timeout=1)
    manager.end_session()
    transport.release.set()
    result = await asyncio.wait_for(pending, timeout=1)

    assert isinstance(result.error, SessionExpired)
    assert not sessions.has_active_session()
    assert sessions.get_workflow_id() is None
    assert manager.observe_workflow_state().value is None


@pytest.mark.asyncio
async def test_failed_start_keeps_stored_workflow_id():
    repository, transport, sessions = make_repository()
    sessions.save_workflow_id("wf-good")
    transport.enqueue(NetworkError("offline"))

    result = await repository.start_workflow("wf-typo")

    assert isinstance(result.error, NetworkError)
    assert sessions.get_workflow_id() == "wf-good"

    await repository.start_workflow("wf-new")
    assert sessions.get_workflow_id() == "wf-new"


@pytest.mark.asyncio
async def test_manager_turns_unexpected_exceptions_into_failures():
    class BrokenTransport(InMemoryWorkflowTransport):
        async def execute_workflow(self, request):
            raise RuntimeError("socket closed")

    repository, _, _ = make_repository(transport=BrokenTransport())
    manager = WorkflowManager(repository)

    for call in (
        manager.start_workflow("wf-1"),
        manager.send_event("next"),
        manager.update_context({"a": 1}),
    ):
        result = await call
        assert isinstance(result.error, RuntimeError)
