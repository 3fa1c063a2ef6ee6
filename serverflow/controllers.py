"""Presentation controllers that own the async work of a screen or a flow.

Every job a controller starts (screen loads, action dispatch, workflow calls)
lives in the controller's task set and is cancelled by :meth:`close`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field

from .actions import ActionDispatcher, ActionParser, ShowDialog, UiAction
from .actions.dispatcher import ApiCallHandler
from .errors import ErrorCategory, RecoveryAction, UnknownError, describe_error
from .reactive import StateCell
from .result import Result
from .schema import ScreenSchema
from .screens import Error, Idle, Loading, ScreenCache, ScreenResult, Success
from .workflow import DEFAULT_COMPLETION_STATES, ScreenData, StateType, WorkflowManager, WorkflowState

logger = logging.getLogger(__name__)


class _TaskOwner:
    """Supervised task scope."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def _spawn(self, coro: Awaitable[Any], name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def active_tasks(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    async def close(self) -> None:
        """Cancel every task started by this controller and wait for them."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()


# ----------------------------------------------------------------------
# Screen rendering


class ScreenUiState(BaseModel):
    model_config = ConfigDict(frozen=True)

    screen_id: str
    is_loading: bool = True
    loaded_schema: Optional[ScreenSchema] = None
    last_updated: Optional[int] = None
    error: Optional[str] = None

    def reduce(self, result: ScreenResult) -> "ScreenUiState":
        if isinstance(result, Idle):
            return self
        if isinstance(result, Loading):
            return self.model_copy(update={"is_loading": True, "error": None})
        if isinstance(result, Success):
            return self.model_copy(
                update={
                    "is_loading": False,
                    "loaded_schema": result.schema,
                    "last_updated": result.received_at,
                    "error": None,
                }
            )
        if isinstance(result, Error):
            message = str(result.cause) or type(result.cause).__name__
            return self.model_copy(update={"is_loading": False, "error": message})
        raise TypeError(f"Unsupported screen result: {type(result).__name__}")


async def _unsupported_api_call(
    endpoint: str, method: str, body: Optional[Dict[str, Any]]
) -> Result[None]:
    return Result.failure(UnknownError(f"No API handler configured for {method} {endpoint}"))


class ScreenController(_TaskOwner):
    """Loads schema-driven screens and runs the actions their nodes carry.

    Only one screen load is active at a time: loading another screen cancels
    the previous job so a late response cannot overwrite the newer screen.
    """

    def __init__(
        self,
        cache: ScreenCache,
        api_call: Optional[ApiCallHandler] = None,
        on_navigate_external: Optional[Callable[[str], Any]] = None,
        on_show_snackbar: Optional[Callable[[str, Optional[int], Optional[str]], Any]] = None,
        on_show_dialog: Optional[Callable[[ShowDialog], Any]] = None,
        on_share: Optional[Callable[[str, Optional[str]], Any]] = None,
    ) -> None:
        super().__init__()
        self._cache = cache
        self._load_job: Optional[asyncio.Task] = None
        self._back_stack: List[str] = []
        self.state: StateCell[ScreenUiState] = StateCell(ScreenUiState(screen_id=""))
        self.dispatcher = ActionDispatcher(
            on_navigate=self._on_navigate,
            on_navigate_back=self._on_navigate_back,
            on_navigate_external=on_navigate_external,
            on_show_snackbar=on_show_snackbar,
            on_show_dialog=on_show_dialog,
            on_refresh=self._on_refresh,
            on_share=on_share,
            on_api_call=api_call or _unsupported_api_call,
        )

    @property
    def back_stack(self) -> List[str]:
        return list(self._back_stack)

    def load_screen(self, screen_id: str, refresh: bool = True) -> asyncio.Task:
        if self.state.value.screen_id != screen_id:
            self.state.set(ScreenUiState(screen_id=screen_id))
        if self._load_job is not None:
            self._load_job.cancel()
        cell = self._cache.stream_screen(screen_id, refresh=refresh)
        self._load_job = self._spawn(self._collect(cell), name=f"screen-load:{screen_id}")
        return self._load_job

    def refresh(self) -> Optional[asyncio.Task]:
        screen_id = self.state.value.screen_id
        if screen_id:
            return self.load_screen(screen_id, refresh=True)
        return None

    def navigate(self, screen_id: str, clear_stack: bool = False) -> asyncio.Task:
        current = self.state.value.screen_id
        if clear_stack:
            self._back_stack.clear()
            self.state.set(ScreenUiState(screen_id=""))
        elif current and current != screen_id:
            self._back_stack.append(current)
        cached = self._cache.get_current(screen_id)
        return self.load_screen(screen_id, refresh=not isinstance(cached, Success))

    def navigate_back(self) -> Optional[asyncio.Task]:
        if not self._back_stack:
            logger.debug("Navigate back requested with empty back stack")
            return None
        screen_id = self._back_stack.pop()
        cached = self._cache.get_current(screen_id)
        return self.load_screen(screen_id, refresh=not isinstance(cached, Success))

    def dispatch(self, action: Union[UiAction, Mapping[str, Any], None]) -> Optional[asyncio.Task]:
        """Run ``action`` (or a raw action definition) in a supervised task.

        Returns ``None`` when there is nothing to run; otherwise the task
        resolves to the dispatcher's ``Result``.
        """
        if action is not None and not isinstance(action, UiAction):
            action = ActionParser.parse(action)
        if action is None:
            return None
        return self._spawn(self.dispatcher.handle(action), name=f"action:{type(action).__name__}")

    # Dispatcher callbacks return None; a load job only ends when cancelled.
    def _on_navigate(self, screen_id: str, clear_stack: bool) -> None:
        self.navigate(screen_id, clear_stack)

    def _on_navigate_back(self) -> None:
        self.navigate_back()

    def _on_refresh(self) -> None:
        self.refresh()

    async def _collect(self, cell: StateCell[ScreenResult]) -> None:
        async for result in cell.subscribe():
            self.state.set(self.state.value.reduce(result))


# ----------------------------------------------------------------------
# Workflow flows


class WorkflowUiState(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_loading: bool = False
    current_state: Optional[str] = None
    state_type: Optional[StateType] = None
    screen: Optional[ScreenData] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    visible_context: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    error_category: Optional[ErrorCategory] = None
    recovery: Optional[RecoveryAction] = None
    session_id: Optional[str] = None
    workflow_id: Optional[str] = None
    is_completed: bool = False


class WorkflowController(_TaskOwner):
    """Turns user intents into workflow calls and a renderable ``WorkflowUiState``.

    Use as an async context manager, or call :meth:`attach` from a running
    loop, to mirror states published by the repository.
    """

    def __init__(
        self,
        manager: WorkflowManager,
        completion_states: Iterable[str] = DEFAULT_COMPLETION_STATES,
    ) -> None:
        super().__init__()
        self._manager = manager
        self._completion_states = tuple(completion_states)
        self._observer: Optional[asyncio.Task] = None
        self.state: StateCell[WorkflowUiState] = StateCell(WorkflowUiState())

    async def __aenter__(self) -> "WorkflowController":
        self.attach()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def attach(self) -> None:
        if self._observer is None or self._observer.done():
            self._observer = self._spawn(self._observe(), name="workflow-observer")

    def start(self, workflow_id: Optional[str] = None, initial_context: Optional[Mapping[str, Any]] = None) -> asyncio.Task:
        return self._spawn(self._run(self._manager.start_workflow(workflow_id, initial_context)))

    def send_event(self, event_name: str, data: Optional[Mapping[str, Any]] = None) -> asyncio.Task:
        return self._spawn(self._run(self._manager.send_event(event_name, data)))

    def update_context(self, updates: Mapping[str, Any]) -> asyncio.Task:
        return self._spawn(self._run(self._manager.update_context(updates)))

    def clear_error(self) -> None:
        self.state.set(
            self.state.value.model_copy(update={"error": None, "error_category": None, "recovery": None})
        )

    def reset(self) -> None:
        self._manager.end_session()
        self.state.set(WorkflowUiState())

    async def _observe(self) -> None:
        async for workflow_state in self._manager.observe_workflow_state().subscribe():
            if workflow_state is not None:
                self._apply(workflow_state)

    async def _run(self, call: Awaitable[Result[WorkflowState]]) -> Result[WorkflowState]:
        self.state.set(
            self.state.value.model_copy(
                update={"is_loading": True, "error": None, "error_category": None, "recovery": None}
            )
        )
        result = await call
        if result.is_success:
            self._apply(result.get_or_raise())
        else:
            description = describe_error(result.error)
            self.state.set(
                self.state.value.model_copy(
                    update={
                        "is_loading": False,
                        "error": description.message,
                        "error_category": description.category,
                        "recovery": description.recovery,
                    }
                )
            )
        return result

    def _apply(self, workflow_state: WorkflowState) -> None:
        update: Dict[str, Any] = {
            "is_loading": workflow_state.is_transient,
            "current_state": workflow_state.current_state,
            "state_type": workflow_state.state_type,
            "screen": workflow_state.screen,
            "context": workflow_state.context,
            "visible_context": workflow_state.visible_context,
            "session_id": workflow_state.session_id,
            "workflow_id": workflow_state.workflow_id,
            "is_completed": workflow_state.is_completed(self._completion_states),
            "error": None,
            "error_category": None,
            "recovery": None,
        }
        if workflow_state.is_error:
            update.update(
                error="The flow ran into a problem. Please start again.",
                error_category=ErrorCategory.SERVER,
                recovery=RecoveryAction.RESTART_FLOW,
            )
        self.state.set(self.state.value.model_copy(update=update))
