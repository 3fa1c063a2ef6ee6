"""Execute parsed actions against host-supplied callbacks."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from ..result import Result
from .models import (
    ApiCall,
    Batch,
    Navigate,
    NavigateBack,
    NavigateExternal,
    Refresh,
    SetState,
    Share,
    ShowDialog,
    ShowSnackbar,
    ToggleState,
    UiAction,
)

logger = logging.getLogger(__name__)

ApiCallHandler = Callable[[str, str, Optional[Dict[str, Any]]], Awaitable[Result[None]]]


async def _noop_api_call(endpoint: str, method: str, body: Optional[Dict[str, Any]]) -> Result[None]:
    logger.info(f"API call requested without handler: {method} {endpoint}")
    return Result.success(None)


async def _call(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    """Invoke a sync or async callback."""
    if callback is None:
        return
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


def _parse_strict_bool(value: Optional[str]) -> Optional[bool]:
    if value == "true":
        return True
    if value == "false":
        return False
    return None


class ActionDispatcher:
    """Runs ``UiAction`` values, turning every outcome into a ``Result``.

    Presentation effects (navigation, snackbars, dialogs, sharing) are
    delegated to the callbacks given at construction. ``SetState`` and
    ``ToggleState`` write to a scratch map owned by this instance only.
    """

    def __init__(
        self,
        on_navigate: Optional[Callable[[str, bool], Any]] = None,
        on_navigate_back: Optional[Callable[[], Any]] = None,
        on_navigate_external: Optional[Callable[[str], Any]] = None,
        on_show_snackbar: Optional[Callable[[str, Optional[int], Optional[str]], Any]] = None,
        on_show_dialog: Optional[Callable[[ShowDialog], Any]] = None,
        on_refresh: Optional[Callable[[], Any]] = None,
        on_share: Optional[Callable[[str, Optional[str]], Any]] = None,
        on_api_call: Optional[ApiCallHandler] = None,
    ) -> None:
        self._on_navigate = on_navigate
        self._on_navigate_back = on_navigate_back
        self._on_navigate_external = on_navigate_external
        self._on_show_snackbar = on_show_snackbar
        self._on_show_dialog = on_show_dialog
        self._on_refresh = on_refresh
        self._on_share = on_share
        self._on_api_call = on_api_call or _noop_api_call
        self._state: Dict[str, str] = {}

    async def handle(self, action: UiAction) -> Result[None]:
        """Execute ``action``; unexpected exceptions become a failed result."""
        try:
            return await self._handle(action)
        except Exception as exc:
            logger.warning(f"Action {type(action).__name__} failed: {exc}")
            return Result.failure(exc)

    async def _handle(self, action: UiAction) -> Result[None]:
        if isinstance(action, Navigate):
            await _call(self._on_navigate, action.screen_id, action.clear_stack)
        elif isinstance(action, NavigateBack):
            await _call(self._on_navigate_back)
        elif isinstance(action, NavigateExternal):
            if self._on_navigate_external is None:
                logger.info(f"Navigate to external URL: {action.url}")
            await _call(self._on_navigate_external, action.url)
        elif isinstance(action, ApiCall):
            return await self._on_api_call(action.endpoint, action.method, action.body)
        elif isinstance(action, SetState):
            self._state[action.key] = action.value
        elif isinstance(action, ToggleState):
            current = _parse_strict_bool(self._state.get(action.key)) or False
            self._state[action.key] = "false" if current else "true"
        elif isinstance(action, ShowSnackbar):
            await _call(self._on_show_snackbar, action.message, action.duration, action.action_label)
        elif isinstance(action, ShowDialog):
            await _call(self._on_show_dialog, action)
        elif isinstance(action, Refresh):
            await _call(self._on_refresh)
        elif isinstance(action, Share):
            if self._on_share is None:
                logger.info(f"Share: {action.text}, url: {action.url}")
            await _call(self._on_share, action.text, action.url)
        elif isinstance(action, Batch):
            for step in action.actions:
                result = await self.handle(step)
                if result.is_failure:
                    return result
        else:
            raise TypeError(f"Unsupported action: {type(action).__name__}")
        return Result.success(None)

    def get_state(self, key: str) -> Optional[str]:
        return self._state.get(key)

    def get_all_state(self) -> Dict[str, str]:
        return dict(self._state)
