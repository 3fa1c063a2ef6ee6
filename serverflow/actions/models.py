"""UI intents embedded in schema nodes and server responses."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class UiAction(BaseModel):
    """Base of the closed set of action variants. Built by ``ActionParser``."""

    model_config = ConfigDict(frozen=True)


class Navigate(UiAction):
    """Go to another screen, optionally clearing the back stack."""

    screen_id: str
    clear_stack: bool = False


class NavigateBack(UiAction):
    pass


class NavigateExternal(UiAction):
    """Open a URL outside the app (browser, deep link)."""

    url: str


class ApiCall(UiAction):
    """Ask the host to call a backend endpoint.

    ``on_success``/``on_error`` name follow-up actions the host may trigger.
    """

    endpoint: str
    method: str = "GET"
    body: Optional[Dict[str, Any]] = None
    on_success: Optional[str] = None
    on_error: Optional[str] = None


class SetState(UiAction):
    key: str
    value: str


class ToggleState(UiAction):
    key: str


class ShowSnackbar(UiAction):
    """Transient message; ``duration`` is in milliseconds."""

    message: str
    duration: Optional[int] = None
    action_label: Optional[str] = None


class ShowDialog(UiAction):
    title: str
    message: str
    confirm_label: str = "OK"
    cancel_label: Optional[str] = None
    on_confirm: Optional[str] = None
    on_cancel: Optional[str] = None


class Refresh(UiAction):
    pass


class Share(UiAction):
    text: str
    url: Optional[str] = None


class Batch(UiAction):
    """Ordered list of actions run one after another."""

    actions: List[UiAction]


__all__ = [
    "UiAction",
    "Navigate",
    "NavigateBack",
    "NavigateExternal",
    "ApiCall",
    "SetState",
    "ToggleState",
    "ShowSnackbar",
    "ShowDialog",
    "Refresh",
    "Share",
    "Batch",
]
