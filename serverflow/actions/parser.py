"""Parse JSON action definitions into ``UiAction`` variants.

Expected JSON format::

    {"type": "navigate", "screenId": "screen_123", "clearStack": false}

Parsing never raises: anything unrecognised yields ``None`` and the caller
treats that as "no action".
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional

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


def _text(data: Mapping[str, Any], key: str) -> Optional[str]:
    """Read ``key`` as text; scalars are stringified, JSON ``null`` is absent."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


def _flag(data: Mapping[str, Any], key: str) -> bool:
    text = _text(data, key)
    return text is not None and text.lower() == "true"


def _integer(data: Mapping[str, Any], key: str) -> Optional[int]:
    text = _text(data, key)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


class ActionParser:
    """Turns JSON objects into typed actions."""

    @classmethod
    def parse(cls, data: Any) -> Optional[UiAction]:
        """Parse ``data`` into a ``UiAction`` or return ``None``."""
        if not isinstance(data, Mapping):
            return None
        try:
            action_type = _text(data, "type")
            if action_type is None:
                return None
            parser = _PARSERS.get(action_type.strip().lower())
            if parser is None:
                logger.debug(f"Unknown action type {action_type!r}")
                return None
            return parser(data)
        except Exception as exc:
            logger.warning(f"Failed to parse action {data!r}: {exc}")
            return None

    @staticmethod
    def _navigate(data: Mapping[str, Any]) -> Optional[Navigate]:
        screen_id = _text(data, "screenId")
        if screen_id is None:
            screen_id = _text(data, "target")
        if screen_id is None:
            return None
        return Navigate(screen_id=screen_id, clear_stack=_flag(data, "clearStack"))

    @staticmethod
    def _navigate_external(data: Mapping[str, Any]) -> Optional[NavigateExternal]:
        url = _text(data, "url")
        if url is None:
            return None
        return NavigateExternal(url=url)

    @staticmethod
    def _api_call(data: Mapping[str, Any]) -> Optional[ApiCall]:
        endpoint = _text(data, "endpoint")
        if endpoint is None:
            return None
        body = data.get("body")
        return ApiCall(
            endpoint=endpoint,
            method=(_text(data, "method") or "GET").upper(),
            body=dict(body) if isinstance(body, Mapping) else None,
            on_success=_text(data, "onSuccess"),
            on_error=_text(data, "onError"),
        )

    @staticmethod
    def _set_state(data: Mapping[str, Any]) -> Optional[SetState]:
        key = _text(data, "key")
        if key is None:
            return None
        return SetState(key=key, value=_text(data, "value") or "")

    @staticmethod
    def _toggle_state(data: Mapping[str, Any]) -> Optional[ToggleState]:
        key = _text(data, "key")
        if key is None:
            return None
        return ToggleState(key=key)

    @staticmethod
    def _show_snackbar(data: Mapping[str, Any]) -> Optional[ShowSnackbar]:
        message = _text(data, "message")
        if message is None:
            return None
        return ShowSnackbar(
            message=message,
            duration=_integer(data, "duration"),
            action_label=_text(data, "actionLabel"),
        )

    @staticmethod
    def _show_dialog(data: Mapping[str, Any]) -> Optional[ShowDialog]:
        message = _text(data, "message")
        if message is None:
            return None
        return ShowDialog(
            title=_text(data, "title") or "",
            message=message,
            confirm_label=_text(data, "confirmLabel") or "OK",
            cancel_label=_text(data, "cancelLabel"),
            on_confirm=_text(data, "onConfirm"),
            on_cancel=_text(data, "onCancel"),
        )

    @staticmethod
    def _share(data: Mapping[str, Any]) -> Optional[Share]:
        text = _text(data, "text")
        if text is None:
            return None
        return Share(text=text, url=_text(data, "url"))

    @classmethod
    def _batch(cls, data: Mapping[str, Any]) -> Optional[Batch]:
        entries = data.get("actions")
        if not isinstance(entries, list):
            return None
        actions = [action for action in map(cls.parse, entries) if action is not None]
        if not actions:
            return None
        return Batch(actions=actions)


_PARSERS: Dict[str, Callable[[Mapping[str, Any]], Optional[UiAction]]] = {}


def _register(parser: Callable[[Mapping[str, Any]], Optional[UiAction]], *names: str) -> None:
    for name in names:
        _PARSERS[name] = parser


_register(ActionParser._navigate, "navigate")
_register(lambda _: NavigateBack(), "navigate_back", "navigateback", "back")
_register(ActionParser._navigate_external, "navigate_external", "navigateexternal", "open_url")
_register(ActionParser._api_call, "api_call", "apicall", "fetch")
_register(ActionParser._set_state, "set_state", "setstate", "update")
_register(ActionParser._toggle_state, "toggle_state", "togglestate", "toggle")
_register(ActionParser._show_snackbar, "show_snackbar", "showsnackbar", "snackbar")
_register(ActionParser._show_dialog, "show_dialog", "showdialog", "dialog")
_register(lambda _: Refresh(), "refresh", "reload")
_register(ActionParser._share, "share")
_register(ActionParser._batch, "batch", "sequence")


def parse_action(data: Any) -> Optional[UiAction]:
    """Module-level shortcut for :meth:`ActionParser.parse`."""
    return ActionParser.parse(data)
