"""Action model, parser and dispatcher."""

from .dispatcher import ActionDispatcher
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
from .parser import ActionParser, parse_action

__all__ = [
    "ActionDispatcher",
    "ActionParser",
    "parse_action",
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
