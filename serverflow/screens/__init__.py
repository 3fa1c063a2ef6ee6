"""Screen schema fetching and caching."""

from __future__ import annotations

from typing import Optional

from ..config import ServerflowConfig, load_config
from .cache import Error, Idle, Loading, ScreenCache, ScreenResult, Success
from .source import HttpScreenSource, InMemoryScreenSource, ScreenSource


def get_screen_source(config: Optional[ServerflowConfig] = None) -> ScreenSource:
    """Factory function for the HTTP screen source described by ``config``."""
    config = config or load_config()
    return HttpScreenSource(
        base_url=config.effective_screens_url, timeouts=config.transport.timeouts
    )


__all__ = [
    "ScreenCache",
    "ScreenResult",
    "Idle",
    "Loading",
    "Success",
    "Error",
    "ScreenSource",
    "HttpScreenSource",
    "InMemoryScreenSource",
    "get_screen_source",
]
