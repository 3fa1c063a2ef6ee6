"""Transport factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import ServerflowConfig, load_config
from .base import WorkflowTransport
from .http import HttpWorkflowTransport, build_http_client, guarded_call, map_http_error
from .inmemory import InMemoryWorkflowTransport


def get_transport(
    backend: Optional[str] = None, config: Optional[ServerflowConfig] = None
) -> WorkflowTransport:
    """Factory function to get the configured workflow transport."""

    config = config or load_config()
    backend = (
        backend
        or os.getenv("SERVERFLOW_TRANSPORT")
        or config.transport.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryWorkflowTransport()
    elif backend == "http":
        return HttpWorkflowTransport(
            base_url=config.base_url,
            timeouts=config.transport.timeouts,
            retry=config.retry,
        )
    else:
        raise ValueError(f"Unsupported transport backend: {backend}")


__all__ = [
    "WorkflowTransport",
    "HttpWorkflowTransport",
    "InMemoryWorkflowTransport",
    "build_http_client",
    "guarded_call",
    "map_http_error",
    "get_transport",
]
