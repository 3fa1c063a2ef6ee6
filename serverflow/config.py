from __future__ import annotations

import os
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class TimeoutConfig(BaseModel):
    """Transport timeouts in seconds."""

    connect: float = 10.0
    request: float = 15.0
    socket: float = 15.0


class TransportConfig(BaseModel):
    """Workflow transport settings."""

    backend: Literal["http", "inmemory"] = "http"
    timeouts: TimeoutConfig = TimeoutConfig()


class RetryConfig(BaseModel):
    """Backoff policy for idempotent requests."""

    times: int = 3
    initial_delay: float = 1.0
    factor: float = 2.0
    max_delay: float = 10.0


class ServerflowConfig(BaseModel):
    """Top-level configuration model."""

    base_url: str = "http://localhost:8000"
    screens_base_url: Optional[str] = None
    transport: TransportConfig = TransportConfig()
    retry: RetryConfig = RetryConfig()
    session_store: Optional[str] = None
    completion_states: List[str] = Field(
        default_factory=lambda: ["__end__", "__final__", "__complete__"]
    )
    log_level: str = "INFO"

    @property
    def effective_screens_url(self) -> str:
        return (self.screens_base_url or self.base_url).rstrip("/")


def load_config(path: Optional[str] = None) -> ServerflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to SERVERFLOW_CONFIG env
            variable or 'serverflow.yaml' in the current directory.
    """

    config_path = path or os.getenv("SERVERFLOW_CONFIG", "serverflow.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = ServerflowConfig(**data)
    else:
        config = ServerflowConfig()

    env_base_url = os.getenv("SERVERFLOW_BASE_URL")
    if env_base_url:
        config.base_url = env_base_url
    env_store = os.getenv("SERVERFLOW_SESSION_STORE")
    if env_store:
        config.session_store = env_store
    return config
