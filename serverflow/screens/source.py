"""Where screen schemas come from."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Mapping, Optional, Protocol
from urllib.parse import quote

import httpx

from ..config import TimeoutConfig
from ..schema import ScreenSchema
from ..transports.http import build_http_client, map_http_error

logger = logging.getLogger(__name__)


class ScreenSource(Protocol):
    """Fetches one screen schema; failures are raised."""

    async def fetch_screen(self, screen_id: str) -> ScreenSchema:
        """Return the schema for ``screen_id``."""


class HttpScreenSource(ScreenSource):
    """``GET {base_url}/screens/{screen_id}``."""

    def __init__(
        self,
        base_url: str,
        timeouts: Optional[TimeoutConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or build_http_client(self.base_url, timeouts)

    async def fetch_screen(self, screen_id: str) -> ScreenSchema:
        path = f"/screens/{quote(screen_id, safe='')}"
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            return ScreenSchema.model_validate(response.json())
        except Exception as exc:
            error = map_http_error(exc)
            logger.error(f"Fetching screen {screen_id} failed: {error}")
            raise error from exc

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class InMemoryScreenSource(ScreenSource):
    """Serve schemas from a mapping after an optional delay (seconds)."""

    def __init__(self, schemas: Mapping[str, ScreenSchema], delay: float = 0.0) -> None:
        self._schemas: Dict[str, ScreenSchema] = dict(schemas)
        self._delay = delay

    def put(self, schema: ScreenSchema) -> None:
        self._schemas[schema.screen.id] = schema

    async def fetch_screen(self, screen_id: str) -> ScreenSchema:
        if self._delay:
            await asyncio.sleep(self._delay)
        try:
            return self._schemas[screen_id]
        except KeyError:
            raise LookupError(f"Screen {screen_id} not found") from None
