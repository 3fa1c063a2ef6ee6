"""Per-screen reactive cache of fetch results."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

from ..config import RetryConfig
from ..reactive import StateCell
from ..schema import ScreenSchema
from ..utils.retry import retry_io
from .source import ScreenSource

logger = logging.getLogger(__name__)


class ScreenResult:
    """Base of ``Idle | Loading | Success | Error``."""


@dataclass(frozen=True)
class Idle(ScreenResult):
    pass


@dataclass(frozen=True)
class Loading(ScreenResult):
    pass


@dataclass(frozen=True)
class Success(ScreenResult):
    schema: ScreenSchema
    received_at: int


@dataclass(frozen=True)
class Error(ScreenResult):
    cause: BaseException


def _now_millis() -> int:
    return int(time.time() * 1000)


class ScreenCache:
    """One ``StateCell[ScreenResult]`` per screen id, created lazily at ``Idle``.

    A refresh publishes ``Loading`` then ``Success`` or ``Error``. Refreshes of
    the same screen are serialized: starting a new one cancels the one in
    flight, so the most recently started fetch is the one that publishes.
    """

    def __init__(self, source: ScreenSource, retry: Optional[RetryConfig] = None) -> None:
        self._source = source
        self._retry = retry
        self._cells: Dict[str, StateCell[ScreenResult]] = {}
        self._inflight: Dict[str, asyncio.Task] = {}

    def _cell(self, screen_id: str) -> StateCell[ScreenResult]:
        cell = self._cells.get(screen_id)
        if cell is None:
            cell = self._cells[screen_id] = StateCell(Idle())
        return cell

    def stream_screen(self, screen_id: str, refresh: bool = True) -> StateCell[ScreenResult]:
        cell = self._cell(screen_id)
        if refresh:
            self.refresh(screen_id)
        return cell

    def refresh(self, screen_id: str) -> asyncio.Task:
        """Start a fetch for ``screen_id`` and return its task.

        Must be called from a running event loop.
        """
        cell = self._cell(screen_id)
        previous = self._inflight.get(screen_id)
        if previous is not None and not previous.done():
            logger.debug(f"Cancelling in-flight refresh of {screen_id}")
            previous.cancel()

        task = asyncio.get_running_loop().create_task(
            self._load(screen_id, cell), name=f"screen-refresh:{screen_id}"
        )
        self._inflight[screen_id] = task
        task.add_done_callback(lambda done: self._forget(screen_id, done))
        return task

    def get_current(self, screen_id: str) -> Optional[ScreenResult]:
        cell = self._cells.get(screen_id)
        return cell.value if cell is not None else None

    async def close(self) -> None:
        """Cancel every in-flight refresh."""
        tasks = [task for task in self._inflight.values() if not task.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._inflight.clear()

    def _forget(self, screen_id: str, task: asyncio.Task) -> None:
        if self._inflight.get(screen_id) is task:
            del self._inflight[screen_id]

    async def _load(self, screen_id: str, cell: StateCell[ScreenResult]) -> None:
        cell.set(Loading())
        if self._retry is not None:
            result = await retry_io(
                lambda: self._source.fetch_screen(screen_id),
                times=self._retry.times,
                initial_delay=self._retry.initial_delay,
                factor=self._retry.factor,
                max_delay=self._retry.max_delay,
            )
            error, schema = result.error, result.get_or_none()
        else:
            try:
                schema, error = await self._source.fetch_screen(screen_id), None
            except Exception as exc:
                schema, error = None, exc

        if error is not None:
            logger.warning(f"Screen {screen_id} failed to load: {error!r}")
            cell.set(Error(cause=error))
        else:
            cell.set(Success(schema=schema, received_at=_now_millis()))
