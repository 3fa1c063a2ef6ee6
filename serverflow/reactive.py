"""Observable single-value cell used to publish screen and workflow state."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Callable, Generic, Set, TypeVar

T = TypeVar("T")


class StateCell(Generic[T]):
    """Last-value-wins broadcast holder.

    The current value is readable synchronously. Every subscriber first
    receives the current value and then each later distinct value; a slow
    subscriber skips intermediate values instead of queueing them.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._waiters: Set[asyncio.Event] = set()

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Publish ``value``; equal values are not re-broadcast."""
        if value == self._value:
            return
        self._value = value
        for waiter in list(self._waiters):
            waiter.set()

    @property
    def subscriber_count(self) -> int:
        return len(self._waiters)

    async def subscribe(self) -> AsyncIterator[T]:
        event = asyncio.Event()
        self._waiters.add(event)
        try:
            last = self._value
            yield last
            while True:
                await event.wait()
                event.clear()
                current = self._value
                if current == last:
                    continue
                last = current
                yield current
        finally:
            self._waiters.discard(event)

    async def wait_for(self, predicate: Callable[[T], bool]) -> T:
        """Return the first published value (current included) matching ``predicate``."""
        stream = self.subscribe()
        try:
            async for value in stream:
                if predicate(value):
                    return value
        finally:
            await stream.aclose()
        raise RuntimeError("subscription ended unexpectedly")  # pragma: no cover

    def __repr__(self) -> str:
        return f"StateCell({self._value!r})"
