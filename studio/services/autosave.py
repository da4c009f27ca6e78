"""Debounced persistence for open boards."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NOTHING = object()


class DebouncedSaver(Generic[T]):
    """
    Writes the latest scheduled value once `delay` seconds pass without a new one.

    Every `schedule` call cancels the pending write and arms a new one, so
    only the final value of a burst reaches storage. Write failures are
    logged and not raised; the next scheduled value retries naturally.
    """

    def __init__(self, save: Callable[[T], Awaitable[object]], delay: float = 1.0, name: str = "board"):
        self._save = save
        self._delay = delay
        self._name = name
        self._value: object = _NOTHING
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._value is not _NOTHING

    def schedule(self, value: T) -> None:
        """Replace the pending value and restart the timer. Must run inside the event loop."""
        self._value = value
        if self._task is not None:
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def flush(self) -> None:
        """Write the pending value now, if there is one."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
        await self._write()

    def cancel(self) -> None:
        """Drop the pending value without writing it."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._value = _NOTHING

    async def _run(self) -> None:
        await asyncio.sleep(self._delay)
        self._task = None
        await self._write()

    async def _write(self) -> None:
        if self._value is _NOTHING:
            return
        value = self._value
        self._value = _NOTHING
        try:
            await self._save(value)  # type: ignore[arg-type]
        except Exception as e:
            logger.error("autosave: failed to save %s: %s", self._name, e)
