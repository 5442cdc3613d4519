"""Cooperative scheduling turns and the one-shot readiness signal."""

from __future__ import annotations

import asyncio
import threading
from collections import deque
from typing import Any, Callable

from loguru import logger


class TurnScheduler:
    """Queue of callbacks run on later turns of a single-threaded loop.

    Callbacks queued while a turn is running go to the next turn.
    """

    def __init__(self) -> None:
        self._queue: deque[tuple[Callable[..., Any], tuple]] = deque()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.append((callback, args))
        self._wake()

    def _wake(self) -> None:
        """Hook for loop integrations that need to be poked when work arrives."""

    def run_pending(self) -> int:
        """Run one turn. Returns the number of callbacks executed."""
        batch = len(self._queue)
        for _ in range(batch):
            callback, args = self._queue.popleft()
            try:
                callback(*args)
            except Exception:
                logger.exception(f"[scheduler] callback {callback!r} failed")
        return batch

    def run_until_idle(self, max_turns: int = 100) -> int:
        total = 0
        for _ in range(max_turns):
            ran = self.run_pending()
            if not ran:
                break
            total += ran
        return total


class OneShotSignal:
    """Condition that is set exactly once and can be awaited any number of times."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    def set(self) -> bool:
        """Fire the signal. Returns False if it had already fired."""
        if self._event.is_set():
            return False
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return True

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the signal fires (immediately if it has)."""
        if self._event.is_set():
            callback()
        else:
            self._callbacks.append(callback)

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    async def wait_async(self) -> None:
        if self._event.is_set():
            return
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not future.done():
                loop.call_soon_threadsafe(_finish)

        def _finish() -> None:
            if not future.done():
                future.set_result(None)

        self.add_callback(_resolve)
        await future
