"""Concurrency-limited async queue."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque

from repass.models import Task

logger = logging.getLogger(__name__)


class AsyncQueue:
    """
    Runs at most ``channels`` tasks at a time, the rest wait in FIFO order.

    A task is any zero-argument callable. If it returns an awaitable, the
    queue awaits it. Failures only free the slot: a task is responsible for
    reporting its own errors.

    Example:
        queue = AsyncQueue(channels=2)
        drained = queue.on_drain()
        for url in urls:
            queue.enqueue(lambda url=url: fetch(url))
        await drained
    """

    def __init__(self, channels: int = 1) -> None:
        if channels < 1:
            raise ValueError(f"channels must be >= 1, got {channels}")
        self._channels = channels
        self._active = 0
        self._waiting: deque[Task] = deque()
        self._drain: list[asyncio.Future] = []
        # Strong references so running tasks are not garbage collected
        self._running: set[asyncio.Task] = set()

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def active(self) -> int:
        """Number of tasks currently in flight."""
        return self._active

    @property
    def waiting(self) -> int:
        """Number of tasks waiting for a free channel."""
        return len(self._waiting)

    @property
    def idle(self) -> bool:
        return self._active == 0 and not self._waiting

    def enqueue(self, task: Task) -> None:
        """Start ``task`` now if a channel is free, otherwise queue it."""
        if self._active < self._channels:
            self._next(task)
            return
        self._waiting.append(task)

    def on_drain(self) -> asyncio.Future:
        """
        Get a future resolved the next time the queue becomes idle.

        Only a transition to idle resolves it: subscribing to a queue that
        is already idle waits for the next batch of work to finish.
        """
        future = asyncio.get_running_loop().create_future()
        self._drain.append(future)
        return future

    def _next(self, task: Task) -> None:
        self._active += 1
        runner = asyncio.ensure_future(self._process(task))
        self._running.add(runner)
        runner.add_done_callback(self._running.discard)

    async def _process(self, task: Task) -> None:
        try:
            result = task()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            # The task handles its own errors
            logger.debug("Queued task failed: %r", e)
        finally:
            self._active -= 1
            if self._waiting:
                self._next(self._waiting.popleft())
            elif self._active == 0:
                self._notify_drain()

    def _notify_drain(self) -> None:
        subscribers, self._drain = self._drain, []
        for future in subscribers:
            if not future.done():
                future.set_result(None)
