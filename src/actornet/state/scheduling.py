"""Cancellable timers for debounced filter edits and animated transitions.

Both helpers own their scheduled work explicitly: nothing is left for
garbage collection to stop. ``cancel()`` releases everything they hold.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from actornet.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def ease_out_cubic(progress: float) -> float:
    progress = max(0.0, min(1.0, progress))
    return 1 - (1 - progress) ** 3


class Debouncer(Generic[T]):
    """
    Run a callback once input has been quiet for ``delay`` seconds.

    Every ``schedule`` call replaces the pending value and restarts the
    timer, so a burst of edits yields one call with the last value.
    Coroutine callbacks are started as tasks on the running loop.
    """

    def __init__(
        self,
        callback: Callable[[T], Awaitable[None] | None],
        delay: float | None = None,
        name: str = "debounce",
    ) -> None:
        self.callback = callback
        self.delay = delay if delay is not None else settings.filter_debounce_seconds
        self.name = name
        self._handle: asyncio.TimerHandle | None = None
        self._value: T | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, value: T) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._value = value
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Fire a pending call now instead of waiting for the timer."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            self._value = None

    def _fire(self) -> None:
        self._handle = None
        value, self._value = self._value, None
        logger.debug(f"{self.name}: firing")
        result = self.callback(value)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)


class Animator:
    """
    Frame-stepped transitions, one at a time.

    Starting an animation cancels the one in flight, so two transitions
    never write competing values in the same frame.
    """

    def __init__(self, frame_interval: float | None = None) -> None:
        self.frame_interval = (
            frame_interval if frame_interval is not None else settings.animation_frame_interval
        )
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, step: Callable[[float], None], duration: float) -> asyncio.Task:
        """
        Animate over ``duration`` seconds.

        ``step`` receives the eased progress in [0, 1] once per frame and
        always receives 1.0 on the final frame.
        """
        self.cancel()
        self._task = asyncio.create_task(self._run(step, duration))
        return self._task

    async def _run(self, step: Callable[[float], None], duration: float) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        while True:
            elapsed = loop.time() - started
            progress = 1.0 if duration <= 0 else min(1.0, elapsed / duration)
            step(ease_out_cubic(progress))
            if progress >= 1.0:
                return
            await asyncio.sleep(self.frame_interval)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the current animation to finish, if any."""
        if self._task is not None:
            await asyncio.shield(self._task)
