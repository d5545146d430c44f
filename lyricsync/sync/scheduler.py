"""
Cancellable scheduling on the asyncio event loop

The synchronizer never talks to the loop directly. It asks a scheduler for
one-shot (`call_later`) and repeating (`call_every`) callbacks and keeps the
returned handles so it can cancel them when the document changes. Tests swap
in a manual scheduler that fires callbacks on demand.
"""

import asyncio
from typing import Callable, Optional

from ..utils.logger import get_logger


logger = get_logger(__name__)


class ScheduledTask:
    """Handle for a scheduled callback"""

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class _OneShotTask(ScheduledTask):

    def __init__(self, handle: asyncio.TimerHandle):
        super().__init__()
        self._handle = handle

    def cancel(self) -> None:
        super().cancel()
        self._handle.cancel()


class _RepeatingTask(ScheduledTask):
    """Re-arms itself after every run until cancelled"""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        super().__init__()
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    def arm(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._run)

    def _run(self) -> None:
        if self.cancelled:
            return
        try:
            self._callback()
        except Exception as e:
            logger.error(f"Repeating task failed: {e}", exc_info=True)
        if not self.cancelled:
            self.arm()

    def cancel(self) -> None:
        super().cancel()
        if self._handle is not None:
            self._handle.cancel()


class EventLoopScheduler:
    """
    Scheduler backed by an asyncio event loop

    All callbacks run on the loop thread, which is the only thread allowed
    to mutate synchronizer state.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize scheduler

        Args:
            loop: Event loop to schedule on, defaults to the running loop
                  at first use
        """
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """
        Run a callback once after a delay

        Args:
            delay: Seconds to wait, negative values run as soon as possible
            callback: Zero-argument callable

        Returns:
            Cancellable task handle
        """
        handle = self.loop.call_later(max(delay, 0.0), callback)
        return _OneShotTask(handle)

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        """
        Run a callback repeatedly at a fixed interval

        Args:
            interval: Seconds between runs
            callback: Zero-argument callable

        Returns:
            Cancellable task handle
        """
        task = _RepeatingTask(self.loop, interval, callback)
        task.arm()
        return task
