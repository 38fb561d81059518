"""One-shot and repeating timers driven by a pluggable scheduler.

The controller never calls `asyncio` timing functions directly; it goes
through a `Scheduler`, so tests can substitute virtual time.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class TimerState(str, Enum):
    PENDING = "pending"
    ARMED = "armed"
    FIRED = "fired"
    CANCELLED = "cancelled"


class DeadlineTimer:
    """Fires a callback once, `delay` seconds after `arm()`.

    Moves pending -> armed -> fired or cancelled. Both fired and cancelled
    are terminal, so the callback can run at most once.
    """

    name = "deadline"

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        scheduler: Scheduler,
        name: str | None = None,
    ):
        self.delay = delay
        self.callback = callback
        self.scheduler = scheduler
        if name:
            self.name = name
        self.state = TimerState.PENDING
        self._handle: Cancellable | None = None

    @property
    def active(self) -> bool:
        return self.state == TimerState.ARMED

    def arm(self) -> None:
        if self.state != TimerState.PENDING:
            raise RuntimeError(f"Timer '{self.name}' already {self.state.value}")
        self._handle = self.scheduler.call_later(self.delay, self._fire)
        self.state = TimerState.ARMED
        logger.debug(f"Timer '{self.name}' armed for {self.delay}s")

    def cancel(self) -> bool:
        """Cancel if still armed. Returns whether anything was cancelled."""
        if self.state != TimerState.ARMED:
            return False
        self._handle.cancel()
        self._handle = None
        self.state = TimerState.CANCELLED
        logger.debug(f"Timer '{self.name}' cancelled")
        return True

    def _fire(self) -> None:
        if self.state != TimerState.ARMED:
            return
        self.state = TimerState.FIRED
        self._handle = None
        logger.debug(f"Timer '{self.name}' fired")
        self.callback()


class ResetTimer(DeadlineTimer):
    """Deadline whose firing is the session's terminal `reset` transition."""

    name = "reset"

    def __init__(self, delay: float, on_reset: Callable[[], None], scheduler: Scheduler):
        super().__init__(delay, on_reset, scheduler)


class Ticker:
    """Calls `callback` every `interval` seconds until stopped."""

    def __init__(self, interval: float, callback: Callable[[], None], scheduler: Scheduler):
        self.interval = interval
        self.callback = callback
        self.scheduler = scheduler
        self.running = False
        self._handle: Cancellable | None = None

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self._schedule()

    def stop(self) -> None:
        self.running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(self.interval, self._tick)

    def _tick(self) -> None:
        if not self.running:
            return
        self._schedule()
        self.callback()
