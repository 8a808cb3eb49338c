from __future__ import annotations

import heapq
import itertools
import time
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from gthread.log import get_logger
from gthread.lowlevel import get_running_loop
from gthread.outcome import Err, Ok
from gthread.task import fork

if TYPE_CHECKING:
    from collections.abc import Callable

    from gthread.typedefs import Context, Routine, TaskID

logger = get_logger(__name__)


@dataclass(slots=True, kw_only=True)
class TimerHandle:
    """A callback scheduled to run once its deadline has passed."""

    """Loop time at which the callback becomes due."""
    when: float

    """Tie breaker, timers with equal deadlines run in scheduling order."""
    seq: int

    callback: Callable[..., None] = field(repr=False)
    args: tuple[Any, ...] = field(default=(), repr=False)

    """Set once the timer has fired or been cancelled."""
    cancelled: bool = field(default=False, init=False)

    def cancel(self) -> None:
        """Prevents the timer from firing. Calling it again is a no-op."""
        self.cancelled = True

    def __lt__(self, other: TimerHandle) -> bool:
        return (self.when, self.seq) < (other.when, other.seq)


@dataclass(slots=True, kw_only=True)
class Loop:
    """Single threaded scheduler for deferred callbacks and timers."""

    """Returns the current time in seconds."""
    clock: Callable[[], float] = time.monotonic

    """Blocks the thread while waiting for the next timer."""
    sleep: Callable[[float], None] = time.sleep

    """Callbacks to run on the next tick, in FIFO order."""
    _ready: deque[tuple[Callable[..., None], tuple[Any, ...]]] = field(
        default_factory=deque, init=False, repr=False
    )

    """Heap of pending timers."""
    _timers: list[TimerHandle] = field(default_factory=list, init=False, repr=False)

    _seq: itertools.count = field(default_factory=itertools.count, init=False)
    _task_ids: itertools.count = field(
        default_factory=lambda: itertools.count(1), init=False
    )

    def call_soon(self, callback: Callable[..., None], *args: Any) -> None:
        """Schedules callback(*args) to run on the next tick."""
        self._ready.append((callback, args))

    def call_later(
        self, delay: float, callback: Callable[..., None], *args: Any
    ) -> TimerHandle:
        """Schedules callback(*args) to run after delay seconds.

        Args:
            delay: seconds to wait, negative delays are treated as zero
            callback: the function to call
            args: positional arguments for the callback

        Returns:
            A handle which can cancel the timer before it fires
        """
        timer = TimerHandle(
            when=self.clock() + max(delay, 0),
            seq=next(self._seq),
            callback=callback,
            args=args,
        )
        heapq.heappush(self._timers, timer)
        return timer

    def new_task_id(self) -> TaskID:
        """Gets an unused ID for a task."""
        return next(self._task_ids)

    def has_pending(self) -> bool:
        """Checks if any callbacks or live timers remain."""
        self._drop_cancelled_timers()
        return bool(self._ready or self._timers)

    def run_until_complete(self) -> None:
        """Runs the loop until there is nothing left to do."""
        while self.has_pending():
            self._run_once()

        logger.debug("Loop idle")

    def _run_once(self) -> None:
        if not self._ready and self._timers:
            delay = self._timers[0].when - self.clock()
            if delay > 0:
                self.sleep(delay)

        self._collect_due_timers()

        # Only callbacks queued before this tick run in it.
        for _ in range(len(self._ready)):
            callback, args = self._ready.popleft()
            callback(*args)

    def _collect_due_timers(self) -> None:
        now = self.clock()
        while self._timers and self._timers[0].when <= now:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            timer.cancelled = True
            self._ready.append((timer.callback, timer.args))

    def _drop_cancelled_timers(self) -> None:
        while self._timers and self._timers[0].cancelled:
            heapq.heappop(self._timers)


def run[T](routine: Routine[T], context: Context = None) -> T:
    """Entry point for running a routine to completion.

    Forks the routine on the current loop and runs the loop until idle.

    Args:
        routine: the entry routine
        context: execution context for the routine, a fresh dict if omitted

    Returns:
        The value returned by the routine

    Raises:
        The error the routine finished with.
    """
    loop = get_running_loop()
    thread = fork(routine, context=context)
    loop.run_until_complete()

    match thread.outcome:
        case Ok(value=value):
            return value
        case Err(error=error):
            raise error
        case None:
            logger.info("Raising deadlock error", task=thread)
            raise RuntimeError("Deadlock: loop is idle but the routine never finished")
