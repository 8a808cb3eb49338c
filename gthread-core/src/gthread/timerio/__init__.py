from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self, override

from gthread._utils import _discard
from gthread.handle import Handle
from gthread.log import get_logger
from gthread.lowlevel import get_running_loop
from gthread.outcome import Err, Ok

if TYPE_CHECKING:
    from gthread.loop import Loop, TimerHandle
    from gthread.typedefs import Callback, Context, Program, Resume, Routine

logger = get_logger(__name__)


class Timer(Handle[bool]):
    """A cancellable delay. Fires once, with True, unless thrown into first."""

    def __init__(self, ms: float, on_complete: Callback[bool], loop: Loop) -> None:
        super().__init__(on_complete)
        self.ms = ms
        self.loop = loop
        self._timer: TimerHandle | None = loop.call_later(ms / 1000, self._fire)

    @override
    def __repr__(self) -> str:
        return f"Timer(ms={self.ms}, armed={self.armed})"

    @property
    def armed(self) -> bool:
        """If the timer can still fire."""
        return self._timer is not None

    @override
    def throw(self, err: BaseException) -> Self:
        """Disarms the timer and reports err on the next tick."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Timer cancelled", ms=self.ms, error=repr(err))
            self.loop.call_soon(self._settle, Err(err))
        return self

    def _fire(self) -> None:
        if self._timer is None:
            return

        self._timer = None
        logger.debug("Timer fired", ms=self.ms)
        self._settle(Ok(True))


def sleep(ms: float, on_complete: Callback[bool] | None = None) -> Timer:
    """Starts a timer that completes with True after ms milliseconds.

    Meant to be yielded from a routine, so the routine waits in place:

        def routine(resume, context):
            yield sleep(1000, resume)

    Args:
        ms: the delay in milliseconds
        on_complete: called once with (None, True) on expiry, or (error, None)
            if the timer was thrown into before it fired
    """
    return Timer(
        ms, on_complete if on_complete is not None else _discard, get_running_loop()
    )


def timeout(ms: float, value: Any = True) -> Routine[Any]:
    """Makes a routine that completes with value after ms milliseconds.

    Typically one of the participants of a race, to put a deadline on the others:

        yield race([fetch, parse, timeout(3000)], resume)

    Args:
        ms: the delay in milliseconds
        value: what the routine completes with
    """

    def routine(resume: Resume, context: Context) -> Program[Any]:
        yield sleep(ms, resume)
        return value

    return routine


__all__ = ["Timer", "sleep", "timeout"]
