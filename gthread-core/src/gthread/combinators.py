"""Fan-out/fan-in over several routines: par and race."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Self, override

from gthread._utils import _discard
from gthread.exceptions import RaceFailed
from gthread.handle import Handle
from gthread.log import get_logger
from gthread.lowlevel import get_running_loop
from gthread.outcome import Err, Ok
from gthread.task import fork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gthread.loop import Loop
    from gthread.task import Thread
    from gthread.typedefs import Callback, Context, Routine

logger = get_logger(__name__)


class _Group[T](Handle[T]):
    """Common bookkeeping for handles that own one thread per routine."""

    def __init__(
        self,
        routines: Sequence[Routine[Any]],
        on_complete: Callback[Any],
        context: Context,
        loop: Loop,
    ) -> None:
        super().__init__(on_complete)
        self.loop = loop
        self._thrown: BaseException | None = None
        self.threads: list[Thread[Any]] = [
            fork(
                routine,
                self._child_callback(i),
                context if context is not None else {},
            )
            for i, routine in enumerate(routines)
        ]
        if not self.threads:
            loop.call_soon(self._on_empty)

    def pending(self) -> list[Thread[Any]]:
        """Threads which haven't reported completion yet."""
        return [thread for thread in self.threads if not thread.done]

    @override
    def throw(self, err: BaseException) -> Self:
        """Forwards err to every unfinished routine, and reports it next tick."""
        if self.done or self._thrown is not None:
            return self

        self._thrown = err
        for thread in self.pending():
            thread.throw(err)
        self.loop.call_soon(self._settle, Err(err))
        return self

    def _child_callback(self, index: int) -> Callback[Any]:
        def on_child_complete(error: BaseException | None, result: Any) -> None:
            if self.done or self._thrown is not None:
                return
            if error is not None:
                self._on_child_error(index, error)
            else:
                self._on_child_result(index, result)

        return on_child_complete

    @abstractmethod
    def _on_empty(self) -> None: ...

    @abstractmethod
    def _on_child_error(self, index: int, error: BaseException) -> None: ...

    @abstractmethod
    def _on_child_result(self, index: int, result: Any) -> None: ...


class Par(_Group[list[Any]]):
    """Completes when every routine has succeeded, or on the first failure."""

    def __init__(
        self,
        routines: Sequence[Routine[Any]],
        on_complete: Callback[Any],
        context: Context,
        loop: Loop,
    ) -> None:
        self.results: list[Any] = [None] * len(routines)
        self._remaining = len(routines)
        super().__init__(routines, on_complete, context, loop)

    @override
    def __repr__(self) -> str:
        return f"Par(size={len(self.threads)}, remaining={self._remaining})"

    @override
    def _on_empty(self) -> None:
        self._settle(Ok([]))

    @override
    def _on_child_error(self, index: int, error: BaseException) -> None:
        logger.debug("Par failed", index=index, error=repr(error))
        self._settle(Err(error, index=index))
        for thread in self.pending():
            thread.throw(error)

    @override
    def _on_child_result(self, index: int, result: Any) -> None:
        self.results[index] = result
        self._remaining -= 1
        if self._remaining == 0:
            logger.debug("Par finished", size=len(self.threads))
            self._settle(Ok(self.results))


class Race(_Group[Any]):
    """Completes with the first success and cancels the other routines."""

    def __init__(
        self,
        routines: Sequence[Routine[Any]],
        on_complete: Callback[Any],
        context: Context,
        loop: Loop,
    ) -> None:
        self._failures = 0
        super().__init__(routines, on_complete, context, loop)

    @override
    def __repr__(self) -> str:
        return f"Race(size={len(self.threads)}, failures={self._failures})"

    @override
    def _on_empty(self) -> None:
        self._settle(Err(RaceFailed()))

    @override
    def _on_child_error(self, index: int, error: BaseException) -> None:
        self._failures += 1
        if self._failures == len(self.threads):
            logger.debug("Race failed", size=len(self.threads))
            self._settle(Err(RaceFailed()))

    @override
    def _on_child_result(self, index: int, result: Any) -> None:
        logger.debug("Race won", index=index)
        self._settle(Ok(result))
        # Cooperative, the losers still decide how to wind down.
        for thread in self.pending():
            thread.cancel()


def par(
    routines: Sequence[Routine[Any]],
    on_complete: Callback[Any] | None = None,
    context: Context = None,
) -> Par:
    """Forks every routine and collects their results in input order.

    Args:
        routines: the routines to run side by side
        on_complete: called once with (None, results) when all routines succeeded,
            or with (error, index) for the first routine that failed
        context: execution context shared by all routines. Each routine gets its
            own fresh dict if omitted

    Returns:
        A handle for the whole group
    """
    return Par(
        routines,
        on_complete if on_complete is not None else _discard,
        context,
        get_running_loop(),
    )


def race(
    routines: Sequence[Routine[Any]],
    on_complete: Callback[Any] | None = None,
    context: Context = None,
) -> Race:
    """Forks every routine and completes with the first one to succeed.

    The other routines are cancelled at that point. If all of them fail, the
    race fails with RaceFailed.

    Args:
        routines: the routines to race
        on_complete: called once with (None, result) or (error, None)
        context: execution context shared by all routines. Each routine gets its
            own fresh dict if omitted

    Returns:
        A handle for the whole race
    """
    return Race(
        routines,
        on_complete if on_complete is not None else _discard,
        context,
        get_running_loop(),
    )


__all__ = ["Par", "Race", "par", "race"]
