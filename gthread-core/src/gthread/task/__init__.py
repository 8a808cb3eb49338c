from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Self, override

from gthread._utils import _discard
from gthread.handle import Handle, NestedTask, classify
from gthread.log import get_logger
from gthread.lowlevel import get_running_loop
from gthread.outcome import Err, Ok
from gthread.task.state import Created, Done, Running, Suspended, TaskState

if TYPE_CHECKING:
    from collections.abc import Generator

    from gthread.loop import Loop
    from gthread.outcome import Outcome
    from gthread.typedefs import Callback, Context, Program, Routine

logger = get_logger(__name__)


class Thread[T](Handle[T]):
    """Drives a routine forwards, one step per tick."""

    def __init__(
        self,
        routine: Routine[T],
        on_complete: Callback[T],
        context: Context,
        loop: Loop,
    ) -> None:
        super().__init__(on_complete)
        self.routine = routine
        self.context = context
        self.loop = loop
        self.task_id = loop.new_task_id()

        self.state: TaskState[T] = Created()

        self._gen: Program[T] | None = None
        self._sent: Any = None
        self._pending_error: BaseException | None = None
        self._started = False

    @override
    def __repr__(self) -> str:
        return f"Thread(task_id={self.task_id}, state={self.state!r})"

    def start(self) -> None:
        """Schedules the first step. The routine never runs synchronously."""
        if self._started:
            msg = f"Task with task_id {self.task_id} has already been started"
            raise RuntimeError(msg)

        self._started = True
        self.loop.call_soon(self._first_step)

    def resume(self, error: BaseException | None, result: Any = None) -> None:
        """The callback a routine hands to its asynchronous operations.

        Stores the result, or the error to raise, and schedules the next step.
        """
        if isinstance(self.state, Done):
            return

        self._sent = result
        if error is not None:
            self._pending_error = error
        self.loop.call_soon(self._step)

    @override
    def throw(self, err: BaseException) -> Self:
        """Raises err inside the routine at its next step.

        If the routine is suspended on another task, err is forwarded to that
        task right away, so cancellation travels down a chain of nested tasks.
        """
        if isinstance(self.state, Done):
            return self

        self._pending_error = err
        match self.state:
            case Suspended(yielded=NestedTask(handle=nested)):
                nested.throw(err)
            case _:
                pass
        return self

    def _first_step(self) -> None:
        with self._handle_step_exc():
            self._gen = self.routine(self.resume, self.context)
            logger.debug("Task started", task_id=self.task_id)
            self._advance()

    def _step(self) -> None:
        if isinstance(self.state, Done) or self._gen is None:
            return

        with self._handle_step_exc():
            self._advance()

    def _advance(self) -> None:
        gen = self._gen
        assert gen is not None

        self.state = Running()
        if self._pending_error is not None:
            error, self._pending_error = self._pending_error, None
            yielded = gen.throw(error)
        else:
            sent, self._sent = self._sent, None
            yielded = gen.send(sent)

        self.state = Suspended(yielded=classify(yielded))

    def _finish(self, outcome: Outcome[T]) -> None:
        self.state = Done(outcome=outcome)
        match outcome:
            case Ok():
                logger.debug("Task finished", task_id=self.task_id)
            case Err(error=error):
                logger.debug("Task failed", task_id=self.task_id, error=repr(error))
        self._settle(outcome)

    @contextmanager
    def _handle_step_exc(self) -> Generator[None]:
        outcome: Outcome[T] | None = None
        try:
            yield
        except StopIteration as e:
            outcome = Ok(e.value)
        except Exception as e:  # noqa: BLE001
            outcome = Err(e)

        # The callback runs outside the except block, its errors are its own.
        if outcome is not None:
            self._finish(outcome)


def fork[T](
    routine: Routine[T],
    on_complete: Callback[T] | None = None,
    context: Context = None,
) -> Thread[T]:
    """Starts a routine asynchronously, on the next tick of the loop.

    Args:
        routine: a generator function called as routine(resume, context)
        on_complete: called once with (error, result) when the routine finishes
        context: execution context handed to the routine, a fresh dict if omitted

    Returns:
        A handle which can throw errors into, or cancel, the routine
    """
    thread = Thread(
        routine,
        on_complete if on_complete is not None else _discard,
        context if context is not None else {},
        get_running_loop(),
    )
    thread.start()
    return thread
