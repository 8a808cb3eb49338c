"""Task handles, and the tagged union over values a routine can yield."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Self

from gthread.exceptions import Cancelled
from gthread.outcome import Err, Ok

if TYPE_CHECKING:
    from gthread.outcome import Outcome
    from gthread.typedefs import Callback


class Handle[T](ABC):
    """Cancellable handle returned by fork, par, race and sleep.

    Subclasses settle the handle through _settle, which invokes the completion
    callback on the single transition into the finished state.
    """

    """Marks the value as a task handle when a routine yields it."""
    is_thread: ClassVar[bool] = True

    def __init__(self, on_complete: Callback[Any]) -> None:
        self._on_complete = on_complete
        self._outcome: Outcome[T] | None = None

    @abstractmethod
    def throw(self, err: BaseException) -> Self:
        """Forces an error into the task. No-op once the task is done."""

    def cancel(self) -> Self:
        """Throws the standard cancellation error into the task."""
        return self.throw(Cancelled())

    @property
    def done(self) -> bool:
        """If the task has reported completion."""
        return self._outcome is not None

    @property
    def outcome(self) -> Outcome[T] | None:
        """How the task finished, or None while it is pending."""
        return self._outcome

    def _settle(self, outcome: Outcome[T]) -> bool:
        """Records the outcome and reports it, at most once.

        Returns:
            Whether this call was the one that finished the task
        """
        if self._outcome is not None:
            return False

        self._outcome = outcome
        match outcome:
            case Ok(value=value):
                self._on_complete(None, value)
            case Err(error=error, index=index):
                self._on_complete(error, index)
        return True


@dataclass(slots=True, frozen=True)
class NestedTask:
    """The routine yielded another task. Errors thrown at the parent follow it."""

    handle: Handle[Any]


@dataclass(slots=True, frozen=True)
class AsyncOperation:
    """The routine yielded anything else. The driver never looks inside."""

    value: Any


type Yielded = NestedTask | AsyncOperation


def classify(value: object) -> Yielded:
    """Sorts a yielded value into the kind the driver dispatches on."""
    if isinstance(value, Handle):
        return NestedTask(handle=value)
    return AsyncOperation(value=value)
