from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Ok[T]:
    """A task finished with a value."""

    value: T


@dataclass(slots=True, frozen=True)
class Err:
    """A task finished with an error.

    index is only set by par, and points at the routine that failed.
    """

    error: BaseException
    index: int | None = None


type Outcome[T] = Ok[T] | Err
