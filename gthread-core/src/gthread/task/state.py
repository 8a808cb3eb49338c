from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gthread.handle import Yielded
    from gthread.outcome import Outcome


@dataclass(slots=True, kw_only=True)
class Created:
    """Task exists but its first step hasn't run."""


@dataclass(slots=True, kw_only=True)
class Running:
    """The task's generator is executing a step."""


@dataclass(slots=True, kw_only=True)
class Suspended:
    """Task yielded and waits for its resume callback."""

    yielded: Yielded


@dataclass(slots=True, kw_only=True)
class Done[T]:
    """Task has finished."""

    outcome: Outcome[T]


type TaskState[T] = Created | Running | Suspended | Done[T]
