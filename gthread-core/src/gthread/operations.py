"""Asynchronous operations that routines can yield.

Anything that eventually calls the routine's resume callback works; these are
the ones the library provides on top of the loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from gthread.lowlevel import get_running_loop

if TYPE_CHECKING:
    from gthread.typedefs import Resume


@dataclass(slots=True, frozen=True)
class Checkpoint:
    """Descriptor for a pending checkpoint."""

    value: Any = None


def checkpoint(resume: Resume, value: Any = None) -> Checkpoint:
    """Yields control to other tasks, resuming with value on the next tick."""
    get_running_loop().call_soon(resume, None, value)
    return Checkpoint(value=value)


def fail(resume: Resume, error: BaseException) -> Checkpoint:
    """Resumes the routine by raising error inside it on the next tick."""
    get_running_loop().call_soon(resume, error, None)
    return Checkpoint()
