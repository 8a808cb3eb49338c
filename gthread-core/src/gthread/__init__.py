"""Cooperative threads of execution built from generator functions."""

__version__ = "0.1.0"

from gthread.combinators import par, race
from gthread.exceptions import Cancelled, GThreadError, RaceFailed
from gthread.handle import Handle
from gthread.loop import Loop, run
from gthread.operations import checkpoint
from gthread.outcome import Err, Ok
from gthread.task import Thread, fork
from gthread.timerio import sleep, timeout

__all__ = [
    "Cancelled",
    "Err",
    "GThreadError",
    "Handle",
    "Loop",
    "Ok",
    "RaceFailed",
    "Thread",
    "checkpoint",
    "fork",
    "par",
    "race",
    "run",
    "sleep",
    "timeout",
]
