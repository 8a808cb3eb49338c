"""Shared test fixtures for gthread."""

import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest

from gthread._utils import _local
from gthread.loop import Loop, run
from gthread.lowlevel import set_loop
from gthread.typedefs import Context, Routine


@dataclass
class TimingContext:
    """Captures elapsed time and provides tolerance-aware assertions."""

    _start: float = field(default=0, repr=False)
    _end: float = field(default=0, repr=False)

    def start(self) -> None:
        self._start = time.monotonic()

    def stop(self) -> None:
        self._end = time.monotonic()

    @property
    def elapsed(self) -> float:
        if self._end == 0.0:
            return time.monotonic() - self._start
        return self._end - self._start

    def assert_elapsed_between(
        self, lower: float, upper: float, *, msg: str = ""
    ) -> None:
        """Assert elapsed time is within [lower, upper] seconds."""
        elapsed = self.elapsed
        context = f" ({msg})" if msg else ""
        assert lower <= elapsed <= upper, (
            f"Expected elapsed time in [{lower}, {upper}]s, got {elapsed:.3f}s{context}"
        )


@dataclass
class VirtualClock:
    """Clock for the loop where waiting for a timer takes no real time."""

    now: float = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, delay: float) -> None:
        self.now += delay

    @property
    def ms(self) -> float:
        return self.now * 1000


@dataclass
class Recorder:
    """Completion callback that remembers every call."""

    calls: list[tuple[BaseException | None, Any]] = field(default_factory=list)

    def __call__(self, error: BaseException | None, result: Any) -> None:
        self.calls.append((error, result))

    @property
    def once(self) -> tuple[BaseException | None, Any]:
        """The only call made, failing if there were none or several."""
        assert len(self.calls) == 1, f"Expected exactly one call, got {self.calls}"
        return self.calls[0]


@pytest.fixture(autouse=True)
def _fresh_loop() -> Iterator[None]:
    """Every test starts without a loop installed."""
    _local.cleanup()
    yield
    _local.cleanup()


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def loop(clock: VirtualClock) -> Loop:
    """Installs a loop driven by a virtual clock."""
    virtual_loop = Loop(clock=clock, sleep=clock.sleep)
    set_loop(virtual_loop)
    return virtual_loop


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_recorder() -> Callable[[], Recorder]:
    return Recorder


@pytest.fixture
def run_routine() -> Callable[..., object]:
    """Run a routine on the current loop and return its result."""

    def _run(routine: Routine[Any], context: Context = None) -> object:
        return run(routine, context)

    return _run


@pytest.fixture
def timing() -> TimingContext:
    """Provide a timing context for measuring elapsed time in tests."""
    return TimingContext()
