from __future__ import annotations

from typing import TYPE_CHECKING

from gthread._utils import _local

if TYPE_CHECKING:
    from gthread.loop import Loop


def get_running_loop() -> Loop:
    """Gets the loop of the current thread, creating one on first use."""
    if _local.loop is None:
        from gthread.loop import Loop  # noqa: PLC0415

        _local.loop = Loop()

    return _local.loop


def set_loop(loop: Loop | None) -> None:
    """Installs the loop used by the current thread.

    Args:
        loop: the loop to install, or None to get a fresh one on next use
    """
    _local.loop = loop
