from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gthread.loop import Loop


def _discard(error: BaseException | None, result: Any) -> None:
    """Default completion callback. Drops the outcome."""


@dataclass(kw_only=True)
class _Local(threading.local):
    """Wrapper around threading.local for proper type annotations."""

    loop: Loop | None = None

    def cleanup(self) -> None:
        """Resets all attributes."""
        self.loop = None


_local = _Local()

__all__ = [
    "_discard",
    "_local",
]
