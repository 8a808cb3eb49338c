class GThreadError(Exception):
    """Base class for errors produced by gthread itself."""


class Cancelled(GThreadError):
    """Thrown into a task when it is cancelled."""

    def __init__(self, msg: str = "cancelled") -> None:
        super().__init__(msg)


class RaceFailed(GThreadError):
    """Reported by race when every participant failed."""

    def __init__(self, msg: str = "Race failed") -> None:
        super().__init__(msg)
