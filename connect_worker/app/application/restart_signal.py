"""Restart request shared between the supervisor's error path and the listener loop."""
from __future__ import annotations


class RestartSignal:
    """Owned by the listener loop; anyone holding it may request a restart.

    All writers run on the worker's event loop, so a plain attribute is enough:
    the last write wins and the loop re-reads it every polling interval.
    """

    def __init__(self, *, requested: bool = True) -> None:
        self._requested = requested

    @property
    def is_set(self) -> bool:
        return self._requested

    def request(self) -> None:
        self._requested = True

    def clear(self) -> None:
        self._requested = False
