from __future__ import annotations
import threading
from typing import Protocol


class Timer(Protocol):
    def wait(self, seconds: float) -> bool: ...

    def cancel(self) -> None: ...

    def reset(self) -> None: ...


class StopTimer:
    """
    Cancellable wait used by the orchestrator for every idle period.

    ``wait`` returns True as soon as ``cancel`` has been called, so a stop
    request never has to sit through a full cooldown.
    """

    def __init__(self) -> None:
        self._stop_evt = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._stop_evt.is_set()

    def wait(self, seconds: float) -> bool:
        if seconds <= 0:
            return self._stop_evt.is_set()
        return self._stop_evt.wait(seconds)

    def cancel(self) -> None:
        self._stop_evt.set()

    def reset(self) -> None:
        self._stop_evt.clear()
