# backend/packing/guard.py
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator


class RemovalGuard:
    """Single-slot latch around box removal and renumbering.

    A second acquire while the latch is held, or within ``cooldown`` seconds
    after it was released, is refused rather than queued.
    """

    def __init__(self, cooldown: float = 0.1, clock: Callable[[], float] = time.monotonic):
        self.cooldown = cooldown
        self._clock = clock
        self._lock = threading.Lock()
        self._held = False
        self._released_at = None

    @property
    def busy(self) -> bool:
        if self._held:
            return True
        return self._released_at is not None and self._clock() - self._released_at < self.cooldown

    def try_acquire(self) -> bool:
        with self._lock:
            if self.busy:
                return False
            self._held = True
            return True

    def release(self) -> None:
        with self._lock:
            self._held = False
            self._released_at = self._clock()

    @contextmanager
    def hold(self) -> Iterator[bool]:
        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()
