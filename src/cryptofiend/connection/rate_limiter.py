# src/cryptofiend/connection/rate_limiter.py

import time
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

DEFAULT_WINDOW_SECONDS = 90.0


@dataclass
class RateLimitWindow:
    window_start: float
    count: int = 0


class RateLimiter:
    """
    Fixed-window call budget per endpoint key.

    A window opens on the first call for a key and is only reset once more than
    ``window_seconds`` have passed since it opened, no matter how many calls were
    refused in between. Admission never blocks: callers decide what to do when
    :meth:`try_acquire` returns False.
    """
    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_seconds <= 0:
            raise ValueError("Window must be positive")
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, RateLimitWindow] = {}
        self.lock = threading.Lock()

    def _current_window(self, key: str) -> RateLimitWindow:
        # Caller holds self.lock.
        now = self._clock()
        window = self._windows.get(key)
        if window is None:
            window = self._windows[key] = RateLimitWindow(window_start=now)
        elif now - window.window_start > self.window_seconds:
            window.window_start = now
            window.count = 0
        return window

    def try_acquire(self, key: str, budget: int) -> bool:
        """
        Consumes one slot of ``key``'s budget. Returns False, without consuming
        anything, when the budget for the current window is exhausted.
        """
        with self.lock:
            window = self._current_window(key)
            if window.count < budget:
                window.count += 1
                return True
            return False

    def remaining(self, key: str, budget: int) -> int:
        with self.lock:
            window = self._current_window(key)
            return max(budget - window.count, 0)

    def reset(self, key: Optional[str] = None) -> None:
        """Forgets the window for ``key``, or every window when no key is given."""
        with self.lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)
