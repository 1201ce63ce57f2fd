# src/cryptofiend/connection/timestamps.py

import time
import threading

class TimestampGenerator:
    """
    Produces request timestamps in milliseconds since the epoch.

    ``offset_ms`` lets callers correct for a local clock that drifted from the
    venue's (the venue answers with an invalid-timestamp error in that case).
    """
    def __init__(self, offset_ms: int = 0):
        self._lock = threading.Lock()
        self._offset_ms = offset_ms

    @property
    def offset_ms(self) -> int:
        with self._lock:
            return self._offset_ms

    def adjust(self, server_time_ms: int) -> int:
        """
        Aligns future timestamps with the venue's clock. Returns the new offset.
        """
        local_ms = time.time_ns() // 1_000_000
        with self._lock:
            self._offset_ms = int(server_time_ms) - local_ms
            return self._offset_ms

    def generate(self) -> int:
        with self._lock:
            return time.time_ns() // 1_000_000 + self._offset_ms
