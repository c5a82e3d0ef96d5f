"""Close-once cancellation signal shared between fetch callers and a stopper."""

import threading
from typing import Optional


class StopSignal:
    """
    Broadcast-once cancellation flag.

    The signal starts open. close() flips it exactly once; later calls are
    no-ops. Readers observe the state through is_closed() or wait() from any
    thread without taking a lock themselves.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()

    def close(self) -> bool:
        """Close the signal. Returns True only for the call that closed it."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            return True

    def is_closed(self) -> bool:
        """Non-blocking check of the signal state."""
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until closed or the timeout elapses; returns the closed state."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = "closed" if self.is_closed() else "open"
        return f"<StopSignal {state}>"
