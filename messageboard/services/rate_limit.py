"""Fixed-window admission control for submissions."""

import threading
import time
from collections.abc import Callable


class SubmissionRateLimiter:
    """Allow at most one accepted submission per client address per window.

    A slot is reserved before the submission runs and released again if it
    fails, so concurrent attempts from one address cannot both get through and
    a rejected attempt does not lock the client out.
    """

    def __init__(self, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self.clock = clock
        self._accepted: dict[str, float] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.window_seconds > 0

    def reserve(self, client: str) -> bool:
        """Take the client's slot for this window; False if it is already taken."""
        if not self.enabled:
            return True
        with self._lock:
            now = self.clock()
            self._accepted = {
                address: accepted_at
                for address, accepted_at in self._accepted.items()
                if now - accepted_at < self.window_seconds
            }
            if client in self._accepted:
                return False
            self._accepted[client] = now
            return True

    def release(self, client: str) -> None:
        """Give back a slot whose submission was not accepted."""
        with self._lock:
            self._accepted.pop(client, None)
