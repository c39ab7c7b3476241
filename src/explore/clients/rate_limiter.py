"""Rate limiting for the portal client."""

import threading
import time
from collections import deque
from collections.abc import Callable


class RateLimiter:
    """Sliding window rate limiter.

    Shared by the worker threads of the explorer's read fan-out, so window
    bookkeeping happens under a lock.

    Example:
        >>> limiter = RateLimiter(requests_per_period=120, period_seconds=60)
        >>> limiter.wait_if_needed()  # Blocks if rate limit would be exceeded
    """

    def __init__(
        self,
        requests_per_period: int,
        period_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize rate limiter.

        Args:
            requests_per_period: Maximum number of requests allowed per period
            period_seconds: Length of the sliding window in seconds
            clock: Time source (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        self.requests_per_period = requests_per_period
        self.period_seconds = period_seconds
        self.request_times: deque[float] = deque()
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()

    def _evict(self, now: float) -> None:
        while self.request_times and self.request_times[0] <= now - self.period_seconds:
            self.request_times.popleft()

    def wait_if_needed(self) -> float:
        """Block until another request fits in the window, then record it.

        Returns:
            Seconds spent sleeping (0.0 when no wait was needed)
        """
        with self._lock:
            now = self._clock()
            self._evict(now)

            waited = 0.0
            if len(self.request_times) >= self.requests_per_period:
                # Small buffer past the moment the oldest request leaves the window
                waited = self.period_seconds - (now - self.request_times[0]) + 0.1
                if waited > 0:
                    self._sleep(waited)
                now = self._clock()
                self._evict(now)
                # Window never holds more than the limit, even if the clock stalled
                while len(self.request_times) >= self.requests_per_period:
                    self.request_times.popleft()

            self.request_times.append(now)
            return max(waited, 0.0)

    def reset(self) -> None:
        """Clear all tracked requests."""
        with self._lock:
            self.request_times.clear()
