"""Per-caller admission control for the chat endpoint."""
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional


class RateLimiter(ABC):
    """Decides whether a caller identity may make another request."""

    @abstractmethod
    def check(self, identity: str) -> bool:
        """Return True if the request is allowed."""


class FixedWindowRateLimiter(RateLimiter):
    """
    Fixed-window counter held in process memory.

    State is not shared across processes and is lost on restart. Access is
    unlocked, so concurrent requests for one identity may both be admitted
    at the cap boundary.
    """

    def __init__(
        self,
        max_requests: int = 20,
        window_seconds: float = 60.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        # {identity: [count, window_start]}
        self._counters: Dict[str, list] = {}

    def check(self, identity: str) -> bool:
        now = self._clock()
        entry = self._counters.get(identity)

        if entry is None or now - entry[1] > self.window_seconds:
            self._counters[identity] = [1, now]
            return True

        if entry[0] >= self.max_requests:
            return False

        entry[0] += 1
        return True

    def reset(self) -> None:
        self._counters.clear()
