from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Callable


class FailedAttemptLimiter:
    """Sliding-window count of failed attempts per key.

    Only failures are recorded, so a user who signs in successfully is never
    throttled by their own earlier typos once ``reset`` has run.
    """

    def __init__(
        self,
        *,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._failures: dict[str, deque[float]] = defaultdict(deque)

    def _prune(self, key: str) -> deque[float]:
        window_start = self._clock() - self.window_seconds
        failures = self._failures[key]
        while failures and failures[0] < window_start:
            failures.popleft()
        return failures

    def blocked(self, key: str) -> bool:
        return len(self._prune(key)) >= self.max_attempts

    def record_failure(self, key: str) -> None:
        self._prune(key).append(self._clock())

    def reset(self, key: str) -> None:
        self._failures.pop(key, None)
