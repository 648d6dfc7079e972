"""Fixed-window request limiting keyed by client address."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from tabletop_prep.core.exceptions import RateLimitExceededError


class RateLimiter:
    """Allow ``limit`` hits per ``window_seconds`` for each key.

    Expired windows are swept once more than ``sweep_threshold`` keys are
    tracked, so one-off clients do not accumulate.

    Example:
        >>> limiter = RateLimiter(limit=5, window_seconds=3600)
        >>> limiter.hit("203.0.113.9")
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        message: str = "Too many requests, please try again later",
        clock: Callable[[], float] = time.monotonic,
        sweep_threshold: int = 1024,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def hit(self, key: str) -> int:
        """Count one request for ``key``.

        Returns:
            Requests remaining in the current window.

        Raises:
            RateLimitExceededError: If the window's allowance is spent.
        """
        now = self._clock()
        with self._lock:
            if len(self._windows) >= self.sweep_threshold:
                self._sweep(now)
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            if count >= self.limit:
                retry_after = self.window_seconds - (now - started)
                raise RateLimitExceededError(self.message, retry_after_seconds=round(retry_after, 1))
            self._windows[key] = (started, count + 1)
            return self.limit - count - 1

    def _sweep(self, now: float) -> None:
        # Caller holds the lock
        expired = [
            key
            for key, (started, _) in self._windows.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)


__all__ = ["RateLimiter"]
