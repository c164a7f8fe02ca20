"""
Sliding-Window Rate Limiter - Client-side request gate.

Admits at most ``max_requests`` inside any trailing ``time_window``. It
inspects the timestamps of recently admitted requests rather than
accumulating tokens, so bursts are bounded by count-within-window.

Two behaviours:
- hard cap: a full window rejects immediately with a local RATE_LIMIT error
- soft throttle: the request that fills the window waits until the oldest
  entry expires

Only the read-purge-check-append step is atomic. The throttle sleep runs
after the lock is released, so a concurrent caller that arrives while the
window is full is rejected rather than queued.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Optional

from voe.api.exceptions import ERROR_MESSAGES, ErrorKind, VoeError
from voe.core.config import (
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_REQUESTS_PER_SECOND,
    RATE_LIMIT_TIME_WINDOW,
    RateLimitConfig,
)
from voe.core.logger import get_logger

logger = get_logger("voe.rate_limiter")


class SlidingWindowRateLimiter:
    """
    Per-client sliding window gate.

    One instance is owned by one ``VoeClient`` and shared by every
    operation that client issues. Independent clients never share state.
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        time_window: float = RATE_LIMIT_TIME_WINDOW,
        requests_per_second: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if time_window <= 0:
            raise ValueError("time_window must be positive")
        self.max_requests = int(max_requests)
        self.time_window = float(time_window)
        self.requests_per_second = int(requests_per_second)
        self._clock = clock
        self._sleep = sleep
        self._window: Deque[float] = deque()
        self._lock: Optional[asyncio.Lock] = None

    @classmethod
    def from_config(cls, config: RateLimitConfig, **kwargs: Any) -> SlidingWindowRateLimiter:
        return cls(
            max_requests=config.max_requests,
            time_window=config.time_window,
            requests_per_second=config.requests_per_second,
            **kwargs,
        )

    def _get_lock(self) -> asyncio.Lock:
        # Created lazily so the limiter can be built outside a running loop.
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def _purge(self, now: float) -> None:
        cutoff = now - self.time_window
        while self._window and self._window[0] < cutoff:
            self._window.popleft()

    async def acquire(self) -> None:
        """Admit one request, throttling or rejecting as the window dictates.

        Raises:
            VoeError: RATE_LIMIT (``local=True``) when the window is already
                full. The window is left untouched in that case.
        """
        async with self._get_lock():
            now = self._clock()
            self._purge(now)

            if len(self._window) >= self.max_requests:
                logger.warning(
                    "Rate limit hard cap reached",
                    in_window=len(self._window),
                    max_requests=self.max_requests,
                )
                raise VoeError(
                    ErrorKind.RATE_LIMIT,
                    ERROR_MESSAGES["RATE_LIMIT_EXCEEDED"],
                    local=True,
                )

            self._window.append(now)

            wait_time = 0.0
            if len(self._window) == self.max_requests:
                wait_time = self.time_window - (now - self._window[0])

        if wait_time > 0:
            logger.debug("Rate limit window full, throttling", wait_seconds=round(wait_time, 4))
            await self._sleep(wait_time)

    def reset(self) -> None:
        """Forget every admitted timestamp."""
        self._window.clear()

    @property
    def in_window(self) -> int:
        self._purge(self._clock())
        return len(self._window)

    def stats(self) -> Dict[str, Any]:
        return {
            "in_window": self.in_window,
            "max_requests": self.max_requests,
            "time_window": self.time_window,
            "requests_per_second": self.requests_per_second,
        }
