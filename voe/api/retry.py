"""
Retry Executor - Linear backoff around a single logical operation.

State machine per call::

    Attempting(n) -> Succeeded
    Attempting(n) -> Retrying(n)  when the error is retryable and n < max
    Retrying(n)   -> Attempting(n + 1) after sleeping base_delay * n
    Attempting(n) -> Failed       when the error is permanent or n == max

Backoff is linear (1x, 2x, ... base_delay); the upstream rate limiter
already bounds request pressure.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from voe.api.exceptions import VoeError
from voe.core.config import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY
from voe.core.logger import get_logger

logger = get_logger("voe.retry")

T = TypeVar("T")


class RetryDecision(enum.Enum):
    RETRY = "retry"
    FAIL = "fail"


@dataclass
class RetryState:
    """Per-call bookkeeping; never shared between calls."""

    attempt: int = 1
    delays: List[float] = field(default_factory=list)
    last_error: Optional[VoeError] = None


class RetryExecutor:
    """Runs an async operation until it succeeds or the policy gives up."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        base_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = int(max_attempts)
        self.base_delay = float(base_delay)
        self._sleep = sleep

    def decide(self, error: VoeError, attempt: int) -> RetryDecision:
        """Transition taken after ``attempt`` failed with ``error``."""
        if not error.retryable:
            return RetryDecision.FAIL
        if attempt >= self.max_attempts:
            return RetryDecision.FAIL
        return RetryDecision.RETRY

    def delay_for(self, attempt: int) -> float:
        """Delay before attempt ``attempt + 1``."""
        return self.base_delay * attempt

    async def run(self, fn: Callable[[], Awaitable[T]], *, operation: str = "") -> T:
        state = RetryState()
        while True:
            try:
                result = await fn()
            except VoeError as err:
                state.last_error = err
                if self.decide(err, state.attempt) is RetryDecision.FAIL:
                    if state.attempt > 1 or err.retryable:
                        logger.warning(
                            "Operation failed",
                            operation=operation,
                            attempts=state.attempt,
                            kind=err.kind.value,
                            status=err.status,
                        )
                    raise

                delay = self.delay_for(state.attempt)
                logger.info(
                    "Retrying operation",
                    operation=operation,
                    attempt=state.attempt,
                    max_attempts=self.max_attempts,
                    retry_in=delay,
                    kind=err.kind.value,
                    status=err.status,
                )
                await self._sleep(delay)
                state.delays.append(delay)
                state.attempt += 1
                continue

            if state.attempt > 1:
                logger.debug("Operation succeeded after retry", operation=operation, attempts=state.attempt)
            return result
