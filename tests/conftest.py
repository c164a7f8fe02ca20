"""Shared test fixtures and stubs for VOE client tests.

Provides a controllable clock, a scripted transport with call counting,
and factory functions for httpx errors, pipelines and clients.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from voe.api.pipeline import RequestPipeline
from voe.api.rate_limiter import SlidingWindowRateLimiter
from voe.api.retry import RetryExecutor
from voe.client import VoeClient


# ---------------------------------------------------------------------------
# Stub classes
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock the test moves by hand.

    ``sleep`` records the requested delay and advances time by it, so a
    throttled limiter behaves exactly as it would in real time.
    """

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class SleepRecorder:
    """Async sleep that records delays without moving any clock."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class StubTransport:
    """Scripted async transport.

    Each ``request`` pops the next scripted item: exceptions are raised,
    anything else is returned. Once the script runs out it answers with an
    empty successful envelope.
    """

    def __init__(self, responses: Optional[List[Any]] = None) -> None:
        self._responses: List[Any] = list(responses or [])
        self.calls: List[Dict[str, Any]] = []
        self.initialized = False
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def initialize(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True

    async def request(self, method, path, params=None, files=None):
        self.calls.append({"method": method, "path": path, "params": params, "files": files})
        if not self._responses:
            return {"status": 200, "success": True, "result": None}
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------


def make_status_error(
    status: int,
    body: Any = None,
    url: str = "https://voe.sx/api/account/info",
) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", url)
    if body is None:
        response = httpx.Response(status, request=request)
    elif isinstance(body, (dict, list)):
        response = httpx.Response(status, json=body, request=request)
    else:
        response = httpx.Response(status, text=str(body), request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


def make_connect_error(url: str = "https://voe.sx/api/account/info") -> httpx.ConnectError:
    return httpx.ConnectError("connection refused", request=httpx.Request("GET", url))


def envelope(result: Any = None, status: int = 200, msg: str = "OK", **extra: Any) -> Dict[str, Any]:
    body = {
        "server_time": "2024-05-01 12:00:00",
        "msg": msg,
        "message": msg,
        "status": status,
        "success": status == 200,
        **extra,
    }
    if result is not None:
        body["result"] = result
    return body


def make_pipeline(
    responses: Optional[List[Any]] = None,
    clock: Optional[FakeClock] = None,
    max_attempts: int = 3,
    base_delay: float = 1.0,
):
    """Build (pipeline, transport, retry_sleeps) with a fake clock."""
    clock = clock or FakeClock()
    transport = StubTransport(responses)
    retry_sleeps = SleepRecorder()
    pipeline = RequestPipeline(
        transport=transport,
        limiter=SlidingWindowRateLimiter(clock=clock, sleep=clock.sleep),
        retry=RetryExecutor(max_attempts=max_attempts, base_delay=base_delay, sleep=retry_sleeps),
    )
    return pipeline, transport, retry_sleeps


def make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    clock: Optional[FakeClock] = None,
    api_key: str = "test-key-1234567890",
    **kwargs: Any,
) -> VoeClient:
    """VoeClient wired to an httpx MockTransport and a fake clock."""
    clock = clock or FakeClock()
    return VoeClient(
        api_key,
        http_transport=httpx.MockTransport(handler),
        clock=clock,
        sleep=clock.sleep,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Auto-use fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clear_voe_env(monkeypatch):
    """Keep a developer's VOE_* environment out of the tests."""
    for name in (
        "VOE_API_KEY",
        "VOE_BASE_URL",
        "VOE_TIMEOUT",
        "VOE_RETRY_ATTEMPTS",
        "VOE_RETRY_DELAY",
        "VOE_RATE_LIMIT_MAX_REQUESTS",
        "VOE_RATE_LIMIT_TIME_WINDOW",
        "VOE_RATE_LIMIT_RPS",
        "VOE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
