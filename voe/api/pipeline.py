"""
Request Pipeline - validate, rate-limit, call, classify, retry.

Per operation::

    validate params (fail fast, never retried)
      -> retry executor
           -> each attempt: rate limiter slot -> transport call
           -> httpx failure -> ErrorClassifier -> VoeError
           -> retry policy decides continue / propagate

Stateless between calls; the only shared state is the rate limiter window
owned by the client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Type

import httpx

from voe.api.endpoints import ENDPOINTS
from voe.api.rate_limiter import SlidingWindowRateLimiter
from voe.api.retry import RetryExecutor
from voe.api.validation import OperationParams, validate
from voe.core.error_handler import ErrorClassifier
from voe.core.logger import get_logger, log_performance

logger = get_logger("voe.pipeline")


@dataclass(frozen=True)
class Operation:
    """One logical API call as seen by the pipeline."""

    name: str
    path: str
    method: str = "GET"
    params: Mapping[str, Any] = field(default_factory=dict)
    schema: Optional[Type[OperationParams]] = None
    files: Optional[Dict[str, Any]] = None

    @classmethod
    def from_catalog(
        cls,
        name: str,
        params: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> Operation:
        endpoint = ENDPOINTS[name]
        return cls(
            name=name,
            path=kwargs.pop("path", endpoint.path),
            method=kwargs.pop("method", endpoint.method),
            params=dict(params or {}),
            schema=endpoint.schema,
            **kwargs,
        )


class RequestPipeline:
    """Composes validation, rate limiting, classification and retries."""

    def __init__(
        self,
        transport: Any,
        limiter: SlidingWindowRateLimiter,
        retry: RetryExecutor,
        classifier: Optional[ErrorClassifier] = None,
    ):
        self.transport = transport
        self.limiter = limiter
        self.retry = retry
        self.classifier = classifier or ErrorClassifier()

    def prepare(self, op: Operation) -> Dict[str, Any]:
        """Return the query parameters to send, validating when a schema is set."""
        if op.schema is None:
            return {k: v for k, v in op.params.items() if v is not None}
        # Unset optionals are dropped before validation.
        raw = {k: v for k, v in op.params.items() if v is not None}
        return validate(op.schema, raw).to_params()

    async def execute(self, op: Operation) -> Any:
        params = self.prepare(op)

        async def _attempt() -> Any:
            await self.limiter.acquire()
            try:
                with log_performance(logger, "VOE request", operation=op.name, method=op.method):
                    return await self.transport.request(
                        op.method,
                        op.path,
                        params=params,
                        files=op.files,
                    )
            except httpx.HTTPError as e:
                raise self.classifier.classify(e) from e

        return await self.retry.run(_attempt, operation=op.name)
