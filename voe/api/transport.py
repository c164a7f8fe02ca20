"""
HTTP Transport - Thin async httpx wrapper for the VOE API.

Attaches the API key as the ``key`` query parameter on every request,
returns decoded JSON bodies, and lets httpx errors propagate so the error
classifier can map them. Knows nothing about retries or rate limits.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx

from voe.api.exceptions import ERROR_MESSAGES, ErrorKind, VoeError
from voe.core.config import DEFAULT_TIMEOUT, VOE_API_BASE_URL
from voe.core.logger import get_logger

logger = get_logger("voe.transport")


class HttpTransport:
    """Async VOE HTTP transport (one pooled httpx client per instance)."""

    def __init__(
        self,
        api_key: str,
        base_url: str = VOE_API_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or VOE_API_BASE_URL).rstrip("/")
        self.timeout_seconds = float(timeout_seconds)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_open(self) -> bool:
        return self._client is not None and not self._client.is_closed

    async def initialize(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url + "/",
                timeout=self.timeout_seconds,
                params={"key": self.api_key},
                transport=self._transport,
                follow_redirects=True,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _url(self, path: str) -> str:
        # Absolute URLs (upload servers) bypass base_url but still carry the key.
        if path.startswith(("http://", "https://")):
            return path
        return path.lstrip("/")

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform one HTTP call and return the decoded JSON body.

        Raises:
            httpx.HTTPStatusError: non-2xx response.
            httpx.RequestError: no response was received.
            VoeError: RESPONSE when a 2xx body is not valid JSON.
        """
        if self._client is None:
            await self.initialize()

        resp = await self._client.request(
            method.upper(),
            self._url(path),
            params=dict(params) if params else None,
            files=files,
        )
        resp.raise_for_status()
        try:
            return resp.json()
        except ValueError:
            logger.warning(
                "VOE returned a non-JSON body",
                path=path,
                status_code=resp.status_code,
                body=resp.text[:200],
            )
            raise VoeError(
                ErrorKind.RESPONSE,
                ERROR_MESSAGES["INVALID_RESPONSE"],
                status=resp.status_code,
                data=resp.text,
            ) from None
