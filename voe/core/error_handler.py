"""
Error Classifier - Maps transport outcomes onto the VoeError taxonomy.

Pure classification: no logging side effects, no re-issuing of requests.
Whether a classified error is retried is decided later by the retry
executor from ``VoeError.retryable``.

Mapping:
- no response (connect error, timeout, protocol error) -> NETWORK
- 401 -> AUTHENTICATION
- 429 -> RATE_LIMIT (server-reported, retryable)
- 5xx -> SERVER
- any other non-2xx -> RESPONSE, carrying status and raw body
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from voe.api.exceptions import ERROR_MESSAGES, ErrorKind, VoeError


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class ErrorClassifier:
    """
    Centralized error classification.

    Usage::

        classifier = ErrorClassifier()
        try:
            resp = await http.get(...)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise classifier.classify(e) from e
    """

    def classify_status(self, status: int, body: Any = None, message: Optional[str] = None) -> VoeError:
        """Classify an HTTP status that made it back from the server."""
        if status == 401:
            return VoeError(ErrorKind.AUTHENTICATION, ERROR_MESSAGES["UNAUTHORIZED"], status=status)
        if status == 429:
            return VoeError(ErrorKind.RATE_LIMIT, ERROR_MESSAGES["RATE_LIMIT_EXCEEDED"], status=status)
        if status >= 500:
            return VoeError(ErrorKind.SERVER, ERROR_MESSAGES["SERVER_ERROR"], status=status, data=body)
        return VoeError(
            ErrorKind.RESPONSE,
            message or ERROR_MESSAGES["INVALID_RESPONSE"],
            status=status,
            data=body,
        )

    def classify(self, error: BaseException) -> VoeError:
        """Classify any exception raised while performing a request."""
        if isinstance(error, VoeError):
            return error

        if isinstance(error, httpx.HTTPStatusError):
            response = error.response
            return self.classify_status(
                response.status_code,
                _response_body(response),
                message=f"Request failed with status code {response.status_code}",
            )

        # No response at all: connect/read timeouts, DNS, refused, protocol errors
        if isinstance(error, httpx.RequestError):
            return VoeError(ErrorKind.NETWORK, ERROR_MESSAGES["NETWORK_ERROR"], data=str(error) or None)

        return VoeError(ErrorKind.RESPONSE, ERROR_MESSAGES["INVALID_RESPONSE"], data=repr(error))
