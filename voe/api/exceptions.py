"""Typed error for VOE API operations.

Every failure the client surfaces is a ``VoeError`` tagged with an
``ErrorKind``, so callers can branch on ``err.kind`` and tell transient
from permanent failures without an isinstance ladder.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, Optional


ERROR_MESSAGES: Dict[str, str] = {
    "MISSING_API_KEY": "API key is required",
    "RATE_LIMIT_EXCEEDED": "Rate limit exceeded",
    "NETWORK_ERROR": "Network error occurred",
    "INVALID_RESPONSE": "Invalid response from server",
    "FILE_NOT_FOUND": "File not found",
    "FOLDER_NOT_FOUND": "Folder not found",
    "UNAUTHORIZED": "Unauthorized request",
    "SERVER_ERROR": "Server error occurred",
    "VALIDATION_FAILED": "Validation failed",
}


class ErrorKind(enum.Enum):
    """Failure categories reported by the client."""

    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    RESPONSE = "response"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    SERVER = "server"


# Wire-style codes used in log and CLI output.
_KIND_CODES: Dict[ErrorKind, str] = {
    ErrorKind.AUTHENTICATION: "AUTHENTICATION_ERROR",
    ErrorKind.RATE_LIMIT: "RATE_LIMIT_ERROR",
    ErrorKind.NETWORK: "NETWORK_ERROR",
    ErrorKind.RESPONSE: "RESPONSE_ERROR",
    ErrorKind.NOT_FOUND: "NOT_FOUND_ERROR",
    ErrorKind.VALIDATION: "VALIDATION_ERROR",
    ErrorKind.SERVER: "SERVER_ERROR",
}

# Never retried.
_PERMANENT_KINDS = frozenset({ErrorKind.AUTHENTICATION, ErrorKind.VALIDATION})


class VoeError(Exception):
    """A classified VOE client failure.

    Attributes:
        kind: failure category.
        message: human-readable description.
        status: HTTP status when one was received (or implied, e.g. 400 for
            validation failures).
        data: raw response payload or field-level validation violations.
        local: True when raised by this process (e.g. the rate limiter's
            hard cap) rather than reported by the server.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status: Optional[int] = None,
        data: Any = None,
        local: bool = False,
    ):
        super().__init__(message)
        self._kind = kind
        self._message = message
        self._status = status
        self._data = data
        self._local = local

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def status(self) -> Optional[int]:
        return self._status

    @property
    def data(self) -> Any:
        return self._data

    @property
    def local(self) -> bool:
        return self._local

    @property
    def code(self) -> str:
        return _KIND_CODES[self.kind]

    @property
    def retryable(self) -> bool:
        """Whether another attempt could plausibly succeed.

        A local rate-limit rejection is permanent for the current attempt:
        the limiter would reject an immediate retry the same way.
        """
        if self.kind in _PERMANENT_KINDS:
            return False
        if self.kind is ErrorKind.RATE_LIMIT and self.local:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "status": self.status,
            "data": self.data,
            "local": self.local,
        }

    def __repr__(self) -> str:
        return (
            f"VoeError(kind={self.kind.value}, message={self.message!r}, "
            f"status={self.status}, local={self.local})"
        )
