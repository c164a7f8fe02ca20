"""
VOE API Client - Async client for the voe.sx file-hosting API.

Every method builds an ``Operation`` from the endpoint catalog and runs it
through the request pipeline (validation, sliding-window rate limit,
classified errors, linear-backoff retries). Successful calls return the
``result`` field of the response envelope.

Usage::

    async with VoeClient("my-api-key") as voe:
        info = await voe.get_account_info()
        files = await voe.get_file_list(page=1, per_page=50)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Awaitable, BinaryIO, Callable, Dict, List, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from voe.api.exceptions import ERROR_MESSAGES, ErrorKind, VoeError
from voe.api.pipeline import Operation, RequestPipeline
from voe.api.rate_limiter import SlidingWindowRateLimiter
from voe.api.retry import RetryExecutor
from voe.api.transport import HttpTransport
from voe.api.validation import FILE_NAME, validate
from voe.core.config import ClientConfig, load_client_config
from voe.core.logger import get_logger

logger = get_logger("voe.client")

FileCodes = Union[str, List[str]]
Blob = Union[bytes, bytearray, str, "os.PathLike[str]", BinaryIO]


class ApiEnvelope(BaseModel):
    """Uniform wrapper the VOE API puts around every payload."""

    model_config = ConfigDict(extra="allow")

    server_time: Optional[str] = None
    msg: Optional[str] = None
    message: Optional[str] = None
    status: Optional[int] = None
    success: Optional[bool] = None
    result: Any = None


def _as_list(codes: FileCodes) -> Any:
    if isinstance(codes, str):
        return [codes]
    if isinstance(codes, (list, tuple)):
        return list(codes)
    return codes  # let validation reject it


def _read_blob(file: Blob) -> bytes:
    if isinstance(file, (bytes, bytearray)):
        return bytes(file)
    if isinstance(file, (str, os.PathLike)):
        return Path(file).read_bytes()
    if hasattr(file, "read"):
        data = file.read()
        return data.encode() if isinstance(data, str) else bytes(data)
    raise VoeError(
        ErrorKind.VALIDATION,
        ERROR_MESSAGES["VALIDATION_FAILED"],
        status=400,
        data=[{"field": "file", "message": "Expected bytes, a path, or a binary file", "type": "blob_type"}],
        local=True,
    )


class VoeClient:
    """Async VOE API client. One instance owns one HTTP pool and one rate limiter."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        config: Optional[ClientConfig] = None,
        transport: Any = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        if config is None:
            raw: Dict[str, Any] = {
                "api_key": api_key if api_key is not None else "",
                "base_url": base_url,
                "timeout": timeout,
                "retry_attempts": retry_attempts,
                "retry_delay": retry_delay,
            }
            config = validate(ClientConfig, {k: v for k, v in raw.items() if v is not None})
        self.config = config

        timing: Dict[str, Any] = {}
        if clock is not None:
            timing["clock"] = clock
        if sleep is not None:
            timing["sleep"] = sleep

        self.transport = transport or HttpTransport(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout_seconds=config.timeout,
            transport=http_transport,
        )
        self.rate_limiter = SlidingWindowRateLimiter.from_config(config.rate_limit, **timing)
        retry_kwargs = {"sleep": sleep} if sleep is not None else {}
        self._pipeline = RequestPipeline(
            transport=self.transport,
            limiter=self.rate_limiter,
            retry=RetryExecutor(
                max_attempts=config.retry_attempts,
                base_delay=config.retry_delay,
                **retry_kwargs,
            ),
        )

    @classmethod
    def from_env(cls, config_path: Optional[str] = None, **kwargs: Any) -> VoeClient:
        """Build a client from YAML/.env/environment configuration."""
        return cls(config=load_client_config(config_path), **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        await self.transport.initialize()

    async def close(self) -> None:
        await self.transport.close()
        self.rate_limiter.reset()

    async def __aenter__(self) -> VoeClient:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _unwrap(self, op: Operation, payload: Any) -> Any:
        if not isinstance(payload, dict):
            raise VoeError(ErrorKind.RESPONSE, ERROR_MESSAGES["INVALID_RESPONSE"], data=payload)
        try:
            envelope = ApiEnvelope.model_validate(payload)
        except ValidationError as e:
            raise VoeError(ErrorKind.RESPONSE, ERROR_MESSAGES["INVALID_RESPONSE"], data=payload) from e

        if envelope.status == 404:
            fallback = "FOLDER_NOT_FOUND" if op.name.startswith("folder_") else "FILE_NOT_FOUND"
            message = envelope.msg or envelope.message or ERROR_MESSAGES[fallback]
            raise VoeError(ErrorKind.NOT_FOUND, message, status=404, data=payload)
        if envelope.success is False:
            logger.debug(
                "VOE envelope reported failure",
                operation=op.name,
                status=envelope.status,
                msg=envelope.msg,
            )
        return envelope.result

    async def _call(
        self,
        name: str,
        params: Optional[Dict[str, Any]] = None,
        default: Any = None,
    ) -> Any:
        op = Operation.from_catalog(name, params)
        payload = await self._pipeline.execute(op)
        result = self._unwrap(op, payload)
        return default if result is None else result

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    async def get_account_info(self) -> Dict[str, Any]:
        """Email, balance, storage used/left, premium and partner expiry."""
        return await self._call("account_info", default={})

    async def get_account_stats(self) -> Dict[str, Dict[str, Any]]:
        """Daily statistics keyed by date."""
        return await self._call("account_stats", default={})

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def get_upload_server(self) -> Optional[str]:
        return await self._call("upload_server")

    async def upload_file(self, file: Blob, filename: str) -> Dict[str, Any]:
        """
        Upload a file through the server returned by ``get_upload_server``.

        ``file`` may be raw bytes, a filesystem path, or a binary file
        object. The body is read once so retries resend the same bytes.
        Returns the upload server's response as-is (it is not enveloped).
        """
        name = validate(FILE_NAME, filename)
        content = _read_blob(file)

        server_url = await self.get_upload_server()
        if not isinstance(server_url, str) or not server_url:
            raise VoeError(ErrorKind.RESPONSE, ERROR_MESSAGES["INVALID_RESPONSE"], data=server_url)

        op = Operation(
            name="upload_file",
            path=server_url,
            method="POST",
            files={"file": (name, content)},
        )
        logger.info("Uploading file", filename=name, size_bytes=len(content))
        return await self._pipeline.execute(op)

    async def add_remote_upload(self, url: str, folder_id: Optional[int] = None) -> Dict[str, Any]:
        """Queue a remote URL upload; returns ``file_code`` and ``queueID``."""
        return await self._call("upload_url", {"url": url, "folder_id": folder_id}, default={})

    async def get_remote_upload_list(self) -> List[Dict[str, Any]]:
        return await self._call("upload_url_list", default=[])

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def clone_file(self, file_code: str, folder_id: Optional[int] = None) -> Dict[str, Any]:
        return await self._call("file_clone", {"file_code": file_code, "fld_id": folder_id}, default={})

    async def get_file_info(self, file_codes: FileCodes) -> List[Dict[str, Any]]:
        return await self._call("file_info", {"file_code": _as_list(file_codes)}, default=[])

    async def get_file_list(self, **params: Any) -> List[Dict[str, Any]]:
        """List files. Accepts ``page``, ``per_page``, ``fld_id``, ``created``, ``name``, ``preview``."""
        return await self._call("file_list", params, default=[])

    async def rename_file(self, file_code: str, title: str) -> None:
        await self._call("file_rename", {"file_code": file_code, "title": title})

    async def move_file_to_folder(self, file_code: str, folder_id: int) -> None:
        await self._call("file_set_folder", {"file_code": file_code, "fld_id": folder_id})

    async def delete_file(self, file_codes: FileCodes) -> None:
        await self._call("file_delete", {"del_code": _as_list(file_codes)})

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    async def get_folder_list(self, folder_id: Optional[int] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Sub-folders and files of ``folder_id`` (root when omitted)."""
        return await self._call("folder_list", {"fld_id": folder_id}, default={"folders": [], "files": []})

    async def create_folder(self, name: str, parent_id: Optional[int] = None) -> int:
        """Create a folder and return its ``fld_id``."""
        result = await self._call("folder_create", {"name": name, "parent_id": parent_id}, default={})
        fld_id = result.get("fld_id") if isinstance(result, dict) else None
        if fld_id is None:
            raise VoeError(ErrorKind.RESPONSE, ERROR_MESSAGES["INVALID_RESPONSE"], data=result)
        return int(fld_id)

    async def rename_folder(self, folder_id: int, name: str) -> None:
        await self._call("folder_rename", {"fld_id": folder_id, "name": name})

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def get_deleted_files(self, **params: Any) -> List[Dict[str, Any]]:
        """Accepts ``page``, ``per_page``, ``last``, ``pending``."""
        return await self._call("files_deleted", params, default=[])

    async def get_dmca_list(self, **params: Any) -> List[Dict[str, Any]]:
        """Accepts ``page``, ``per_page``, ``last``, ``pending``."""
        return await self._call("dmca_list", params, default=[])

    # ------------------------------------------------------------------
    # Settings / reseller
    # ------------------------------------------------------------------

    async def get_current_domain(self) -> Optional[str]:
        """Current adblock domain."""
        return await self._call("settings_domain")

    async def generate_premium_keys(self, days: int, amount: int) -> List[Dict[str, Any]]:
        return await self._call("premium_generate", {"days": days, "amount": amount}, default=[])
