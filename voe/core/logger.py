"""
Structured Logging - structlog on top of stdlib logging.

The library only ever asks for loggers; it never configures handlers on
import. Applications (and the ``voe`` CLI) call ``setup_logging()`` once.

API keys travel as a ``key`` query parameter on every VOE request, so the
masking processor scrubs them from URLs as well as from named fields.
"""

from __future__ import annotations

import logging
import re
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

import structlog


# ---------------------------------------------------------------------------
# Sensitive Data Filter
# ---------------------------------------------------------------------------

_KEY_QUERY_RE = re.compile(r"([?&](?:key|api_key)=)[^&\s#]+", re.IGNORECASE)
_SENSITIVE_KEYS = ("api_key", "key", "secret", "password", "token")


def _scrub_string(s: str) -> str:
    return _KEY_QUERY_RE.sub(r"\1<redacted>", s)


def _scrub_value(v: Any) -> Any:
    if isinstance(v, str):
        return _scrub_string(v)
    if isinstance(v, dict):
        return {k: _scrub_value(val) for k, val in v.items()}
    if isinstance(v, (list, tuple)):
        t = [_scrub_value(x) for x in v]
        return tuple(t) if isinstance(v, tuple) else t
    return v


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    if lowered == "event":
        return False
    return any(s in lowered for s in _SENSITIVE_KEYS)


def _mask_sensitive(_, __, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask sensitive data in log output (API keys, passwords, etc.)."""
    for key in list(event_dict.keys()):
        if _is_sensitive(key):
            value = str(event_dict[key])
            if len(value) > 8:
                event_dict[key] = value[:4] + "****" + value[-4:]
            else:
                event_dict[key] = "****"
        else:
            event_dict[key] = _scrub_value(event_dict[key])
    return event_dict


# ---------------------------------------------------------------------------
# Performance Timer
# ---------------------------------------------------------------------------

class PerformanceTimer:
    """Context manager for measuring and logging operation duration."""

    def __init__(self, logger: Any, operation: str, /, slow_ms: float = 1000.0, **kwargs):
        self.logger = logger
        self.operation = operation
        self.slow_ms = slow_ms
        self.kwargs = kwargs
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        if exc_type:
            self.logger.debug(
                f"{self.operation} failed",
                duration_ms=round(self.elapsed_ms, 2),
                error=str(exc_val),
                **self.kwargs
            )
        else:
            level = "warning" if self.elapsed_ms > self.slow_ms else "debug"
            getattr(self.logger, level)(
                f"{self.operation} completed",
                duration_ms=round(self.elapsed_ms, 2),
                **self.kwargs
            )
        return False


# ---------------------------------------------------------------------------
# Logger Setup
# ---------------------------------------------------------------------------

def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    json_output: bool = False,
) -> None:
    """
    Configure the structured logging system.

    Sets up:
    - Console output with colors (or JSON)
    - File output with rotation when ``log_dir`` is given
    - Error-level separate file
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        main_handler = RotatingFileHandler(
            log_path / "voe_client.log", encoding="utf-8",
            maxBytes=10 * 1024 * 1024, backupCount=3,
        )
        main_handler.setLevel(level)
        handlers.append(main_handler)

        error_handler = RotatingFileHandler(
            log_path / "errors.log", encoding="utf-8",
            maxBytes=5 * 1024 * 1024, backupCount=3,
        )
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Close and remove existing handlers to avoid duplicates and FD leaks
    for h in root_logger.handlers[:]:
        h.close()
        root_logger.removeHandler(h)
    for h in handlers:
        root_logger.addHandler(h)

    # httpx logs full request URLs at INFO, and every VOE URL carries the key.
    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _mask_sensitive,
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            pad_event=40,
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    for handler in root_logger.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = "voe") -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance with the given name."""
    return structlog.get_logger(name)


def log_performance(logger: Any, operation: str, /, **kwargs) -> PerformanceTimer:
    """Create a performance timing context manager."""
    return PerformanceTimer(logger, operation, **kwargs)
