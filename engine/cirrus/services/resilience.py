"""Resilience utilities — opt-in caller retry and error tracking.

Adapters and credential providers never retry on their own. Callers that
want retries (the CLI's read-only commands) wrap their call in ``retry``.
"""

from __future__ import annotations

import logging
import random
import time
from functools import wraps
from threading import Lock
from typing import Any, Callable

from azure.core.exceptions import (
    HttpResponseError,
    ServiceRequestError,
    ServiceResponseError,
)

logger = logging.getLogger(__name__)

TRANSIENT_EXCEPTIONS: tuple[type[Exception], ...] = (
    ServiceRequestError,
    ServiceResponseError,
    HttpResponseError,
)

RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})


def is_transient(error: Exception) -> bool:
    """True for connection failures and throttling / server-side HTTP statuses."""
    if isinstance(error, (ServiceRequestError, ServiceResponseError)):
        return True
    if isinstance(error, HttpResponseError):
        return error.status_code in RETRYABLE_STATUS
    return False


# ---------------------------------------------------------------------------
# Retry with exponential backoff
# ---------------------------------------------------------------------------


def retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    should_retry: Callable[[Exception], bool] = is_transient,
) -> Callable:
    """Decorator: retry a function with exponential backoff.

    Args:
        max_attempts: Total attempts (including first try).
        base_delay: Initial delay in seconds.
        max_delay: Maximum delay cap in seconds.
        backoff_factor: Multiplier applied to delay each retry.
        jitter: Add random jitter (±25%) to the delay.
        should_retry: Predicate deciding whether a raised error is retried.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = base_delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if attempt == max_attempts or not should_retry(e):
                        raise

                    wait = delay * (0.75 + random.random() * 0.5) if jitter else delay
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        func.__name__, attempt, max_attempts, type(e).__name__, wait,
                    )
                    time.sleep(wait)
                    delay = min(delay * backoff_factor, max_delay)
            raise AssertionError("unreachable")
        return wrapper
    return decorator


# ---------------------------------------------------------------------------
# Error Tracker
# ---------------------------------------------------------------------------


class ErrorTracker:
    """In-memory ring buffer of recent failures, newest first on read.

    Only the error type, message and caller-supplied context are kept;
    messages must already be free of secret values.
    """

    def __init__(self, max_entries: int = 200):
        self._entries: list[dict[str, Any]] = []
        self._max = max_entries
        self._lock = Lock()

    def record(self, source: str, error: Exception, **context: Any) -> None:
        entry = {
            "timestamp": time.time(),
            "source": source,
            "error_type": type(error).__name__,
            "message": str(error),
            "context": context,
        }
        with self._lock:
            self._entries.append(entry)
            del self._entries[:-self._max]

    def get_errors(self, source: str | None = None, limit: int = 50) -> list[dict[str, Any]]:
        with self._lock:
            entries = list(reversed(self._entries))
        if source:
            entries = [e for e in entries if e["source"] == source]
        return entries[:limit]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def count(self) -> int:
        return len(self._entries)


error_tracker = ErrorTracker()
