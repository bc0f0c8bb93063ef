"""
Retry and circuit breaking for search-provider calls.

``exponential_backoff`` wraps the raw HTTP request; ``CircuitBreaker``
wraps the whole search call inside one resolve request.
"""

import functools
import threading
import time
from datetime import datetime
from typing import Callable, Optional, Tuple, Type


class RetryError(Exception):
    """Every attempt failed; the last failure is the ``__cause__``."""


class CircuitOpenError(Exception):
    def __init__(self, retry_after: float):
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker is OPEN. Retry after {retry_after:.0f}s")


def exponential_backoff(
    max_retries: int,
    base_delay: float,
    exceptions: Tuple[Type[Exception], ...],
    on_retry: Optional[Callable] = None,
):
    """
    Retry on ``exceptions``, doubling the delay after each attempt.

    Args:
        max_retries: Retries after the first attempt
        base_delay: Seconds before the first retry
        exceptions: Exception types worth another attempt
        on_retry: Optional callback(attempt, exception, delay)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay
            for attempt in range(1, max_retries + 2):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt > max_retries:
                        raise RetryError(f"Failed after {attempt} attempts: {e}") from e
                    if on_retry:
                        on_retry(attempt, e, delay)
                    time.sleep(delay)
                    delay *= 2
        return wrapper
    return decorator


class CircuitBreaker:
    """
    Refuses calls for ``recovery_timeout`` seconds after
    ``failure_threshold`` consecutive failures, then lets one trial
    call through. Safe to share between request threads.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int,
        recovery_timeout: float,
        expected_exception=Exception,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

        self.failure_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.state = self.CLOSED
        self._lock = threading.Lock()

    def call(self, func: Callable, *args, **kwargs):
        """
        Raises:
            CircuitOpenError: If the circuit is OPEN
            Original exception: If ``func`` fails
        """
        with self._lock:
            if self.state == self.OPEN:
                remaining = self.recovery_timeout - self._elapsed()
                if remaining > 0:
                    raise CircuitOpenError(remaining)
                self.state = self.HALF_OPEN

        # Lock is released while the provider call runs
        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def _elapsed(self) -> float:
        return (datetime.now() - self.last_failure_time).total_seconds()

    def _on_success(self):
        with self._lock:
            self.failure_count = 0
            self.state = self.CLOSED

    def _on_failure(self):
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = datetime.now()
            # A failed trial call reopens immediately
            if self.state == self.HALF_OPEN or self.failure_count >= self.failure_threshold:
                self.state = self.OPEN


# Substrings of exception messages that point at a temporary provider problem
TRANSIENT_KEYWORDS = (
    "timeout",
    "timed out",
    "connection",
    "rate limit",
    "quota",
    "429",
    "500",
    "502",
    "503",
    "504",
)

# Request Timeout, Too Many Requests, and the 5xx gateway family
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def is_transient_error(exception: Exception) -> bool:
    error_str = str(exception).lower()
    return any(keyword in error_str for keyword in TRANSIENT_KEYWORDS)


def should_retry_http_status(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUS_CODES
