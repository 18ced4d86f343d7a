"""
Retry utilities for external API calls.

Climate lookups hit public services (postcodes.io, Nominatim, Open-Meteo,
Open-Elevation) that throttle and time out. Each call is retried at most once
by default so a failing source falls through to the next one quickly.

Usage:
    from heatloss.utils.retry import retry_with_backoff, RetryConfig

    @retry_with_backoff(max_retries=1)
    def fetch_data():
        return requests.get(url, timeout=10)

    with RetryableRequest(RetryConfig(base_delay=0.5)) as http:
        response = http.get(url)
"""

import time
import random
import functools
from dataclasses import dataclass, field, replace
from typing import Callable, TypeVar, Optional, Tuple, Type, Any
import logging

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 1
    base_delay: float = 0.5  # seconds
    max_delay: float = 5.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (
            ConnectionError,
            TimeoutError,
            OSError,
        )
    )
    retryable_status_codes: Tuple[int, ...] = (429, 500, 502, 503, 504)


DEFAULT_RETRY_CONFIG = RetryConfig()


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay for exponential backoff.

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = min(
        config.base_delay * (config.exponential_base ** attempt),
        config.max_delay,
    )

    if config.jitter:
        # Up to 25% random jitter
        delay = delay * (1 + random.uniform(0, 0.25))

    return delay


def should_retry_exception(exc: Exception, config: RetryConfig) -> bool:
    """Check if exception is retryable."""
    response = getattr(exc, "response", None)
    if response is not None and hasattr(response, "status_code"):
        return response.status_code in config.retryable_status_codes

    return isinstance(exc, config.retryable_exceptions)


def retry_with_backoff(
    func: Optional[Callable[..., T]] = None,
    *,
    config: Optional[RetryConfig] = None,
    max_retries: Optional[int] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
) -> Callable[..., T]:
    """
    Decorator for retrying with exponential backoff.

    Can be used bare or with arguments:

        @retry_with_backoff
        def my_func():
            ...

        @retry_with_backoff(max_retries=2)
        def my_other_func():
            ...

    Args:
        func: Function to retry
        config: Full retry configuration
        max_retries: Override for max retries (convenience)
        on_retry: Callback called on each retry (exc, attempt)

    Returns:
        Decorated function
    """
    config = config or DEFAULT_RETRY_CONFIG
    if max_retries is not None:
        config = replace(config, max_retries=max_retries)

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(config.max_retries + 1):
                try:
                    return fn(*args, **kwargs)
                except Exception as exc:
                    if not should_retry_exception(exc, config):
                        logger.debug(f"Non-retryable exception: {type(exc).__name__}")
                        raise

                    if attempt >= config.max_retries:
                        logger.debug(
                            f"All {config.max_retries} retries failed for {fn.__name__}"
                        )
                        raise

                    delay = calculate_delay(attempt, config)
                    logger.warning(
                        f"Retry {attempt + 1}/{config.max_retries} for {fn.__name__} "
                        f"after {delay:.1f}s (error: {exc})"
                    )
                    if on_retry:
                        on_retry(exc, attempt)
                    time.sleep(delay)

            raise RuntimeError("Retry logic error")

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


class RetryableRequest:
    """
    Context manager for retryable HTTP requests.

    Usage:
        with RetryableRequest(config, timeout=10) as http:
            response = http.get(url)

    Or without a session:
        response = RetryableRequest().get(url)
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        timeout: float = 10.0,
        headers: Optional[dict] = None,
    ):
        self.config = config or DEFAULT_RETRY_CONFIG
        self.timeout = timeout
        self.headers = headers or {}
        self._session: Optional[requests.Session] = None

    def __enter__(self):
        self._session = requests.Session()
        self._session.headers.update(self.headers)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._session:
            self._session.close()
            self._session = None
        return False

    def _make_request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Make HTTP request with retry logic."""
        session = self._session or requests
        kwargs.setdefault("timeout", self.timeout)
        if self._session is None and self.headers:
            kwargs.setdefault("headers", self.headers)

        @retry_with_backoff(config=self.config)
        def _request() -> requests.Response:
            response = getattr(session, method)(url, **kwargs)
            if response.status_code in self.config.retryable_status_codes:
                response.raise_for_status()
            return response

        return _request()

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        """GET request with retry."""
        return self._make_request("get", url, **kwargs)
