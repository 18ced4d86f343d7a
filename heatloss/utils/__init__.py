"""Utility modules."""

from .logging_config import (
    get_logger,
    setup_logging,
    ensure_logging,
    HeatlossFormatter,
    JsonLinesFormatter,
)
from .retry import (
    retry_with_backoff,
    RetryConfig,
    RetryableRequest,
    DEFAULT_RETRY_CONFIG,
)
from .validation import (
    to_float,
    to_optional_float,
    to_non_negative,
    validate_coordinates,
    validate_postcode,
    ValidationError,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "ensure_logging",
    "HeatlossFormatter",
    "JsonLinesFormatter",
    # Retry
    "retry_with_backoff",
    "RetryConfig",
    "RetryableRequest",
    "DEFAULT_RETRY_CONFIG",
    # Validation
    "to_float",
    "to_optional_float",
    "to_non_negative",
    "validate_coordinates",
    "validate_postcode",
    "ValidationError",
]
