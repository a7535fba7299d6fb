"""Utility functions package.

Exposed functions:
    format_duration: Formats time durations into human-readable strings.
    retry_async: Bounded exponential-backoff retry for async operations.
"""

from .helpers import format_duration
from .retry import RetryExhaustedError, retry_async

__all__ = ["format_duration", "retry_async", "RetryExhaustedError"]
