"""
Retry utilities using tenacity library.
Export cycles never retry internally; these decorators are for callers
that drive single-shot exports with their own retry policy.
"""
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
import logging
from typing import Type, Tuple

from graphite_sink.common.exceptions import GraphiteConnectionError

logger = logging.getLogger(__name__)


def retry_on_connection_error(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    multiplier: float = 2,
    exception_types: Tuple[Type[Exception], ...] = (GraphiteConnectionError,)
):
    """
    Retry decorator for failures to reach the Graphite server.

    Only connection failures are retried by default: a cycle that failed
    while writing may already have delivered part of its lines.

    Args:
        max_attempts: Maximum number of attempts (including the first)
        min_wait: Minimum wait time in seconds
        max_wait: Maximum wait time in seconds
        multiplier: Multiplier for exponential backoff
        exception_types: Exception types that trigger a retry

    Returns:
        Retry decorator

    Example:
        @retry_on_connection_error(max_attempts=5)
        def push():
            return run_once(config)
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exception_types),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
