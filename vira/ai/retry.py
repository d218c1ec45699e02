"""Retry policy for AI API calls."""

import logging

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)
from openai import RateLimitError, APITimeoutError, APIConnectionError

from vira.core.logging import get_logger

logger = get_logger("ai.retry")

RETRYABLE_ERRORS = (
    RateLimitError,
    APITimeoutError,
    APIConnectionError,
)


def build_llm_retry(attempts: int, wait_min: float, wait_max: float):
    """Build a retry decorator for LLM calls.

    Args:
        attempts: Total attempts including the first call
        wait_min: Minimum exponential backoff in seconds
        wait_max: Maximum exponential backoff in seconds
    """
    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=wait_min, max=wait_max),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

