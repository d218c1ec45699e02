"""Core module - logging, exceptions, and application infrastructure."""

from vira.core.logging import setup_logging, get_logger, query_fields
from vira.core.exceptions import (
    ViraError,
    InputValidationError,
    AIProcessingError,
    UpstreamTimeout,
    UpstreamMalformed,
    RepositoryError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "query_fields",
    "ViraError",
    "InputValidationError",
    "AIProcessingError",
    "UpstreamTimeout",
    "UpstreamMalformed",
    "RepositoryError",
]
