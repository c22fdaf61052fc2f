"""
Cross-cutting pieces: errors, logging, credentials.
"""

from .exceptions import (
    ErrorCode,
    TripDBException,
    NotFoundError,
    StoreConfigurationError,
    VersionConflictError,
    StoreBackendError,
    InvalidStatusTransitionError,
    RefundExceedsAmountError,
)
from .logging import JsonFormatter, configure_logging

__all__ = [
    "ErrorCode",
    "TripDBException",
    "NotFoundError",
    "StoreConfigurationError",
    "VersionConflictError",
    "StoreBackendError",
    "InvalidStatusTransitionError",
    "RefundExceedsAmountError",
    "JsonFormatter",
    "configure_logging",
]
