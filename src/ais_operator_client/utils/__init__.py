"""Utility functions for the AIStore operator client."""

from .errors import (
    AlreadyExistsError,
    AlreadyOwnedError,
    ConflictError,
    DeleteError,
    NotFoundError,
    StoreError,
    StoreUnavailableError,
    WaitCancelledError,
    WaitTimeoutError,
    translate_api_exception,
)
from .ownership import set_controller_reference
from .rate_limit import rate_limit_k8s
from .waiter import ReadinessWaiter, SystemClock, WaitResult

__all__ = [
    "StoreError",
    "NotFoundError",
    "AlreadyExistsError",
    "ConflictError",
    "StoreUnavailableError",
    "DeleteError",
    "AlreadyOwnedError",
    "WaitTimeoutError",
    "WaitCancelledError",
    "translate_api_exception",
    "set_controller_reference",
    "rate_limit_k8s",
    "ReadinessWaiter",
    "SystemClock",
    "WaitResult",
]
