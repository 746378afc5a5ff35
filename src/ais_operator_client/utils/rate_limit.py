"""Rate limiting utilities for API calls."""

from __future__ import annotations

import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import config

_F = TypeVar("_F", bound=Callable[..., Any])

# Track last call time
_k8s_last_call_time: float = 0.0
_k8s_lock = threading.Lock()


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Enforces a minimum interval between consecutive calls so the operator
    does not overwhelm the Kubernetes API server.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        rate = config.K8S_RATE_LIMIT_PER_SECOND
        if rate > 0:
            with _k8s_lock:
                min_interval = 1.0 / rate
                time_since_last_call = time.monotonic() - _k8s_last_call_time
                if time_since_last_call < min_interval:
                    time.sleep(min_interval - time_since_last_call)
                _k8s_last_call_time = time.monotonic()
        return func(*args, **kwargs)

    return wrapper  # type: ignore
