"""Error taxonomy for object store operations."""

from __future__ import annotations

import json

from kubernetes.client.exceptions import ApiException

from ..constants import REASON_ALREADY_EXISTS


class StoreError(Exception):
    """Base class for errors reported by the object store."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotFoundError(StoreError):
    """The target object does not exist."""


class AlreadyExistsError(StoreError):
    """An object with the same key already exists."""


class ConflictError(StoreError):
    """The submitted resourceVersion is stale."""


class StoreUnavailableError(StoreError):
    """Transport, permission or server-side failure."""


class DeleteError(StoreError):
    """A delete failed for a reason other than absence."""

    def __init__(self, kind: str, name: str, namespace: str, cause: Exception) -> None:
        super().__init__(
            f"failed to delete {kind}: {name!r} (namespace {namespace!r}); err {cause}",
            status=getattr(cause, "status", None),
        )
        self.kind = kind
        self.name = name
        self.namespace = namespace


class AlreadyOwnedError(Exception):
    """The object is already controlled by a different owner."""


class WaitTimeoutError(TimeoutError):
    """The readiness deadline elapsed before the target became ready."""


class WaitCancelledError(Exception):
    """The readiness wait was cancelled by the caller."""


def _api_reason(e: ApiException) -> str | None:
    """Extract the Status reason from an ApiException body, if any."""
    if not e.body:
        return e.reason
    try:
        body = json.loads(e.body)
    except (TypeError, ValueError):
        return e.reason
    if isinstance(body, dict) and body.get("reason"):
        return body["reason"]
    return e.reason


def translate_api_exception(e: ApiException) -> StoreError:
    """Map a Kubernetes ApiException onto the store error taxonomy.

    Args:
        e: Exception raised by the kubernetes client

    Returns:
        Matching StoreError subclass instance
    """
    status = e.status
    message = f"({status}) {_api_reason(e) or 'unknown'}"
    if status == 404:
        return NotFoundError(message, status=status)
    if status == 409:
        if _api_reason(e) == REASON_ALREADY_EXISTS:
            return AlreadyExistsError(message, status=status)
        return ConflictError(message, status=status)
    return StoreUnavailableError(message, status=status)
