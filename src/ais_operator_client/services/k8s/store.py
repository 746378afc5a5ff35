"""Kubernetes implementation of the object store."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from ... import config, metrics
from ...constants import FIELD_MANAGER
from ...models import LabelSelector, ManagedObject, ResourceKey, ResourceKind, selector_string
from ...tracing import trace_span
from ...utils.errors import NotFoundError, StoreUnavailableError, translate_api_exception
from ...utils.rate_limit import rate_limit_k8s

logger = logging.getLogger(__name__)


class KubernetesObjectStore:
    """Object store backed by the Kubernetes API server."""

    def __init__(
        self,
        api_client: client.ApiClient | None = None,
        request_timeout: float | None = None,
        apis: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            api_client: Configured ApiClient (a default one is built if omitted)
            request_timeout: Timeout applied to every API call in seconds
            apis: Pre-built API instances keyed by class name, e.g. "CoreV1Api"
        """
        self.api_client = api_client or client.ApiClient()
        self.request_timeout = (
            config.REQUEST_TIMEOUT_SECONDS if request_timeout is None else request_timeout
        )
        self._apis: dict[str, Any] = dict(apis or {})

    def _api(self, kind: ResourceKind) -> Any:
        if kind.api not in self._apis:
            self._apis[kind.api] = getattr(client, kind.api)(self.api_client)
        return self._apis[kind.api]

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        return self.api_client.sanitize_for_serialization(obj)

    def _call(self, kind: ResourceKind, operation: str, func: Callable[..., Any], **kwargs: Any) -> Any:
        """Invoke one API method with throttling, metrics and error translation."""
        start_time = time.time()
        with trace_span(f"k8s.{operation}", kind=kind.kind):
            try:
                result = rate_limit_k8s(func)(_request_timeout=self.request_timeout, **kwargs)
            except ApiException as e:
                error = translate_api_exception(e)
                outcome = "not_found" if isinstance(error, NotFoundError) else "error"
                metrics.api_call_total.labels(kind=kind.kind, operation=operation, result=outcome).inc()
                raise error from e
            except HTTPError as e:
                metrics.api_call_total.labels(kind=kind.kind, operation=operation, result="error").inc()
                raise StoreUnavailableError(f"transport error: {e}") from e
            finally:
                duration = time.time() - start_time
                metrics.api_call_duration_seconds.labels(kind=kind.kind, operation=operation).observe(duration)
        metrics.api_call_total.labels(kind=kind.kind, operation=operation, result="success").inc()
        return result

    def _custom_args(self, kind: ResourceKind, namespace: str) -> dict[str, Any]:
        return {
            "group": kind.group,
            "version": kind.version,
            "namespace": namespace,
            "plural": kind.plural,
        }

    def get(self, key: ResourceKey, kind: ResourceKind) -> ManagedObject:
        api = self._api(kind)
        if kind.is_custom:
            result = self._call(
                kind, "get", api.get_namespaced_custom_object,
                name=key.name, **self._custom_args(kind, key.namespace),
            )
        elif kind.namespaced:
            result = self._call(
                kind, "get", getattr(api, f"read_namespaced_{kind.method}"),
                name=key.name, namespace=key.namespace,
            )
        else:
            result = self._call(kind, "get", getattr(api, f"read_{kind.method}"), name=key.name)
        return ManagedObject(kind, self._to_dict(result))

    def list(
        self,
        namespace: str,
        kind: ResourceKind,
        selector: LabelSelector | None = None,
    ) -> list[ManagedObject]:
        api = self._api(kind)
        label_selector = selector_string(selector)
        if kind.is_custom:
            result = self._call(
                kind, "list", api.list_namespaced_custom_object,
                label_selector=label_selector, **self._custom_args(kind, namespace),
            )
        elif kind.namespaced:
            result = self._call(
                kind, "list", getattr(api, f"list_namespaced_{kind.method}"),
                namespace=namespace, label_selector=label_selector,
            )
        else:
            result = self._call(
                kind, "list", getattr(api, f"list_{kind.method}"), label_selector=label_selector,
            )
        items = result.get("items", []) if isinstance(result, dict) else result.items
        return [ManagedObject(kind, self._to_dict(item)) for item in items or []]

    def create(self, obj: ManagedObject) -> ManagedObject:
        kind = obj.kind
        api = self._api(kind)
        if kind.is_custom:
            result = self._call(
                kind, "create", api.create_namespaced_custom_object,
                body=obj.body, field_manager=FIELD_MANAGER, **self._custom_args(kind, obj.namespace),
            )
        elif kind.namespaced:
            result = self._call(
                kind, "create", getattr(api, f"create_namespaced_{kind.method}"),
                namespace=obj.namespace, body=obj.body, field_manager=FIELD_MANAGER,
            )
        else:
            result = self._call(
                kind, "create", getattr(api, f"create_{kind.method}"),
                body=obj.body, field_manager=FIELD_MANAGER,
            )
        return ManagedObject(kind, self._to_dict(result))

    def update(self, obj: ManagedObject) -> ManagedObject:
        kind = obj.kind
        api = self._api(kind)
        if kind.is_custom:
            result = self._call(
                kind, "update", api.replace_namespaced_custom_object,
                name=obj.name, body=obj.body, field_manager=FIELD_MANAGER,
                **self._custom_args(kind, obj.namespace),
            )
        elif kind.namespaced:
            result = self._call(
                kind, "update", getattr(api, f"replace_namespaced_{kind.method}"),
                name=obj.name, namespace=obj.namespace, body=obj.body, field_manager=FIELD_MANAGER,
            )
        else:
            result = self._call(
                kind, "update", getattr(api, f"replace_{kind.method}"),
                name=obj.name, body=obj.body, field_manager=FIELD_MANAGER,
            )
        return ManagedObject(kind, self._to_dict(result))

    def delete(self, key: ResourceKey, kind: ResourceKind) -> None:
        api = self._api(kind)
        if kind.is_custom:
            self._call(
                kind, "delete", api.delete_namespaced_custom_object,
                name=key.name, **self._custom_args(kind, key.namespace),
            )
        elif kind.namespaced:
            self._call(
                kind, "delete", getattr(api, f"delete_namespaced_{kind.method}"),
                name=key.name, namespace=key.namespace,
            )
        else:
            self._call(kind, "delete", getattr(api, f"delete_{kind.method}"), name=key.name)
        logger.debug(f"Deleted {kind.kind} {key}")
