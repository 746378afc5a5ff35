"""Models for objects managed through the Kubernetes API."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping

from .constants import (
    API_GROUP,
    API_VERSION,
    KIND_AISTORE,
    KIND_CONFIGMAP,
    KIND_NAMESPACE,
    KIND_POD,
    KIND_PVC,
    KIND_ROLE,
    KIND_SERVICE,
    KIND_STATEFULSET,
    PLURAL_AISTORE,
)

LabelSelector = Mapping[str, str]


@dataclass(frozen=True)
class ResourceKey:
    """Namespace and name identifying one object in the store."""

    namespace: str
    name: str

    def __str__(self) -> str:
        if not self.namespace:
            return self.name
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ResourceKind:
    """A kind of object the client knows how to store.

    Attributes:
        kind: Kubernetes kind, e.g. "StatefulSet"
        api_version: apiVersion written into manifests
        api: Name of the kubernetes.client API class serving the kind
        method: Suffix of the typed API methods (read_namespaced_<method>, ...)
        plural: Plural resource name, set for custom resources only
        namespaced: False for cluster-scoped kinds
    """

    kind: str
    api_version: str
    api: str
    method: str | None = None
    plural: str | None = None
    namespaced: bool = True

    @property
    def is_custom(self) -> bool:
        return self.plural is not None

    @property
    def group(self) -> str:
        return self.api_version.rpartition("/")[0]

    @property
    def version(self) -> str:
        return self.api_version.rpartition("/")[2]


AISTORE = ResourceKind(KIND_AISTORE, f"{API_GROUP}/{API_VERSION}", "CustomObjectsApi", plural=PLURAL_AISTORE)
STATEFULSET = ResourceKind(KIND_STATEFULSET, "apps/v1", "AppsV1Api", method="stateful_set")
SERVICE = ResourceKind(KIND_SERVICE, "v1", "CoreV1Api", method="service")
CONFIGMAP = ResourceKind(KIND_CONFIGMAP, "v1", "CoreV1Api", method="config_map")
POD = ResourceKind(KIND_POD, "v1", "CoreV1Api", method="pod")
ROLE = ResourceKind(KIND_ROLE, "rbac.authorization.k8s.io/v1", "RbacAuthorizationV1Api", method="role")
PVC = ResourceKind(KIND_PVC, "v1", "CoreV1Api", method="persistent_volume_claim")
NAMESPACE = ResourceKind(KIND_NAMESPACE, "v1", "CoreV1Api", method="namespace", namespaced=False)


@dataclass(frozen=True)
class OwnerReference:
    """Parent pointer stored on a child object for garbage collection."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = True
    block_owner_deletion: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OwnerReference:
        return cls(
            api_version=data.get("apiVersion", ""),
            kind=data.get("kind", ""),
            name=data.get("name", ""),
            uid=data.get("uid", ""),
            controller=bool(data.get("controller", False)),
            block_owner_deletion=bool(data.get("blockOwnerDeletion", False)),
        )


@dataclass
class ManagedObject:
    """A manifest of a known kind, fetched from or destined for the store.

    The body is a plain Kubernetes manifest dict. Instances are transient
    copies; nothing here is shared between calls.
    """

    kind: ResourceKind
    body: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.body.setdefault("apiVersion", self.kind.api_version)
        self.body.setdefault("kind", self.kind.kind)
        self.body.setdefault("metadata", {})

    @classmethod
    def stub(cls, kind: ResourceKind, key: ResourceKey) -> ManagedObject:
        """Build a metadata-only object, enough for delete-by-key."""
        metadata: dict[str, Any] = {"name": key.name}
        if key.namespace:
            metadata["namespace"] = key.namespace
        return cls(kind, {"metadata": metadata})

    @property
    def metadata(self) -> dict[str, Any]:
        return self.body["metadata"]

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace") or ""

    @namespace.setter
    def namespace(self, value: str) -> None:
        self.metadata["namespace"] = value

    @property
    def key(self) -> ResourceKey:
        return ResourceKey(self.namespace, self.name)

    @property
    def uid(self) -> str | None:
        return self.metadata.get("uid")

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.get("labels") or {}

    @property
    def resource_version(self) -> str | None:
        return self.metadata.get("resourceVersion")

    @property
    def owner_references(self) -> list[OwnerReference]:
        return [OwnerReference.from_dict(ref) for ref in self.metadata.get("ownerReferences") or []]

    @property
    def spec(self) -> dict[str, Any]:
        return self.body.setdefault("spec", {})

    @property
    def status(self) -> dict[str, Any]:
        return self.body.get("status") or {}


class WaitOutcome(str, enum.Enum):
    """States of the pod readiness waiter."""

    POLLING = "polling"
    READY = "ready"
    TIMED_OUT = "timed_out"
    STORE_ERROR = "store_error"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self is not WaitOutcome.POLLING


def selector_string(selector: LabelSelector | None) -> str:
    """Render a label mapping as a Kubernetes equality-based selector."""
    if not selector:
        return ""
    return ",".join(f"{k}={v}" for k, v in sorted(selector.items()))
