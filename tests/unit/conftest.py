"""Shared fixtures for client unit tests."""

from __future__ import annotations

import copy
import uuid
from typing import Any, Callable

import pytest

from ais_operator_client.models import (
    AISTORE,
    LabelSelector,
    ManagedObject,
    ResourceKey,
    ResourceKind,
    STATEFULSET,
)
from ais_operator_client.utils.errors import AlreadyExistsError, ConflictError, NotFoundError


def matches_selector(labels: dict[str, str], selector: LabelSelector | None) -> bool:
    """Return True when every selector label has the required value."""
    return all(labels.get(k) == v for k, v in (selector or {}).items())


class FakeObjectStore:
    """In-memory object store that counts writes.

    Mirrors the API server semantics the client depends on: create fails on
    an existing key, update and delete fail on a missing key, update rejects
    a stale resourceVersion and only bumps the version when content changes.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.writes: list[tuple[str, str, ResourceKey]] = []
        self.get_calls = 0
        self.errors: dict[str, Exception] = {}
        self.on_get: Callable[[int], None] | None = None
        self._version = 0

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _raise_if_failing(self, operation: str) -> None:
        if operation in self.errors:
            raise self.errors[operation]

    def put(self, kind: ResourceKind, body: dict[str, Any]) -> ManagedObject:
        """Seed the store without counting a write."""
        obj = ManagedObject(kind, copy.deepcopy(body))
        obj.metadata.setdefault("uid", str(uuid.uuid4()))
        obj.metadata["resourceVersion"] = self._next_version()
        self.objects[(kind.kind, obj.namespace, obj.name)] = obj.body
        return ManagedObject(kind, copy.deepcopy(obj.body))

    def stored(self, kind: ResourceKind, key: ResourceKey) -> dict[str, Any] | None:
        return self.objects.get((kind.kind, key.namespace, key.name))

    def count(self, kind: ResourceKind) -> int:
        return sum(1 for k in self.objects if k[0] == kind.kind)

    def get(self, key: ResourceKey, kind: ResourceKind) -> ManagedObject:
        self.get_calls += 1
        if self.on_get is not None:
            self.on_get(self.get_calls)
        self._raise_if_failing("get")
        body = self.stored(kind, key)
        if body is None:
            raise NotFoundError(f"{kind.kind} {key} not found", status=404)
        return ManagedObject(kind, copy.deepcopy(body))

    def list(
        self,
        namespace: str,
        kind: ResourceKind,
        selector: LabelSelector | None = None,
    ) -> list[ManagedObject]:
        self._raise_if_failing("list")
        return [
            ManagedObject(kind, copy.deepcopy(body))
            for (k, ns, _), body in sorted(self.objects.items(), key=lambda item: item[0])
            if k == kind.kind and ns == namespace
            and matches_selector(body.get("metadata", {}).get("labels") or {}, selector)
        ]

    def create(self, obj: ManagedObject) -> ManagedObject:
        self._raise_if_failing("create")
        index = (obj.kind.kind, obj.namespace, obj.name)
        if index in self.objects:
            raise AlreadyExistsError(f"{obj.kind.kind} {obj.key} already exists", status=409)
        body = copy.deepcopy(obj.body)
        body["metadata"]["uid"] = str(uuid.uuid4())
        body["metadata"]["resourceVersion"] = self._next_version()
        self.objects[index] = body
        self.writes.append(("create", obj.kind.kind, obj.key))
        return ManagedObject(obj.kind, copy.deepcopy(body))

    def update(self, obj: ManagedObject) -> ManagedObject:
        self._raise_if_failing("update")
        index = (obj.kind.kind, obj.namespace, obj.name)
        current = self.objects.get(index)
        if current is None:
            raise NotFoundError(f"{obj.kind.kind} {obj.key} not found", status=404)
        if obj.resource_version != current["metadata"].get("resourceVersion"):
            raise ConflictError(f"{obj.kind.kind} {obj.key} was modified", status=409)
        self.writes.append(("update", obj.kind.kind, obj.key))
        if obj.body != current:
            body = copy.deepcopy(obj.body)
            body["metadata"]["resourceVersion"] = self._next_version()
            self.objects[index] = body
        return ManagedObject(obj.kind, copy.deepcopy(self.objects[index]))

    def delete(self, key: ResourceKey, kind: ResourceKind) -> None:
        self._raise_if_failing("delete")
        index = (kind.kind, key.namespace, key.name)
        if index not in self.objects:
            raise NotFoundError(f"{kind.kind} {key} not found", status=404)
        del self.objects[index]
        self.writes.append(("delete", kind.kind, key))


class FakeClock:
    """Clock whose time only advances when the code under test sleeps."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []
        self.on_sleep: Callable[[float], None] | None = None

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep is not None:
            self.on_sleep(self.now)


def statefulset_body(
    name: str = "ais-target",
    namespace: str = "ais",
    replicas: int = 3,
    images: tuple[str, ...] = ("aistorage/aisnode:v3.20",),
) -> dict[str, Any]:
    return {
        "metadata": {"name": name, "namespace": namespace},
        "spec": {
            "replicas": replicas,
            "template": {
                "spec": {
                    "containers": [
                        {"name": f"c{i}", "image": image} for i, image in enumerate(images)
                    ],
                },
            },
        },
    }


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def aistore(store: FakeObjectStore) -> ManagedObject:
    return store.put(AISTORE, {"metadata": {"name": "ais", "namespace": "ais"}, "spec": {"size": 3}})


@pytest.fixture
def statefulset(store: FakeObjectStore) -> ManagedObject:
    return store.put(STATEFULSET, statefulset_body())
