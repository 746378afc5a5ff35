"""Base object store interface."""

from __future__ import annotations

from typing import Protocol

from ...models import LabelSelector, ManagedObject, ResourceKey, ResourceKind


class ObjectStore(Protocol):
    """Protocol defining the operations of the declarative object store.

    Implementations raise the errors from ``utils.errors``: ``NotFoundError``
    when the target is absent, ``AlreadyExistsError`` on a create collision,
    ``ConflictError`` on a stale resourceVersion and ``StoreUnavailableError``
    for anything else.
    """

    def get(self, key: ResourceKey, kind: ResourceKind) -> ManagedObject:
        """Fetch a single object by key."""
        ...

    def list(
        self,
        namespace: str,
        kind: ResourceKind,
        selector: LabelSelector | None = None,
    ) -> list[ManagedObject]:
        """List objects of a kind in a namespace, optionally filtered by labels."""
        ...

    def create(self, obj: ManagedObject) -> ManagedObject:
        """Create an object and return the stored copy."""
        ...

    def update(self, obj: ManagedObject) -> ManagedObject:
        """Replace an object and return the stored copy.

        The object must carry the latest resourceVersion.
        """
        ...

    def delete(self, key: ResourceKey, kind: ResourceKind) -> None:
        """Delete an object by key."""
        ...
