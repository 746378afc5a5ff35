"""Utilities for binding controller owner references."""

from __future__ import annotations

import kopf

from ..models import ManagedObject
from .errors import AlreadyOwnedError


def set_controller_reference(owner: ManagedObject, obj: ManagedObject) -> None:
    """Make ``owner`` the controller of ``obj``.

    Appends a controller owner reference to ``obj`` so the garbage collector
    cascades deletion of ``owner`` to it, and moves ``obj`` into the owner's
    namespace, since a namespaced owner can only parent objects in its own
    namespace. Binding the same owner twice leaves a single reference.

    Args:
        owner: Parent object, as fetched from the store (must have a uid)
        obj: Child object, modified in place

    Raises:
        ValueError: If the owner has no name or uid
        AlreadyOwnedError: If another controller already owns the object
    """
    if not owner.name or not owner.uid:
        raise ValueError(f"owner {owner.kind.kind} {owner.key} has no name or uid")

    for ref in obj.owner_references:
        if ref.controller and ref.uid != owner.uid:
            raise AlreadyOwnedError(
                f"{obj.kind.kind} {obj.name!r} is already owned by {ref.kind} {ref.name!r}"
            )

    kopf.append_owner_reference(obj.body, owner=owner.body)
    obj.namespace = owner.namespace
