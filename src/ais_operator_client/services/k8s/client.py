"""Idempotent, ownership-aware Kubernetes client for the AIStore operator."""

from __future__ import annotations

import logging
import threading

from ... import config, metrics
from ...logging import log_client_event
from ...models import (
    AISTORE,
    CONFIGMAP,
    NAMESPACE,
    POD,
    PVC,
    ROLE,
    SERVICE,
    STATEFULSET,
    LabelSelector,
    ManagedObject,
    ResourceKey,
    ResourceKind,
    WaitOutcome,
)
from ...utils.errors import (
    AlreadyExistsError,
    DeleteError,
    NotFoundError,
    WaitCancelledError,
    WaitTimeoutError,
)
from ...utils.ownership import set_controller_reference
from ...utils.waiter import Clock, ReadinessWaiter
from ..store.base import ObjectStore
from .store import KubernetesObjectStore

logger = logging.getLogger(__name__)


class K8sClient:
    """Wrapper over an object store used by the operator's reconcilers.

    Every call re-reads the store; the client keeps no state between calls.
    """

    def __init__(
        self,
        store: ObjectStore,
        clock: Clock | None = None,
        poll_interval: float | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            store: Object store all operations go through
            clock: Time source for the pod readiness waiter
            poll_interval: Seconds between pod readiness checks
        """
        self.store = store
        self.clock = clock
        self.poll_interval = poll_interval

    @classmethod
    def from_config(cls) -> K8sClient:
        """Build a client from the in-cluster or local kube config."""
        return cls(KubernetesObjectStore(config.load_kube_config()))

    # Get resources

    def get_aistore(self, key: ResourceKey) -> ManagedObject:
        return self.store.get(key, AISTORE)

    def list_aistores(self, namespace: str, selector: LabelSelector | None = None) -> list[ManagedObject]:
        return self.store.list(namespace, AISTORE, selector)

    def get_statefulset(self, key: ResourceKey) -> ManagedObject:
        return self.store.get(key, STATEFULSET)

    def statefulset_exists(self, key: ResourceKey) -> bool:
        try:
            self.get_statefulset(key)
        except NotFoundError:
            return False
        return True

    def get_service(self, key: ResourceKey) -> ManagedObject:
        return self.store.get(key, SERVICE)

    def get_configmap(self, key: ResourceKey) -> ManagedObject:
        return self.store.get(key, CONFIGMAP)

    def get_pod(self, key: ResourceKey) -> ManagedObject:
        return self.store.get(key, POD)

    def get_role(self, key: ResourceKey) -> ManagedObject:
        return self.store.get(key, ROLE)

    def namespace_exists(self, name: str) -> bool:
        try:
            self.store.get(ResourceKey("", name), NAMESPACE)
        except NotFoundError:
            return False
        return True

    # Create/update resources

    def create_if_absent(self, obj: ManagedObject, owner: ManagedObject | None = None) -> bool:
        """Create ``obj`` unless an object with its key already exists.

        When ``owner`` is given, ``obj`` gets a controller reference to it and
        is moved into the owner's namespace before submission. On success the
        body of ``obj`` is refreshed with the stored copy.

        Args:
            obj: Object to create
            owner: Optional controlling parent

        Returns:
            True if the object already existed, False if it was created
        """
        if owner is not None:
            set_controller_reference(owner, obj)

        try:
            created = self.store.create(obj)
        except AlreadyExistsError:
            metrics.mutation_skipped_total.labels(operation="create", reason="already_exists").inc()
            log_client_event(
                logger, "create", obj.kind.kind, obj.name, obj.namespace, "already_exists",
                level=logging.DEBUG,
            )
            return True

        obj.body = created.body
        log_client_event(logger, "create", obj.kind.kind, obj.name, obj.namespace, "created")
        return False

    def update_if_present(self, obj: ManagedObject) -> None:
        """Update ``obj``; a target that no longer exists is not an error."""
        try:
            updated = self.store.update(obj)
        except NotFoundError:
            metrics.mutation_skipped_total.labels(operation="update", reason="not_found").inc()
            log_client_event(
                logger, "update", obj.kind.kind, obj.name, obj.namespace, "not_found",
                level=logging.DEBUG,
            )
            return

        obj.body = updated.body
        log_client_event(logger, "update", obj.kind.kind, obj.name, obj.namespace, "updated")

    def update_statefulset_replicas(self, key: ResourceKey, replicas: int) -> bool:
        """Set the replica count of a StatefulSet if it differs.

        Returns:
            True if an update was written
        """
        ss = self.get_statefulset(key)
        current = ss.spec.get("replicas")
        if current == replicas:
            metrics.mutation_skipped_total.labels(operation="update_replicas", reason="unchanged").inc()
            return False

        ss.spec["replicas"] = replicas
        self.store.update(ss)
        log_client_event(
            logger, "update_replicas", ss.kind.kind, key.name, key.namespace, "updated",
            previous=current, replicas=replicas,
        )
        return True

    def update_statefulset_image(self, key: ResourceKey, container_index: int, image: str) -> bool:
        """Set the image of one pod template container of a StatefulSet if it differs.

        Args:
            key: StatefulSet key
            container_index: Index into spec.template.spec.containers
            image: Desired image

        Returns:
            True if an update was written

        Raises:
            IndexError: If the container index is out of range
        """
        ss = self.get_statefulset(key)
        containers = ss.spec.get("template", {}).get("spec", {}).get("containers") or []
        if not 0 <= container_index < len(containers):
            raise IndexError(
                f"container index {container_index} out of range for StatefulSet {key} "
                f"with {len(containers)} containers"
            )

        container = containers[container_index]
        current = container.get("image")
        if current == image:
            metrics.mutation_skipped_total.labels(operation="update_image", reason="unchanged").inc()
            return False

        container["image"] = image
        self.store.update(ss)
        log_client_event(
            logger, "update_image", ss.kind.kind, key.name, key.namespace, "updated",
            container=container.get("name"), previous=current, image=image,
        )
        return True

    # Delete resources

    def delete_if_exists(self, obj: ManagedObject) -> bool:
        """Delete ``obj`` by key. It doesn't fail if the object does not exist.

        Returns:
            True if the object existed and was deleted

        Raises:
            DeleteError: If the delete failed for any reason other than absence
        """
        kind = obj.kind.kind
        try:
            self.store.delete(obj.key, obj.kind)
        except NotFoundError:
            log_client_event(logger, "delete", kind, obj.name, obj.namespace, "not_found", level=logging.DEBUG)
            return False
        except Exception as e:
            log_client_event(
                logger, "delete", kind, obj.name, obj.namespace, "error",
                level=logging.WARNING, error=str(e),
            )
            raise DeleteError(kind, obj.name, obj.namespace, e) from e

        log_client_event(logger, "delete", kind, obj.name, obj.namespace, "deleted")
        return True

    def _delete_by_key(self, kind: ResourceKind, key: ResourceKey) -> bool:
        return self.delete_if_exists(ManagedObject.stub(kind, key))

    def delete_service_if_exists(self, key: ResourceKey) -> bool:
        return self._delete_by_key(SERVICE, key)

    def delete_statefulset_if_exists(self, key: ResourceKey) -> bool:
        return self._delete_by_key(STATEFULSET, key)

    def delete_configmap_if_exists(self, key: ResourceKey) -> bool:
        return self._delete_by_key(CONFIGMAP, key)

    def delete_pod_if_exists(self, key: ResourceKey) -> None:
        self._delete_by_key(POD, key)

    def delete_all_matching(self, namespace: str, selector: LabelSelector, kind: ResourceKind) -> bool:
        """Delete every object of ``kind`` in ``namespace`` matching ``selector``.

        Stops at the first failed delete; objects deleted before it stay deleted.

        Returns:
            True if at least one matching object existed and was deleted
        """
        try:
            objs = self.store.list(namespace, kind, selector)
        except NotFoundError:
            return False

        any_existed = False
        for obj in objs:
            existed = self.delete_if_exists(obj)
            any_existed = any_existed or existed
        return any_existed

    def delete_all_services_if_exist(self, namespace: str, selector: LabelSelector) -> bool:
        return self.delete_all_matching(namespace, selector, SERVICE)

    def delete_all_pvcs_if_exist(self, namespace: str, selector: LabelSelector) -> bool:
        return self.delete_all_matching(namespace, selector, PVC)

    # Wait for resources

    def wait_for_pod_ready(
        self,
        key: ResourceKey,
        timeout: float,
        cancel: threading.Event | None = None,
        mask_fetch_errors: bool = True,
    ) -> None:
        """Block until the pod is Running.

        Args:
            key: Pod key
            timeout: Seconds to wait before giving up
            cancel: Optional event; when set, the wait stops at the next check
            mask_fetch_errors: When False, a fetch error other than not-found ends the wait

        Raises:
            WaitTimeoutError: If the pod is not running before the deadline
            WaitCancelledError: If ``cancel`` was set
            StoreError: If a fetch failed and ``mask_fetch_errors`` is False
        """
        waiter = ReadinessWaiter(
            self.store,
            clock=self.clock,
            poll_interval=self.poll_interval,
            mask_fetch_errors=mask_fetch_errors,
        )
        result = waiter.wait(key, timeout, cancel)
        if result.outcome is WaitOutcome.READY:
            return
        if result.outcome is WaitOutcome.CANCELLED:
            raise WaitCancelledError(f"wait for pod {key} cancelled")
        if result.outcome is WaitOutcome.STORE_ERROR and result.last_error is not None:
            raise result.last_error
        raise WaitTimeoutError(f"pod {key} not running after {timeout}s ({result.attempts} attempts)")
