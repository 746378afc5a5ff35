"""Bounded polling until a pod reaches the Running phase."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Protocol

from .. import config, metrics
from ..constants import POD_PHASE_RUNNING
from ..models import POD, ManagedObject, ResourceKey, ResourceKind, WaitOutcome
from ..services.store.base import ObjectStore
from .errors import NotFoundError, StoreError

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Time source used by the waiter."""

    def monotonic(self) -> float:
        ...

    def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """Clock backed by the time module."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


@dataclass
class WaitResult:
    """Terminal result of a readiness wait."""

    outcome: WaitOutcome
    attempts: int
    elapsed: float
    last_error: Exception | None = None
    obj: ManagedObject | None = None


def is_pod_running(obj: ManagedObject) -> bool:
    return obj.status.get("phase") == POD_PHASE_RUNNING


class ReadinessWaiter:
    """Polls the store until a pod is running, the deadline passes or the caller cancels.

    Every fetch error is treated as transient by default: a pod that does not
    exist yet and a request rejected for lack of permission both keep the
    loop going until the deadline. Fetch errors are retried without sleeping.
    The cancel signal and the deadline are only checked at loop checkpoints,
    so a cancel raised during the sleep is observed once the sleep finishes.
    """

    def __init__(
        self,
        store: ObjectStore,
        clock: Clock | None = None,
        poll_interval: float | None = None,
        mask_fetch_errors: bool = True,
        kind: ResourceKind = POD,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.poll_interval = config.POD_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
        self.mask_fetch_errors = mask_fetch_errors
        self.kind = kind

    def wait(
        self,
        key: ResourceKey,
        timeout: float,
        cancel: threading.Event | None = None,
    ) -> WaitResult:
        """Run the polling loop to a terminal state.

        Args:
            key: Pod to watch
            timeout: Seconds from now after which the wait times out
            cancel: Optional event signalling the caller gave up

        Returns:
            WaitResult with a terminal outcome
        """
        start = self.clock.monotonic()
        deadline = start + timeout
        state = WaitOutcome.POLLING
        attempts = 0
        last_error: Exception | None = None
        obj: ManagedObject | None = None

        while not state.terminal:
            attempts += 1
            try:
                obj = self.store.get(key, self.kind)
            except StoreError as e:
                last_error = e
                if not self.mask_fetch_errors and not isinstance(e, NotFoundError):
                    state = WaitOutcome.STORE_ERROR
                    continue
                logger.debug(f"Fetch of {self.kind.kind} {key} failed, retrying: {e}")
                state = self._checkpoint(deadline, cancel)
                continue

            if is_pod_running(obj):
                state = WaitOutcome.READY
                continue

            self.clock.sleep(self.poll_interval)
            state = self._checkpoint(deadline, cancel)

        elapsed = self.clock.monotonic() - start
        metrics.pod_wait_total.labels(outcome=state.value).inc()
        metrics.pod_wait_duration_seconds.observe(elapsed)
        logger.info(f"Wait for {self.kind.kind} {key} finished: {state.value} after {attempts} attempts")
        return WaitResult(state, attempts, elapsed, last_error, obj)

    def _checkpoint(self, deadline: float, cancel: threading.Event | None) -> WaitOutcome:
        if cancel is not None and cancel.is_set():
            return WaitOutcome.CANCELLED
        if self.clock.monotonic() >= deadline:
            return WaitOutcome.TIMED_OUT
        return WaitOutcome.POLLING
