"""Immutable cluster snapshots and their atomic replacement."""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from kubereach.core.interfaces import SnapshotSource
from kubereach.core.models import ConfigurationError, Namespace, NetworkPolicy, Pod
from kubereach.core.services.validator import SnapshotValidator

if TYPE_CHECKING:
    from kubereach.core.services.evaluator import ReachabilityEvaluator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterSnapshot:
    """Namespaces, pods and policies captured at one point in time."""

    namespaces: tuple[Namespace, ...] = ()
    pods: tuple[Pod, ...] = ()
    policies: tuple[NetworkPolicy, ...] = ()
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)

    @classmethod
    def build(
        cls,
        namespaces: Iterable[Namespace],
        pods: Iterable[Pod] = (),
        policies: Iterable[NetworkPolicy] = (),
        validator: SnapshotValidator | None = None,
    ) -> "ClusterSnapshot":
        """Validate the inputs and build a snapshot.

        Raises:
            ConfigurationError: if any object is malformed. No snapshot is
                produced in that case.
        """
        namespaces = tuple(namespaces)
        pods = tuple(pods)
        policies = tuple(policies)

        failures = (validator or SnapshotValidator()).validate(namespaces, pods, policies)
        if failures:
            error = ConfigurationError.from_validations(failures)
            logger.debug("Snapshot rejected: %s", error)
            raise error

        snapshot = cls(namespaces=namespaces, pods=pods, policies=policies)
        logger.debug(
            "Built snapshot with %d namespaces, %d pods, %d policies",
            len(namespaces),
            len(pods),
            len(policies),
        )
        return snapshot

    def get_namespace(self, name: str) -> Namespace | None:
        """Get a namespace by name."""
        for ns in self.namespaces:
            if ns.name == name:
                return ns
        return None

    def get_pod(self, namespace: str, name: str) -> Pod | None:
        """Get a pod by namespace and name."""
        for pod in self.pods:
            if pod.namespace == namespace and pod.name == name:
                return pod
        return None

    def find_pod(self, reference: str, default_namespace: str = "default") -> Pod | None:
        """Get a pod from a ``namespace/name`` or bare ``name`` reference."""
        if "/" in reference:
            namespace, name = reference.split("/", 1)
        else:
            namespace, name = default_namespace, reference
        return self.get_pod(namespace, name)

    def get_pods_in(self, namespace: str) -> list[Pod]:
        """Get all pods of a namespace."""
        return [pod for pod in self.pods if pod.namespace == namespace]

    def get_policies_in(self, namespace: str) -> list[NetworkPolicy]:
        """Get all policies of a namespace."""
        return [policy for policy in self.policies if policy.namespace == namespace]

    def get_namespaces_with_policies(self) -> list[str]:
        """Get names of namespaces that have at least one policy."""
        with_policies = {policy.namespace for policy in self.policies}
        return [ns.name for ns in self.namespaces if ns.name in with_policies]


class SnapshotStore:
    """Holds the current snapshot and swaps replacements in atomically.

    Evaluators obtained from the store keep the snapshot they were created
    with, so a refresh never changes the answers of one already in use.
    """

    def __init__(self, snapshot: ClusterSnapshot | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = snapshot or ClusterSnapshot()
        self._generation = 0

    @property
    def current(self) -> ClusterSnapshot:
        """Get the current snapshot."""
        with self._lock:
            return self._snapshot

    @property
    def generation(self) -> int:
        """Number of swaps performed so far."""
        with self._lock:
            return self._generation

    def swap(self, snapshot: ClusterSnapshot) -> ClusterSnapshot:
        """Replace the current snapshot and return the previous one."""
        with self._lock:
            previous = self._snapshot
            self._snapshot = snapshot
            self._generation += 1
            generation = self._generation
        logger.info(
            "Swapped in snapshot %d (%d pods, %d policies)",
            generation,
            len(snapshot.pods),
            len(snapshot.policies),
        )
        return previous

    def evaluator(self) -> "ReachabilityEvaluator":
        """Get an evaluator bound to the current snapshot."""
        from kubereach.core.services.evaluator import ReachabilityEvaluator

        return ReachabilityEvaluator(self.current)

    async def refresh(self, source: SnapshotSource) -> ClusterSnapshot:
        """Load a new snapshot and swap it in.

        The previous snapshot stays in place if loading fails.
        """
        try:
            snapshot = await source.load()
        except Exception:
            logger.warning("Snapshot refresh failed, keeping generation %d", self.generation)
            raise
        self.swap(snapshot)
        return snapshot
