"""Build snapshots from a live cluster."""

import logging

from kubereach.core.interfaces import ClusterClient, SnapshotSource
from kubereach.core.models import Namespace, NetworkPolicy, Pod
from kubereach.core.services.snapshot import ClusterSnapshot
from kubereach.k8s.converter import NAMESPACE_NAME_LABEL, NetworkPolicyConverter

logger = logging.getLogger(__name__)


class SnapshotLoader(SnapshotSource):
    """Read namespaces, pods and network policies through a cluster client.

    When ``namespaces`` is given, pods and policies are read from those
    namespaces only. Every namespace is still loaded because namespace
    selectors may match any of them.
    """

    def __init__(
        self,
        cluster_client: ClusterClient,
        namespaces: list[str] | None = None,
        converter: NetworkPolicyConverter | None = None,
    ):
        self.cluster_client = cluster_client
        self.namespaces = list(namespaces) if namespaces else None
        self.converter = converter or NetworkPolicyConverter()

    async def load(self) -> ClusterSnapshot:
        """Load and validate a snapshot of the cluster."""
        namespaces = [self._with_name_label(ns) for ns in await self.cluster_client.get_namespaces()]

        scopes: list[str | None] = list(self.namespaces) if self.namespaces else [None]
        pods: list[Pod] = []
        policies: list[NetworkPolicy] = []

        for scope in scopes:
            for item in await self.cluster_client.get_resources("v1", "Pod", scope):
                pods.append(self.converter.convert_pod(item))
            for item in await self.cluster_client.get_resources("networking.k8s.io/v1", "NetworkPolicy", scope):
                policies.append(self.converter.convert_network_policy(item))

        logger.info(
            "Loaded %d namespaces, %d pods, %d policies from cluster",
            len(namespaces),
            len(pods),
            len(policies),
        )
        return ClusterSnapshot.build(namespaces, pods, policies)

    def _with_name_label(self, namespace: Namespace) -> Namespace:
        """Add the automatic name label when the API server did not report it."""
        if NAMESPACE_NAME_LABEL in namespace.labels:
            return namespace
        return Namespace(name=namespace.name, labels={**namespace.labels, NAMESPACE_NAME_LABEL: namespace.name})
