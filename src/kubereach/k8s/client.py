"""Kubernetes client implementation."""

import asyncio
import inspect
import logging
from typing import Any

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from kubereach.core.interfaces import ClusterClient
from kubereach.core.models import Namespace

logger = logging.getLogger(__name__)


class K8sClient(ClusterClient):
    """Read-only Kubernetes client for namespaces, pods and network policies."""

    def __init__(self, kubeconfig_path: str | None = None, context: str | None = None):
        """Initialize Kubernetes client."""
        self.kubeconfig_path = kubeconfig_path
        self.context = context
        self._api_client: client.ApiClient | None = None
        self._core_v1: client.CoreV1Api | None = None
        self._networking_v1: client.NetworkingV1Api | None = None

    async def _ensure_connected(self) -> None:
        """Ensure client is connected."""
        if self._api_client is None:
            try:
                if self.kubeconfig_path or self.context:
                    config.load_kube_config(config_file=self.kubeconfig_path, context=self.context)
                else:
                    # Try in-cluster config first, then default kubeconfig
                    try:
                        config.load_incluster_config()
                    except config.ConfigException:
                        config.load_kube_config()

                self._api_client = client.ApiClient()
                self._core_v1 = client.CoreV1Api(self._api_client)
                self._networking_v1 = client.NetworkingV1Api(self._api_client)
                logger.debug("Connected to Kubernetes API")

            except Exception as e:
                raise ConnectionError(f"Failed to connect to Kubernetes cluster: {e}") from e

    def is_connected(self) -> bool:
        """Check if client is connected to cluster."""
        return self._api_client is not None

    async def get_namespaces(self) -> list[Namespace]:
        """Get all namespaces in the cluster."""
        await self._ensure_connected()

        try:
            assert self._core_v1 is not None
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(None, self._core_v1.list_namespace)

            return [
                Namespace(name=ns.metadata.name, labels=ns.metadata.labels or {})
                for ns in response.items
            ]

        except ApiException as e:
            raise RuntimeError(f"Failed to get namespaces: {e}") from e

    async def get_resources(
        self,
        api_version: str,
        kind: str,
        namespace: str | None = None
    ) -> list[dict[str, Any]]:
        """Get Kubernetes resources of a specific type as dictionaries."""
        await self._ensure_connected()

        loop = asyncio.get_running_loop()

        def list_items() -> list[dict[str, Any]]:
            response = self._list(api_version, kind, namespace)
            return [item.to_dict() for item in response.items]

        try:
            return await loop.run_in_executor(None, list_items)
        except ApiException as e:
            if e.status == 404:
                # Resource type doesn't exist
                return []
            raise RuntimeError(f"Failed to get {kind} resources: {e}") from e

    def _list(self, api_version: str, kind: str, namespace: str | None) -> Any:
        """Dispatch a list call to the right API group."""
        kind_lower = kind.lower()

        if api_version == "v1":
            assert self._core_v1 is not None
            if kind_lower == "namespace":
                return self._core_v1.list_namespace()
            if kind_lower == "pod":
                if namespace:
                    return self._core_v1.list_namespaced_pod(namespace=namespace)
                return self._core_v1.list_pod_for_all_namespaces()

        if api_version == "networking.k8s.io/v1" and kind_lower == "networkpolicy":
            assert self._networking_v1 is not None
            if namespace:
                return self._networking_v1.list_namespaced_network_policy(namespace=namespace)
            return self._networking_v1.list_network_policy_for_all_namespaces()

        raise ValueError(f"Unsupported resource: {api_version} {kind}")

    async def close(self) -> None:
        """Close the client connection."""
        if self._api_client and hasattr(self._api_client, 'close'):
            if inspect.iscoroutinefunction(self._api_client.close):
                await self._api_client.close()
            else:
                self._api_client.close()
        self._api_client = None
        self._core_v1 = None
        self._networking_v1 = None
