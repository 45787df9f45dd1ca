"""Core interfaces for kubereach."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .models import Namespace, ReachabilityMatrix

if TYPE_CHECKING:
    from .services.snapshot import ClusterSnapshot


class ClusterClient(ABC):
    """Interface for Kubernetes cluster clients."""

    @abstractmethod
    async def get_namespaces(self) -> List[Namespace]:
        """Get all namespaces in the cluster."""
        pass

    @abstractmethod
    async def get_resources(self, api_version: str, kind: str, namespace: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get Kubernetes resources of a specific type."""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if client is connected to cluster."""
        pass


class SnapshotSource(ABC):
    """Interface for anything that can produce a cluster snapshot."""

    @abstractmethod
    async def load(self) -> "ClusterSnapshot":
        """
        Load and validate a fresh snapshot.

        Raises:
            ConfigurationError: if the loaded objects are malformed.
        """
        pass


class ReachabilityExporter(ABC):
    """Interface for exporting reachability matrices to different formats."""

    @abstractmethod
    def export_matrix(self, matrix: ReachabilityMatrix, output_path: str) -> None:
        """Export a matrix to a file."""
        pass

    @abstractmethod
    def render(self, matrix: ReachabilityMatrix) -> str:
        """Render a matrix to a string."""
        pass

    @abstractmethod
    def get_supported_formats(self) -> List[str]:
        """Get list of supported export formats."""
        pass
