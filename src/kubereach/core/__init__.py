"""Core domain models and interfaces for kubereach."""

from kubereach.core.interfaces import ClusterClient, ReachabilityExporter, SnapshotSource
from kubereach.core.models import ConfigurationError, Namespace, NetworkPolicy, Pod

__all__ = [
    "ClusterClient",
    "ConfigurationError",
    "Namespace",
    "NetworkPolicy",
    "Pod",
    "ReachabilityExporter",
    "SnapshotSource",
]
