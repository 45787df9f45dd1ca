"""Core services for kubereach."""

from kubereach.core.services.evaluator import ReachabilityEvaluator
from kubereach.core.services.snapshot import ClusterSnapshot, SnapshotStore
from kubereach.core.services.validator import SnapshotValidator

__all__ = ["ClusterSnapshot", "ReachabilityEvaluator", "SnapshotStore", "SnapshotValidator"]
