"""Kubernetes object conversion and loading."""

from kubereach.k8s.converter import NetworkPolicyConverter
from kubereach.k8s.loader import SnapshotLoader
from kubereach.k8s.manifests import ManifestSource, load_manifests

__all__ = ["ManifestSource", "NetworkPolicyConverter", "SnapshotLoader", "load_manifests"]
