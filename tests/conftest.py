"""Shared fixtures."""

import os
from pathlib import Path

import pytest

from kubereach.core.services import ClusterSnapshot, ReachabilityEvaluator
from kubereach.k8s.manifests import ManifestSource

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep KUBEREACH_* variables of the calling shell out of the tests."""
    for variable in [name for name in os.environ if name.startswith("KUBEREACH_")]:
        monkeypatch.delenv(variable)


@pytest.fixture
def stars_manifest() -> Path:
    """Path to the stars demo manifests."""
    return FIXTURES / "stars.yaml"


@pytest.fixture
def stars_snapshot(stars_manifest: Path) -> ClusterSnapshot:
    """Snapshot built from the stars demo manifests."""
    return ManifestSource([stars_manifest]).load_sync()


@pytest.fixture
def stars_evaluator(stars_snapshot: ClusterSnapshot) -> ReachabilityEvaluator:
    """Evaluator bound to the stars demo snapshot."""
    return ReachabilityEvaluator(stars_snapshot)
