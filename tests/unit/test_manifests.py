"""Unit tests for manifest loading."""

import asyncio
import json
import threading

import pytest

from kubereach.core.models import ConfigurationError
from kubereach.k8s.manifests import ManifestSource, load_manifests


class TestLoadManifests:
    """Test reading manifest files."""

    def test_multi_document(self, stars_manifest):
        """Test that every YAML document is read."""
        objects = load_manifests([stars_manifest])

        kinds = [obj["kind"] for obj in objects]
        assert kinds.count("Namespace") == 3
        assert kinds.count("Pod") == 4
        assert kinds.count("NetworkPolicy") == 6

    def test_list_and_json(self, tmp_path):
        """Test List wrappers and JSON files."""
        document = {
            "apiVersion": "v1",
            "kind": "List",
            "items": [
                {"kind": "Namespace", "metadata": {"name": "app"}},
                {"kind": "PodList", "items": [{"kind": "Pod", "metadata": {"name": "a", "namespace": "app"}}]},
            ],
        }
        path = tmp_path / "objects.json"
        path.write_text(json.dumps(document))

        objects = load_manifests([path])

        assert [obj["kind"] for obj in objects] == ["Namespace", "Pod"]

    def test_directory(self, tmp_path):
        """Test that directories are expanded in name order."""
        (tmp_path / "b.yaml").write_text("kind: Pod\nmetadata: {name: b, namespace: app}\n")
        (tmp_path / "a.yml").write_text("kind: Namespace\nmetadata: {name: app}\n---\n")
        (tmp_path / "notes.txt").write_text("not a manifest")

        objects = load_manifests([tmp_path])

        assert [obj["metadata"]["name"] for obj in objects] == ["app", "b"]

    def test_invalid_yaml(self, tmp_path):
        """Test that parse errors become configuration errors."""
        path = tmp_path / "broken.yaml"
        path.write_text("kind: [unclosed\n")

        with pytest.raises(ConfigurationError, match="invalid manifest"):
            load_manifests([path])

    def test_non_object_document(self, tmp_path):
        """Test that scalar documents are rejected."""
        path = tmp_path / "scalar.yaml"
        path.write_text("just a string\n")

        with pytest.raises(ConfigurationError, match="expected a Kubernetes object"):
            load_manifests([path])


class TestManifestSource:
    """Test the manifest snapshot source."""

    def test_load(self, stars_manifest):
        """Test loading a validated snapshot."""
        snapshot = asyncio.run(ManifestSource([stars_manifest]).load())

        assert len(snapshot.namespaces) == 3
        assert len(snapshot.pods) == 4
        assert len(snapshot.policies) == 6

    def test_invalid_policy_aborts(self, tmp_path):
        """Test that a malformed policy yields no snapshot."""
        path = tmp_path / "bad.yaml"
        path.write_text(
            """
kind: Namespace
metadata:
  name: app
---
kind: NetworkPolicy
metadata:
  name: bad
  namespace: app
spec:
  podSelector: {}
  ingress:
    - ports:
        - port: 70000
"""
        )

        with pytest.raises(ConfigurationError) as exc_info:
            ManifestSource([path]).load_sync()

        assert exc_info.value.subject == "app/bad"
        assert "port 70000 out of range" in str(exc_info.value)

    def test_load_runs_off_the_event_loop(self, stars_manifest, monkeypatch):
        """Test that file reading and parsing happen in a worker thread."""
        source = ManifestSource([stars_manifest])
        load_sync = source.load_sync
        threads = []

        def recording_load_sync():
            threads.append(threading.get_ident())
            return load_sync()

        monkeypatch.setattr(source, "load_sync", recording_load_sync)

        async def scenario():
            snapshot = await source.load()
            return snapshot, threading.get_ident()

        snapshot, loop_thread = asyncio.run(scenario())

        assert len(snapshot.pods) == 4
        assert threads and threads[0] != loop_thread
