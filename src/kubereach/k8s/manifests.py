"""Load namespaces, pods and policies from manifest files."""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from kubereach.core.interfaces import SnapshotSource
from kubereach.core.models import ConfigurationError
from kubereach.core.services.snapshot import ClusterSnapshot
from kubereach.k8s.converter import NetworkPolicyConverter

logger = logging.getLogger(__name__)

MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")


def _expand(paths: Iterable[str | Path]) -> list[Path]:
    """Expand directories into the manifest files they contain."""
    files: list[Path] = []
    for entry in paths:
        path = Path(entry)
        if path.is_dir():
            files.extend(sorted(p for p in path.iterdir() if p.suffix in MANIFEST_SUFFIXES))
        else:
            files.append(path)
    return files


def _flatten(document: Any, source: Path) -> list[dict[str, Any]]:
    """Unwrap ``kind: List`` documents and drop empty ones."""
    if document is None:
        return []
    if not isinstance(document, dict):
        raise ConfigurationError(f"{source}: expected a Kubernetes object, got {type(document).__name__}")
    if document.get("kind") == "List" or ((document.get("kind") or "").endswith("List") and "items" in document):
        items: list[dict[str, Any]] = []
        for item in document.get("items") or []:
            items.extend(_flatten(item, source))
        return items
    return [document]


def load_manifests(paths: Iterable[str | Path]) -> list[dict[str, Any]]:
    """Read every object from YAML or JSON manifest files.

    Multi-document YAML and List wrappers are supported. JSON is read with
    the YAML parser.

    Raises:
        ConfigurationError: if a file cannot be parsed.
    """
    objects: list[dict[str, Any]] = []
    for path in _expand(paths):
        try:
            with path.open(encoding="utf-8") as handle:
                documents = list(yaml.safe_load_all(handle))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{path}: invalid manifest: {e}", subject=str(path)) from e

        for document in documents:
            objects.extend(_flatten(document, path))
        logger.debug("Read %d document(s) from %s", len(documents), path)

    return objects


class ManifestSource(SnapshotSource):
    """Snapshot source backed by manifest files."""

    def __init__(self, paths: Iterable[str | Path], converter: NetworkPolicyConverter | None = None):
        self.paths = list(paths)
        self.converter = converter or NetworkPolicyConverter()

    async def load(self) -> ClusterSnapshot:
        """Read, convert and validate the manifests off the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.load_sync)

    def load_sync(self) -> ClusterSnapshot:
        """Blocking variant of load() for callers without an event loop."""
        objects = load_manifests(self.paths)
        namespaces, pods, policies = self.converter.convert(objects)
        logger.info(
            "Loaded %d namespaces, %d pods, %d policies from %d path(s)",
            len(namespaces),
            len(pods),
            len(policies),
            len(self.paths),
        )
        return ClusterSnapshot.build(namespaces, pods, policies)
