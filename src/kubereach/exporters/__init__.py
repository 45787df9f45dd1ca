"""Reachability matrix exporters."""

from kubereach.core.interfaces import ReachabilityExporter
from kubereach.exporters.csv_exporter import CSVExporter
from kubereach.exporters.json_exporter import JSONExporter
from kubereach.exporters.yaml_exporter import YAMLExporter

EXPORTERS: dict[str, type[ReachabilityExporter]] = {
    "json": JSONExporter,
    "yaml": YAMLExporter,
    "csv": CSVExporter,
}


def get_exporter(output_format: str) -> ReachabilityExporter:
    """Get an exporter for a format name."""
    try:
        return EXPORTERS[output_format.lower()]()
    except KeyError:
        raise ValueError(f"Unsupported export format: {output_format}") from None


__all__ = ["CSVExporter", "EXPORTERS", "JSONExporter", "YAMLExporter", "get_exporter"]
