"""JSON exporter for reachability matrices."""

import json
from typing import Any

from kubereach.core.interfaces import ReachabilityExporter
from kubereach.core.models import ReachabilityMatrix


def matrix_document(matrix: ReachabilityMatrix) -> dict[str, Any]:
    """Build the document shared by the structured exporters."""
    return {
        "mode": matrix.mode.value,
        "ports": [str(port) for port in matrix.ports],
        "summary": matrix.summary(),
        "entries": matrix.to_rows(),
    }


class JSONExporter(ReachabilityExporter):
    """Export a matrix as a JSON document."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def render(self, matrix: ReachabilityMatrix) -> str:
        """Render the matrix as JSON."""
        return json.dumps(matrix_document(matrix), indent=self.indent)

    def export_matrix(self, matrix: ReachabilityMatrix, output_path: str) -> None:
        """Write the matrix to a JSON file."""
        with open(output_path, "w", encoding="utf-8") as handle:
            handle.write(self.render(matrix))
            handle.write("\n")

    def get_supported_formats(self) -> list[str]:
        """Get list of supported export formats."""
        return ["json"]
