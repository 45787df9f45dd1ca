"""YAML exporter for reachability matrices."""

import yaml

from kubereach.core.interfaces import ReachabilityExporter
from kubereach.core.models import ReachabilityMatrix
from kubereach.exporters.json_exporter import matrix_document


class YAMLExporter(ReachabilityExporter):
    """Export a matrix as a YAML document."""

    def render(self, matrix: ReachabilityMatrix) -> str:
        """Render the matrix as YAML."""
        return yaml.safe_dump(matrix_document(matrix), sort_keys=False, default_flow_style=False)

    def export_matrix(self, matrix: ReachabilityMatrix, output_path: str) -> None:
        """Write the matrix to a YAML file."""
        with open(output_path, "w", encoding="utf-8") as handle:
            handle.write(self.render(matrix))

    def get_supported_formats(self) -> list[str]:
        """Get list of supported export formats."""
        return ["yaml", "yml"]
