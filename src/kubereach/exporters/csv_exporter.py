"""CSV exporter for reachability matrices."""

import csv
import io

from kubereach.core.interfaces import ReachabilityExporter
from kubereach.core.models import ReachabilityMatrix

FIELDS = ["source", "destination", "protocol", "port", "allowed"]


class CSVExporter(ReachabilityExporter):
    """Export a matrix as one CSV row per (source, destination, port)."""

    def render(self, matrix: ReachabilityMatrix) -> str:
        """Render the matrix as CSV."""
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=FIELDS, lineterminator="\n")
        writer.writeheader()
        for row in matrix.to_rows():
            writer.writerow({**row, "allowed": "allow" if row["allowed"] else "deny"})
        return buffer.getvalue()

    def export_matrix(self, matrix: ReachabilityMatrix, output_path: str) -> None:
        """Write the matrix to a CSV file."""
        with open(output_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(self.render(matrix))

    def get_supported_formats(self) -> list[str]:
        """Get list of supported export formats."""
        return ["csv"]
