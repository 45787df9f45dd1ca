"""Matrix tab component."""

from typing import Any

from textual.widgets import DataTable

from kubereach.core.models import ReachabilityMatrix
from kubereach.tui.theme import Colors


class MatrixTab:
    """Matrix tab logic.

    Rows are source pods and columns are destination pods. Each cell lists
    the ports the source may reach on the destination.
    """

    @staticmethod
    def update_table(table: DataTable[Any], matrix: ReachabilityMatrix) -> None:
        """Update the matrix table."""
        table.clear(columns=True)

        table.add_column("Source")
        for destination in matrix.destinations:
            table.add_column(destination)

        for source in matrix.sources:
            cells = [MatrixTab.format_cell(matrix, source, destination) for destination in matrix.destinations]
            table.add_row(source, *cells, key=source)

    @staticmethod
    def format_cell(matrix: ReachabilityMatrix, source: str, destination: str) -> str:
        """Format the allowed ports of one source/destination pair."""
        if source == destination:
            return f"[{Colors.MUTED.value}]-[/]"

        allowed = [str(port) for port in matrix.ports if matrix.is_allowed(source, destination, port)]
        if not allowed:
            return f"[{Colors.ERROR.value}]none[/]"
        if len(allowed) == len(matrix.ports):
            return f"[{Colors.SUCCESS.value}]all[/]"
        return f"[{Colors.WARNING.value}]{', '.join(allowed)}[/]"

    @staticmethod
    def footer(matrix: ReachabilityMatrix) -> str:
        """Summarize the matrix."""
        summary = matrix.summary()
        ports = ", ".join(str(port) for port in matrix.ports)
        return f"{matrix.mode.value} | ports: {ports} | {summary['allowed']} allowed, {summary['denied']} denied"
