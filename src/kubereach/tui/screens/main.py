"""Main screen for kubereach TUI."""

from typing import Optional

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import Screen
from textual.widgets import DataTable, Static, TabbedContent, TabPane
from rich.panel import Panel

from kubereach.core.interfaces import SnapshotSource
from kubereach.core.models import ConfigurationError, EvaluationMode, PortSpec
from kubereach.core.services import ReachabilityEvaluator, SnapshotStore
from kubereach.tui.screens.pod_detail import PodDetailScreen
from kubereach.tui.tabs import DashboardTab, MatrixTab, PodsTab, PoliciesTab
from kubereach.tui.widgets import NamespaceSelector, StatusBar

TABLES = {
    "policies": "#policies-table",
    "pods": "#pods-table",
    "matrix": "#matrix-table",
}


class MainScreen(Screen[None]):
    """Main screen for network policy reachability."""

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("enter", "view_item", "View"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("n", "next_namespace", "Next NS"),
        Binding("p", "prev_namespace", "Prev NS"),
        Binding("1", "tab('dashboard')", "Dashboard", show=False),
        Binding("2", "tab('policies')", "Policies", show=False),
        Binding("3", "tab('pods')", "Pods", show=False),
        Binding("4", "tab('matrix')", "Matrix", show=False),
        Binding("5", "tab('help')", "Help", show=False),
    ]

    def __init__(self, source: SnapshotSource, ports: list[PortSpec], store: Optional[SnapshotStore] = None):
        super().__init__()
        self.source = source
        self.ports = ports
        self.store = store or SnapshotStore()
        self.evaluator: ReachabilityEvaluator = self.store.evaluator()
        self.namespace_selector: Optional[NamespaceSelector] = None
        self.load_error: Optional[str] = None

    def compose(self) -> ComposeResult:
        with Container(id="main-container"):
            yield Static("kubereach", id="app-title")
            yield NamespaceSelector()

            with TabbedContent(initial="dashboard", id="main-tabs"):
                with TabPane("Dashboard", id="dashboard"):
                    yield Static("Loading snapshot...", id="dashboard-content")
                with TabPane("Policies", id="policies"):
                    yield DataTable(id="policies-table", zebra_stripes=True)
                with TabPane("Pods", id="pods"):
                    yield DataTable(id="pods-table", zebra_stripes=True, cursor_type="row")
                with TabPane("Matrix", id="matrix"):
                    with Vertical():
                        yield DataTable(id="matrix-table", zebra_stripes=True)
                        yield Static("", id="matrix-footer")
                with TabPane("Help", id="help"):
                    yield Static(self._get_help_content(), id="help-content")

            yield StatusBar(self.BINDINGS)

    def _get_help_content(self) -> str:
        """Get help content."""
        ports = ", ".join(str(port) for port in self.ports)
        return f"""kubereach

NAVIGATION:
  j/k          Move cursor
  n/p          Next/previous namespace
  1-5          Switch tabs (Dashboard/Policies/Pods/Matrix/Help)
  enter        Show inbound and outbound access of the selected pod

ACTIONS:
  r            Reload the snapshot
  q            Quit

MATRIX:
  Rows are source pods, columns are pods in the current namespace.
  Cells list the allowed ports out of: {ports}
"""

    def on_mount(self) -> None:
        """Initialize the screen on mount."""
        self.namespace_selector = self.query_one(NamespaceSelector)
        self.refresh_snapshot()

    @work(exclusive=True)
    async def refresh_snapshot(self) -> None:
        """Load a new snapshot in the background and swap it in."""
        try:
            await self.store.refresh(self.source)
            self.load_error = None
        except (ConfigurationError, ConnectionError, RuntimeError) as e:
            # The previous snapshot stays current
            self.load_error = str(e)

        self.evaluator = self.store.evaluator()
        if self.namespace_selector:
            self.namespace_selector.load(self.evaluator)
        self.query_one(StatusBar).update_status(self.store.generation, self.ports, self.load_error)
        self._render_all()

    def _current_namespace(self) -> str:
        return self.namespace_selector.current if self.namespace_selector else ""

    def _render_all(self) -> None:
        """Redraw every tab from the evaluator's snapshot."""
        snapshot = self.evaluator.snapshot
        namespace = self._current_namespace()

        dashboard = self.query_one("#dashboard-content", Static)
        if self.load_error:
            dashboard.update(
                Panel(
                    f"[red]{self.load_error}[/red]",
                    title="[bold red]Snapshot Error[/bold red]",
                    border_style="red",
                )
            )
        else:
            dashboard.update(DashboardTab.render(snapshot, self.evaluator, namespace, self.store.generation))

        PoliciesTab.update_table(self.query_one("#policies-table", DataTable), snapshot.get_policies_in(namespace))
        PodsTab.update_table(self.query_one("#pods-table", DataTable), snapshot.get_pods_in(namespace), self.evaluator)

        matrix = self.evaluator.build_matrix(
            self.ports,
            destinations=snapshot.get_pods_in(namespace),
            mode=EvaluationMode.CONNECTION,
        )
        MatrixTab.update_table(self.query_one("#matrix-table", DataTable), matrix)
        self.query_one("#matrix-footer", Static).update(MatrixTab.footer(matrix))

    def action_refresh(self) -> None:
        """Reload the snapshot."""
        self.query_one("#dashboard-content", Static).update("Loading snapshot...")
        self.refresh_snapshot()

    def action_next_namespace(self) -> None:
        """Switch to next namespace."""
        if self.namespace_selector:
            self.namespace_selector.cycle(1)
            self._render_all()

    def action_prev_namespace(self) -> None:
        """Switch to previous namespace."""
        if self.namespace_selector:
            self.namespace_selector.cycle(-1)
            self._render_all()

    def action_tab(self, tab: str) -> None:
        """Switch to a tab and focus its table."""
        tabs = self.query_one("#main-tabs", TabbedContent)
        tabs.active = tab
        if tab in TABLES:
            self.query_one(TABLES[tab], DataTable).focus()

    def action_cursor_up(self) -> None:
        """Move cursor up in the active table."""
        table = self._active_table()
        if table:
            table.action_cursor_up()

    def action_cursor_down(self) -> None:
        """Move cursor down in the active table."""
        table = self._active_table()
        if table:
            table.action_cursor_down()

    def _active_table(self) -> Optional[DataTable]:
        tabs = self.query_one("#main-tabs", TabbedContent)
        if tabs.active in TABLES:
            return self.query_one(TABLES[tabs.active], DataTable)
        return None

    def action_view_item(self) -> None:
        """View the selected pod."""
        tabs = self.query_one("#main-tabs", TabbedContent)
        if tabs.active in ("pods", "matrix"):
            table = self.query_one(TABLES[tabs.active], DataTable)
            if table.row_count:
                self._show_pod(str(table.get_row_at(table.cursor_row)[0]), qualified=tabs.active == "matrix")

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Handle row selection in the pods table (triggered by Enter key)."""
        if event.data_table.id == "pods-table" and event.row_key.value:
            self._show_pod(event.row_key.value, qualified=True)

    def on_data_table_cell_selected(self, event: DataTable.CellSelected) -> None:
        """Handle cell selection in the matrix table (triggered by Enter key)."""
        if event.data_table.id == "matrix-table":
            self._show_pod(str(event.data_table.get_row_at(event.coordinate.row)[0]), qualified=True)

    def _show_pod(self, reference: str, qualified: bool) -> None:
        """Open the detail screen for a pod given by name or namespace/name."""
        if not qualified:
            reference = f"{self._current_namespace()}/{reference}"
        pod = self.evaluator.snapshot.find_pod(reference)
        if pod:
            self.app.push_screen(PodDetailScreen(pod, self.evaluator, self.ports))

    def action_quit(self) -> None:
        """Quit action."""
        self.app.exit()
