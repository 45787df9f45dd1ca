"""Main TUI application."""

import logging
from typing import TYPE_CHECKING

from textual.app import App

from kubereach.core.interfaces import SnapshotSource
from kubereach.core.models import PortSpec
from kubereach.k8s.manifests import ManifestSource
from kubereach.tui.screens import MainScreen
from kubereach.tui.theme import THEME
from kubereach.utils.config import Settings

if TYPE_CHECKING:
    from kubereach.k8s.client import K8sClient

logger = logging.getLogger(__name__)


class KubereachApp(App[None]):
    """kubereach TUI application."""

    CSS = """
    /* Hide scrollbars globally */
    * {
        scrollbar-size: 0 0;
    }

    /* Main container */
    #main-container {
        height: 100%;
        width: 100%;
    }

    /* App title */
    #app-title {
        height: 1;
        background: $primary;
        color: $text-primary;
        text-align: center;
        content-align: center middle;
        text-style: bold;
    }

    /* Dashboard content */
    #dashboard-content {
        padding: 1;
        background: $surface;
        color: $text;
        height: 1fr;
        width: 100%;
    }

    /* Namespace selector */
    #namespace-selector {
        height: 1;
        background: $surface;
        border-bottom: solid $primary;
    }

    .namespace-label {
        width: 12;
        text-style: bold;
        color: $text;
    }

    .namespace-value {
        color: $accent;
        text-style: bold;
        width: 30;
    }

    .namespace-isolation {
        color: $text-muted;
        width: 1fr;
    }

    /* Tabs */
    #main-tabs {
        height: 1fr;
    }

    TabbedContent > TabPane {
        padding: 1;
    }

    DataTable {
        height: 1fr;
        background: $surface;
        color: $text;
        border: solid $primary;
    }

    DataTable > .datatable--header {
        background: $primary;
        color: $text-primary;
        text-style: bold;
    }

    DataTable > .datatable--cursor {
        background: $accent;
        color: $text-accent;
    }

    DataTable > .datatable--hover {
        background: $primary-lighten-2;
        color: $text;
    }

    DataTable .datatable--even-row {
        background: $surface;
        color: $text;
    }

    DataTable .datatable--odd-row {
        background: $panel;
        color: $text;
    }

    #matrix-footer {
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }

    Tabs {
        background: $surface;
        color: $text;
    }

    Tab {
        background: $surface;
        color: $text-muted;
        border: none;
        margin: 0 1;
        padding: 0 2;
    }

    Tab:hover {
        background: $primary;
        color: $text;
    }

    Tab.-active {
        background: $accent;
        color: $background;
        text-style: bold;
    }

    /* Status bar */
    #status-bar {
        height: 1;
        background: $surface;
        border-top: solid $primary;
        dock: bottom;
    }

    .key-binding {
        margin: 0 1;
        color: $text-muted;
    }

    .key-binding:first-child {
        margin-left: 2;
    }

    #snapshot-status {
        width: 1fr;
        text-align: right;
        color: $text-muted;
        margin-right: 2;
    }

    /* Help content */
    #help-content {
        padding: 2;
        background: $surface;
        color: $text;
    }

    /* Pod detail screen */
    #detail-container {
        height: 100%;
        width: 100%;
        padding: 1;
    }

    #pod-detail {
        height: auto;
        width: 100%;
    }
    """

    def __init__(
        self,
        source: SnapshotSource,
        ports: list[PortSpec],
        cluster_client: "K8sClient | None" = None,
    ):
        super().__init__()
        self.source = source
        self.ports = ports
        self.cluster_client = cluster_client

    def on_mount(self) -> None:
        """Set up the application."""
        self.title = "kubereach"
        self.register_theme(THEME)
        self.theme = THEME.name
        self.push_screen(MainScreen(self.source, self.ports))

    async def on_unmount(self) -> None:
        """Release the cluster connection."""
        if self.cluster_client is not None:
            await self.cluster_client.close()


def run(settings: Settings, filenames: tuple[str, ...] = ()) -> None:
    """Run the TUI application against manifests or the live cluster."""
    cluster_client = None
    source: SnapshotSource
    if filenames:
        source = ManifestSource(filenames)
    else:
        from kubereach.k8s.client import K8sClient
        from kubereach.k8s.loader import SnapshotLoader

        cluster_client = K8sClient(settings.kubeconfig, settings.context)
        source = SnapshotLoader(cluster_client, settings.namespaces)

    logger.info("Starting TUI with %s", type(source).__name__)
    app = KubereachApp(source, settings.port_specs(), cluster_client)
    # Disable mouse support to allow terminal text selection
    app.run(mouse=False)
