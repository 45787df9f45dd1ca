"""TUI screens."""

from kubereach.tui.screens.main import MainScreen
from kubereach.tui.screens.pod_detail import PodDetailScreen

__all__ = ["MainScreen", "PodDetailScreen"]
