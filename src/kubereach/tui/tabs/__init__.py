"""TUI tab components."""

from kubereach.tui.tabs.dashboard import DashboardTab
from kubereach.tui.tabs.matrix import MatrixTab
from kubereach.tui.tabs.pods import PodsTab
from kubereach.tui.tabs.policies import PoliciesTab

__all__ = ["DashboardTab", "MatrixTab", "PodsTab", "PoliciesTab"]
