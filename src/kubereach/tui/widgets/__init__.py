"""TUI widgets."""

from kubereach.tui.widgets.namespace_selector import NamespaceSelector
from kubereach.tui.widgets.status_bar import StatusBar

__all__ = ["NamespaceSelector", "StatusBar"]
