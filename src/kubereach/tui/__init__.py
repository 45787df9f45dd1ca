"""Terminal user interface."""

from kubereach.tui.app import KubereachApp, run

__all__ = ["KubereachApp", "run"]
