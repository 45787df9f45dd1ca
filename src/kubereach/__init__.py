"""kubereach - Kubernetes NetworkPolicy reachability analysis."""

from kubereach.cli import cli
from kubereach.tui import run as run_tui

__version__ = "0.1.0"
__all__ = ["cli", "run_tui"]
