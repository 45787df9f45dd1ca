"""Theme package for kubereach TUI."""

from kubereach.tui.theme.dracula import THEME, Colors, Labels

__all__ = [
    "THEME",
    "Colors",
    "Labels",
]
