"""Dracula theme for the TUI.

Uses the Dracula color palette: https://draculatheme.com/
"""

from __future__ import annotations

from enum import Enum

from textual.theme import Theme


class Colors(str, Enum):
    """Kubereach color palette for Dracula theme."""

    # Core colors
    BACKGROUND = "#000000"
    FOREGROUND = "#f8f8f2"
    SURFACE = "#44475a"  # Borders, elevated surfaces
    MUTED = "#6272a4"  # Dim text, hints

    # Semantic accent colors
    PRIMARY = "#bd93f9"
    SECONDARY = "#ff79c6"
    ACCENT = "#8be9fd"

    # Status colors
    SUCCESS = "#50fa7b"
    WARNING = "#ffb86c"
    ERROR = "#ff5555"
    INFO = "#f1fa8c"


class Labels:
    """Formatted labels for table cells."""

    ALLOW = f"[{Colors.SUCCESS.value}]ALLOW[/]"
    DENY = f"[{Colors.ERROR.value}]DENY[/]"
    ISOLATED = f"[{Colors.WARNING.value}]isolated[/]"
    OPEN = f"[{Colors.MUTED.value}]open[/]"

    @staticmethod
    def verdict(allowed: bool) -> str:
        """Get label for an allow/deny outcome."""
        return Labels.ALLOW if allowed else Labels.DENY

    @staticmethod
    def protection(protected: bool) -> str:
        """Get label for a pod's isolation state."""
        return Labels.ISOLATED if protected else Labels.OPEN


# Textual Theme
THEME = Theme(
    name="kubereach-dracula",
    dark=True,
    primary=Colors.PRIMARY.value,
    secondary=Colors.SECONDARY.value,
    accent=Colors.ACCENT.value,
    foreground=Colors.FOREGROUND.value,
    background=Colors.BACKGROUND.value,
    surface=Colors.SURFACE.value,
    panel=Colors.SURFACE.value,
    success=Colors.SUCCESS.value,
    warning=Colors.WARNING.value,
    error=Colors.ERROR.value,
    variables={
        "muted": Colors.MUTED.value,
        "info": Colors.INFO.value,
    },
)
