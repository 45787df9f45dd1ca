"""Status bar widget."""

from collections.abc import Iterable, Iterator

from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Static

from kubereach.core.models import PortSpec
from kubereach.tui.theme import Colors


class StatusBar(Horizontal):
    """Key hints for the visible bindings, and the state of the current snapshot."""

    def __init__(self, bindings: Iterable[Binding]) -> None:
        super().__init__(id="status-bar")
        self.hints = [f"{binding.key}:{binding.description.lower()}" for binding in bindings if binding.show]

    def compose(self) -> Iterator[Static]:
        for hint in self.hints:
            yield Static(hint, classes="key-binding")
        yield Static("", id="snapshot-status")

    @staticmethod
    def describe(generation: int, ports: list[PortSpec], error: str | None = None) -> str:
        """Describe the snapshot being shown."""
        if not generation:
            state = f"[{Colors.ERROR.value}]no snapshot[/]" if error else "loading"
        elif error:
            state = f"[{Colors.ERROR.value}]refresh failed[/], showing snapshot #{generation}"
        else:
            state = f"snapshot #{generation}"
        return f"{state} | ports: {', '.join(str(port) for port in ports)}"

    def update_status(self, generation: int, ports: list[PortSpec], error: str | None = None) -> None:
        """Show the current snapshot generation and refresh outcome."""
        self.query_one("#snapshot-status", Static).update(self.describe(generation, ports, error))
