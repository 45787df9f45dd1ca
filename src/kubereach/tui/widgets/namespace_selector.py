"""Namespace selector with per-namespace isolation counts."""

from collections.abc import Iterator

from textual.containers import Horizontal
from textual.widgets import Static

from kubereach.core.models import PolicyType
from kubereach.core.services import ReachabilityEvaluator
from kubereach.tui.theme import Colors


class NamespaceSelector(Horizontal):
    """Cycles through the snapshot's namespaces.

    Next to the selected namespace it shows how many of its pods are
    isolated for ingress and for egress.
    """

    def __init__(self) -> None:
        super().__init__(id="namespace-selector")
        self.namespaces: list[str] = []
        self.position = 0
        self._isolation: dict[str, str] = {}

    def compose(self) -> Iterator[Static]:
        yield Static("Namespace:", classes="namespace-label")
        yield Static("", id="current-namespace", classes="namespace-value")
        yield Static("", id="namespace-isolation", classes="namespace-isolation")

    @property
    def current(self) -> str:
        """The selected namespace, empty before a snapshot is loaded."""
        return self.namespaces[self.position] if self.namespaces else ""

    def load(self, evaluator: ReachabilityEvaluator) -> None:
        """Take the namespaces of a new snapshot, staying on the selected one if it still exists."""
        selected = self.current
        self.namespaces = [ns.name for ns in evaluator.snapshot.namespaces]
        self._isolation = {name: self.isolation(evaluator, name) for name in self.namespaces}
        self.position = self.namespaces.index(selected) if selected in self.namespaces else 0
        self._show()

    def cycle(self, step: int) -> str:
        """Move forward (positive step) or back through the namespaces, wrapping around."""
        if self.namespaces:
            self.position = (self.position + step) % len(self.namespaces)
            self._show()
        return self.current

    @staticmethod
    def isolation(evaluator: ReachabilityEvaluator, namespace: str) -> str:
        """Summarize how many pods of a namespace policies isolate."""
        pods = evaluator.snapshot.get_pods_in(namespace)
        if not pods:
            return f"[{Colors.MUTED.value}]no pods[/]"

        parts = []
        for direction in (PolicyType.INGRESS, PolicyType.EGRESS):
            isolated = sum(1 for pod in pods if evaluator.is_protected(pod, direction))
            color = Colors.SUCCESS if isolated == len(pods) else Colors.WARNING if isolated else Colors.ERROR
            parts.append(f"{direction.value.lower()} [{color.value}]{isolated}/{len(pods)}[/] isolated")
        return "  ".join(parts)

    def _show(self) -> None:
        if not self.namespaces:
            self.query_one("#current-namespace", Static).update("No namespaces")
            self.query_one("#namespace-isolation", Static).update("")
            return

        self.query_one("#current-namespace", Static).update(
            f"{self.current} ({self.position + 1}/{len(self.namespaces)})"
        )
        self.query_one("#namespace-isolation", Static).update(self._isolation[self.current])
