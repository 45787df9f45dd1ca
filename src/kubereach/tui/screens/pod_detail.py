"""Pod detail screen for viewing who can reach a pod and what it can reach."""

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Header, LoadingIndicator, Static
from rich.console import RenderableType
from rich.panel import Panel

from kubereach.core.models import EvaluationMode, NetworkPolicy, Pod, PolicyType, PortSpec
from kubereach.core.services import ReachabilityEvaluator


class PodDetailScreen(Screen[None]):
    """Screen for viewing the policies and peers of a pod."""

    BINDINGS = [
        Binding("escape", "app.pop_screen", "Back"),
    ]

    def __init__(self, pod: Pod, evaluator: ReachabilityEvaluator, ports: list[PortSpec]):
        super().__init__()
        self.pod = pod
        self.evaluator = evaluator
        self.ports = ports
        self.inbound: dict[PortSpec, list[Pod]] = {}
        self.outbound: dict[PortSpec, list[Pod]] = {}

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with VerticalScroll(id="detail-container"):
            yield LoadingIndicator(id="loading")
            yield Static("", id="pod-detail")
        yield Footer()

    def on_mount(self) -> None:
        """Initialize the pod detail view."""
        self.query_one("#pod-detail", Static).display = False
        self.call_after_refresh(self.load_pod_data)

    @work(exclusive=True)
    async def load_pod_data(self) -> None:
        """Evaluate inbound and outbound access in the background."""
        for port in self.ports:
            self.inbound[port] = self.evaluator.allowed_sources(
                self.pod, port.protocol, port.port, EvaluationMode.CONNECTION
            )
            self.outbound[port] = self.evaluator.reachable_destinations(
                self.pod, port.protocol, port.port, EvaluationMode.CONNECTION
            )

        self.query_one("#loading", LoadingIndicator).display = False
        detail_widget = self.query_one("#pod-detail", Static)
        detail_widget.update(self._format_pod_detail())
        detail_widget.display = True

    def _format_pod_detail(self) -> RenderableType:
        """Format the complete pod detail."""
        sections = [
            self._format_overview(),
            self._format_policies(),
            self._format_access("[bold green]Inbound Access[/bold green]", self.inbound, "yellow"),
            self._format_access("[bold blue]Outbound Access[/bold blue]", self.outbound, "green"),
        ]
        return Panel("\n\n".join(sections), title=f"[bold]Pod: {self.pod.name}[/bold]", border_style="blue")

    def _format_overview(self) -> str:
        lines = ["[bold]Pod Overview[/bold]"]
        lines.append(f"Name: {self.pod.name}")
        lines.append(f"Namespace: {self.pod.namespace}")
        lines.append(f"IP: {self.pod.ip or '-'}")

        if self.pod.container_ports:
            ports = ", ".join(f"{name}={port}" for name, port in sorted(self.pod.container_ports.items()))
            lines.append(f"Named ports: {ports}")

        if self.pod.labels:
            lines.append("[bold]Labels:[/bold]")
            for key, value in sorted(self.pod.labels.items()):
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)

    def _format_policies(self) -> str:
        lines = ["[bold]Selecting Policies[/bold]"]
        for direction in (PolicyType.INGRESS, PolicyType.EGRESS):
            policies = self.evaluator.selecting_policies(self.pod, direction)
            lines.append(f"{direction.value}: {self._format_policy_names(policies)}")
        return "\n".join(lines)

    @staticmethod
    def _format_policy_names(policies: list[NetworkPolicy]) -> str:
        if not policies:
            return "[dim]not isolated (all traffic allowed)[/dim]"
        return ", ".join(policy.name for policy in policies)

    @staticmethod
    def _format_access(title: str, access: dict[PortSpec, list[Pod]], style: str) -> str:
        lines = [title]
        for port, pods in access.items():
            lines.append(f"\n[cyan]{port}:[/cyan]")
            if not pods:
                lines.append("  [red]No pods allowed[/red]")
            for pod in sorted(pods, key=lambda p: p.full_name):
                lines.append(f"  • [{style}]{pod.full_name}[/{style}]")
        return "\n".join(lines)
