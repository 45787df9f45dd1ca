"""CLI command implementations."""

import json
import logging

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from kubereach.core.models import (
    ConfigurationError,
    EvaluationMode,
    NetworkPolicy,
    PolicyType,
    PortSpec,
    ReachabilityMatrix,
    Verdict,
)
from kubereach.core.services import ClusterSnapshot, ReachabilityEvaluator
from kubereach.exporters import get_exporter
from kubereach.k8s.manifests import ManifestSource
from kubereach.utils.config import Settings

console = Console()
logger = logging.getLogger(__name__)

DIRECTIONS = {
    "ingress": EvaluationMode.INGRESS,
    "egress": EvaluationMode.EGRESS,
    "both": EvaluationMode.CONNECTION,
}

EXIT_ALLOWED = 0
EXIT_DENIED = 1
EXIT_ERROR = 2


async def load_snapshot(settings: Settings, filenames: tuple[str, ...]) -> ClusterSnapshot:
    """Load a snapshot from manifests, or from the live cluster when none are given."""
    if filenames:
        return await ManifestSource(filenames).load()

    # Imported lazily so manifest-only use never touches kubeconfig
    from kubereach.k8s.client import K8sClient
    from kubereach.k8s.loader import SnapshotLoader

    k8s_client = K8sClient(settings.kubeconfig, settings.context)
    try:
        return await SnapshotLoader(k8s_client, settings.namespaces).load()
    finally:
        await k8s_client.close()


def _report_error(error: Exception) -> int:
    console.print(f"[red]Error:[/red] {error}", highlight=False, soft_wrap=True)
    return EXIT_ERROR


async def check_async(
    settings: Settings,
    filenames: tuple[str, ...],
    source_ref: str,
    destination_ref: str,
    protocol: str,
    port: int,
    direction: str,
    explain: bool,
    output: str,
) -> int:
    """Check a single connection and return the process exit code."""
    try:
        snapshot = await load_snapshot(settings, filenames)
    except (ConfigurationError, ConnectionError, RuntimeError) as e:
        return _report_error(e)

    source = snapshot.find_pod(source_ref)
    destination = snapshot.find_pod(destination_ref)
    for reference, pod in ((source_ref, source), (destination_ref, destination)):
        if pod is None:
            return _report_error(LookupError(f"pod '{reference}' not found"))

    assert source is not None and destination is not None
    verdict = ReachabilityEvaluator(snapshot).explain(source, destination, protocol, port, DIRECTIONS[direction])

    if output == "json":
        print(json.dumps(verdict.to_dict(), indent=2))
    else:
        _output_verdict(verdict, explain)

    return EXIT_ALLOWED if verdict.allowed else EXIT_DENIED


async def matrix_async(
    settings: Settings,
    filenames: tuple[str, ...],
    namespace: str | None,
    ports: tuple[str, ...],
    direction: str,
    output: str,
    output_file: str | None,
) -> int:
    """Print or export the reachability matrix."""
    try:
        port_specs = [PortSpec.parse(port) for port in ports] if ports else settings.port_specs()
    except ValueError as e:
        return _report_error(e)

    try:
        snapshot = await load_snapshot(settings, filenames)
    except (ConfigurationError, ConnectionError, RuntimeError) as e:
        return _report_error(e)

    destinations = snapshot.get_pods_in(namespace) if namespace else None
    matrix = ReachabilityEvaluator(snapshot).build_matrix(
        port_specs, destinations=destinations, mode=DIRECTIONS[direction]
    )

    if output == "table":
        if output_file:
            return _report_error(ValueError("--output-file requires json, yaml or csv output"))
        _output_matrix_table(matrix)
        return EXIT_ALLOWED

    exporter = get_exporter(output)
    if output_file:
        exporter.export_matrix(matrix, output_file)
        console.print(f"Wrote {matrix.summary()['total']} entries to {output_file}")
    else:
        print(exporter.render(matrix), end="" if output == "csv" else "\n")
    return EXIT_ALLOWED


async def list_policies_async(
    settings: Settings, filenames: tuple[str, ...], namespace: str | None, output: str
) -> int:
    """List network policies."""
    try:
        snapshot = await load_snapshot(settings, filenames)
    except (ConfigurationError, ConnectionError, RuntimeError) as e:
        return _report_error(e)

    policies = snapshot.get_policies_in(namespace) if namespace else list(snapshot.policies)

    if output == "json":
        _output_json(policies)
    else:
        _output_table(policies)
    return EXIT_ALLOWED


async def describe_pod_async(
    settings: Settings, filenames: tuple[str, ...], pod_ref: str, ports: tuple[str, ...]
) -> int:
    """Describe how policies affect one pod."""
    try:
        port_specs = [PortSpec.parse(port) for port in ports] if ports else settings.port_specs()
        snapshot = await load_snapshot(settings, filenames)
    except (ConfigurationError, ConnectionError, RuntimeError, ValueError) as e:
        return _report_error(e)

    pod = snapshot.find_pod(pod_ref)
    if pod is None:
        return _report_error(LookupError(f"pod '{pod_ref}' not found"))

    evaluator = ReachabilityEvaluator(snapshot)
    ingress_policies = evaluator.selecting_policies(pod, PolicyType.INGRESS)
    egress_policies = evaluator.selecting_policies(pod, PolicyType.EGRESS)

    content = f"""[bold]Pod:[/bold] {pod.full_name}
[bold]Labels:[/bold] {_format_labels(pod.labels)}

[bold]Ingress:[/bold] {_format_protection(ingress_policies)}
[bold]Egress:[/bold] {_format_protection(egress_policies)}
"""
    for port in port_specs:
        sources = evaluator.allowed_sources(pod, port.protocol, port.port, EvaluationMode.CONNECTION)
        destinations = evaluator.reachable_destinations(pod, port.protocol, port.port, EvaluationMode.CONNECTION)
        content += f"\n[bold]{port}[/bold]"
        content += f"\n  inbound from:  {', '.join(p.full_name for p in sources) or '[dim]none[/dim]'}"
        content += f"\n  outbound to:   {', '.join(p.full_name for p in destinations) or '[dim]none[/dim]'}"

    console.print(Panel(content, title=f"Pod: {pod.name}", border_style="cyan"))
    return EXIT_ALLOWED


def _format_labels(labels: dict[str, str]) -> str:
    if not labels:
        return "[dim]none[/dim]"
    return ", ".join(f"{k}={v}" for k, v in sorted(labels.items()))


def _format_protection(policies: list[NetworkPolicy]) -> str:
    if not policies:
        return "[green]not isolated[/green] (all traffic allowed)"
    return "[yellow]isolated[/yellow] by " + ", ".join(p.name for p in policies)


def _output_verdict(verdict: Verdict, explain: bool) -> None:
    """Output a verdict as text."""
    label = Text("ALLOW", style="bold green") if verdict.allowed else Text("DENY", style="bold red")
    line = Text.assemble(
        label,
        f" {verdict.source.full_name} -> {verdict.destination.full_name} {verdict.protocol}/{verdict.port}",
    )
    console.print(line)
    if explain:
        for part in verdict.reason.split("; "):
            console.print(f"  {part}", highlight=False)


def _output_matrix_table(matrix: ReachabilityMatrix) -> None:
    """Output a matrix as a table, one column per port."""
    if not matrix.cells:
        console.print("No pod pairs to evaluate")
        return

    table = Table(title=f"Reachability ({matrix.mode.value})")
    table.add_column("SOURCE")
    table.add_column("DESTINATION")
    for port in matrix.ports:
        table.add_column(str(port), justify="center")

    for source in matrix.sources:
        for destination in matrix.destinations:
            if (source, destination, matrix.ports[0]) not in matrix.cells:
                continue
            cells = [
                Text("allow", style="green") if matrix.is_allowed(source, destination, port) else Text("deny", style="red")
                for port in matrix.ports
            ]
            table.add_row(source, destination, *cells)

    console.print(table)
    summary = matrix.summary()
    console.print(f"{summary['allowed']} allowed, {summary['denied']} denied")


def _output_table(policies: list[NetworkPolicy]) -> None:
    """Output policies as a table."""
    if not policies:
        console.print("No policies found")
        return

    table = Table()
    table.add_column("NAMESPACE")
    table.add_column("NAME")
    table.add_column("TYPES")
    table.add_column("POD SELECTOR")
    table.add_column("INGRESS")
    table.add_column("EGRESS")

    for policy in policies:
        table.add_row(
            policy.namespace,
            policy.name,
            ",".join(sorted(t.value for t in policy.policy_types)),
            str(policy.pod_selector),
            str(len(policy.ingress)),
            str(len(policy.egress)),
        )

    console.print(table)


def _output_json(policies: list[NetworkPolicy]) -> None:
    """Output policies as JSON."""
    policy_data = []
    for policy in policies:
        policy_data.append(
            {
                "name": policy.name,
                "namespace": policy.namespace,
                "policy_types": sorted(t.value for t in policy.policy_types),
                "pod_selector": str(policy.pod_selector),
                "ingress_rules": len(policy.ingress),
                "egress_rules": len(policy.egress),
                "default_deny": policy.is_default_deny(),
                "ports": sorted(policy.get_ports()),
            }
        )

    print(json.dumps(policy_data, indent=2))
