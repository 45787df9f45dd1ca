"""Dashboard tab component."""

from rich.panel import Panel

from kubereach.core.models import PolicyType
from kubereach.core.services import ClusterSnapshot, ReachabilityEvaluator


class DashboardTab:
    """Dashboard tab logic."""

    @staticmethod
    def render(snapshot: ClusterSnapshot, evaluator: ReachabilityEvaluator, namespace: str, generation: int) -> Panel:
        """Render dashboard content."""
        if not snapshot.namespaces:
            return Panel(
                "[red]No snapshot loaded[/red]",
                title="[bold red]Empty Snapshot[/bold red]",
                border_style="red",
            )

        pods = snapshot.get_pods_in(namespace)
        policies = snapshot.get_policies_in(namespace)
        ingress_isolated = [pod for pod in pods if evaluator.is_protected(pod, PolicyType.INGRESS)]
        egress_isolated = [pod for pod in pods if evaluator.is_protected(pod, PolicyType.EGRESS)]
        default_deny = [policy for policy in policies if policy.is_default_deny()]

        content = f"""[bold]Cluster Overview[/bold]
{len(snapshot.namespaces)} namespaces, {len(snapshot.pods)} pods, {len(snapshot.policies)} policies
{len(snapshot.get_namespaces_with_policies())} namespaces with policies
Snapshot {generation}, captured {snapshot.captured_at:%Y-%m-%d %H:%M:%S}

[bold]Namespace {namespace}[/bold]
Pods: {len(pods)}
Policies: {len(policies)} ({len(default_deny)} default deny)
Ingress isolated: {len(ingress_isolated)}/{len(pods)}
Egress isolated: {len(egress_isolated)}/{len(pods)}"""

        return Panel(content, border_style="white")
