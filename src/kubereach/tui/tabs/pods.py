"""Pods tab component."""

from typing import Any

from textual.widgets import DataTable

from kubereach.core.models import Pod, PolicyType
from kubereach.core.services import ReachabilityEvaluator
from kubereach.tui.theme import Labels


class PodsTab:
    """Pods tab logic."""

    @staticmethod
    def update_table(table: DataTable[Any], pods: list[Pod], evaluator: ReachabilityEvaluator) -> None:
        """Update the pods table."""
        table.clear(columns=True)

        table.add_column("Name")
        table.add_column("IP")
        table.add_column("Ingress")
        table.add_column("Egress")
        table.add_column("Policies")
        table.add_column("Labels")

        for pod in sorted(pods, key=lambda p: p.name):
            ingress_policies = evaluator.selecting_policies(pod, PolicyType.INGRESS)
            egress_policies = evaluator.selecting_policies(pod, PolicyType.EGRESS)
            names = {p.name for p in ingress_policies} | {p.name for p in egress_policies}

            # Show first few key=value pairs
            labels = sorted(pod.labels.items())
            labels_str = ", ".join(f"{k}={v}" for k, v in labels[:2])
            if len(labels) > 2:
                labels_str += f"... (+{len(labels) - 2})"

            table.add_row(
                pod.name,
                pod.ip or "-",
                Labels.protection(bool(ingress_policies)),
                Labels.protection(bool(egress_policies)),
                str(len(names)),
                labels_str or "-",
                key=pod.full_name,
            )
