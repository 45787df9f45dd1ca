"""Policies tab component."""

from typing import Any

from rich.text import Text
from textual.widgets import DataTable

from kubereach.core.models import NetworkPolicy


class PoliciesTab:
    """Policies tab logic."""

    @staticmethod
    def update_table(table: DataTable[Any], policies: list[NetworkPolicy]) -> None:
        """Update the policies table."""
        table.clear(columns=True)

        table.add_column("Name")
        table.add_column("Types")
        table.add_column("Pod Selector")
        table.add_column("Ingress")
        table.add_column("Egress")
        table.add_column("Ports")

        for policy in policies:
            types = ",".join(sorted(t.value for t in policy.policy_types))
            ports = ", ".join(sorted(policy.get_ports())) or "-"

            # Default deny policies are highlighted
            if policy.is_default_deny():
                table.add_row(
                    Text(policy.name, style="yellow"),
                    Text(types, style="yellow"),
                    Text(str(policy.pod_selector), style="yellow"),
                    Text(str(len(policy.ingress)), style="yellow"),
                    Text(str(len(policy.egress)), style="yellow"),
                    Text(ports, style="yellow"),
                    key=policy.get_full_name(),
                )
            else:
                table.add_row(
                    policy.name,
                    types,
                    str(policy.pod_selector),
                    str(len(policy.ingress)),
                    str(len(policy.egress)),
                    ports,
                    key=policy.get_full_name(),
                )
