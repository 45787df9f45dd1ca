"""Network policy models."""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kubereach.core.models.cluster import Pod
from kubereach.core.models.selectors import LabelSelector


class PolicyType(Enum):
    """Traffic direction a policy constrains."""

    INGRESS = "Ingress"
    EGRESS = "Egress"


class Protocol(Enum):
    """Protocols supported by NetworkPolicy ports."""

    TCP = "TCP"
    UDP = "UDP"
    SCTP = "SCTP"

    @classmethod
    def parse(cls, value: "str | Protocol | None") -> "Protocol | None":
        """Parse a protocol string, returning None when unsupported."""
        if isinstance(value, Protocol):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class PolicyPort:
    """Port restriction of an ingress or egress rule."""

    protocol: Protocol = Protocol.TCP
    port: int | str | None = None  # None means all ports of the protocol
    end_port: int | None = None  # Kept for display, ranges are not evaluated

    def matches(self, protocol: Protocol | None, port: int, destination: Pod | None = None) -> bool:
        """Check if (protocol, port) is admitted by this restriction.

        Named ports are resolved against the destination pod's container ports.
        """
        if protocol is None or protocol != self.protocol:
            return False
        if self.port is None:
            return True
        if isinstance(self.port, int):
            return port == self.port
        if destination is None:
            return False
        return destination.resolve_port(self.port) == port

    def __str__(self) -> str:
        if self.port is None:
            return f"{self.protocol.value}/*"
        return f"{self.protocol.value}/{self.port}"


@dataclass(frozen=True)
class IPBlock:
    """CIDR peer with optional exclusions."""

    cidr: str
    except_: tuple[str, ...] = ()

    def contains(self, ip: str | None) -> bool:
        """Check if an address falls inside the block and outside every exclusion."""
        if not ip:
            return False
        try:
            address = ipaddress.ip_address(ip)
            if address not in ipaddress.ip_network(self.cidr, strict=False):
                return False
            return not any(address in ipaddress.ip_network(excluded, strict=False) for excluded in self.except_)
        except ValueError:
            return False

    def __str__(self) -> str:
        if self.except_:
            return f"{self.cidr} except {', '.join(self.except_)}"
        return self.cidr


@dataclass(frozen=True)
class PolicyPeer:
    """A single from/to entry of a rule.

    A pod selector alone selects pods in the policy namespace. A namespace
    selector alone selects every pod in matching namespaces. Both together
    select matching pods restricted to matching namespaces.
    """

    pod_selector: LabelSelector | None = None
    namespace_selector: LabelSelector | None = None
    ip_block: IPBlock | None = None

    def describe(self) -> str:
        """Get a short human readable description."""
        if self.ip_block:
            return f"ipBlock {self.ip_block}"
        parts = []
        if self.namespace_selector is not None:
            parts.append(f"ns[{self.namespace_selector}]")
        if self.pod_selector is not None:
            parts.append(f"pod[{self.pod_selector}]")
        return " & ".join(parts) or "<none>"


@dataclass(frozen=True)
class IngressRule:
    """One entry of a policy's ingress list.

    Empty peers admit every source, empty ports admit every port.
    """

    peers: tuple[PolicyPeer, ...] = ()
    ports: tuple[PolicyPort, ...] = ()


@dataclass(frozen=True)
class EgressRule:
    """One entry of a policy's egress list.

    Empty peers admit every destination, empty ports admit every port.
    """

    peers: tuple[PolicyPeer, ...] = ()
    ports: tuple[PolicyPort, ...] = ()


@dataclass(frozen=True)
class NetworkPolicy:
    """Core model of a Kubernetes NetworkPolicy."""

    name: str
    namespace: str
    pod_selector: LabelSelector = field(default_factory=LabelSelector)
    policy_types: frozenset[PolicyType] = frozenset({PolicyType.INGRESS})
    ingress: tuple[IngressRule, ...] = ()
    egress: tuple[EgressRule, ...] = ()

    # Kubernetes metadata
    labels: dict[str, str] = field(default_factory=dict, compare=False)
    raw_manifest: dict[str, Any] | None = field(default=None, compare=False)

    def __hash__(self) -> int:
        """Make NetworkPolicy hashable for use in sets."""
        return hash((self.namespace, self.name))

    def get_full_name(self) -> str:
        """Get fully qualified policy name."""
        return f"{self.namespace}/{self.name}"

    def applies_to(self, direction: PolicyType) -> bool:
        """Check if the policy constrains the given direction."""
        return direction in self.policy_types

    def selects(self, pod: Pod) -> bool:
        """Check if the policy's pod selector picks the pod."""
        return pod.namespace == self.namespace and self.pod_selector.matches(pod.labels)

    def rules_for(self, direction: PolicyType) -> tuple[IngressRule, ...] | tuple[EgressRule, ...]:
        """Get the rules for one direction."""
        return self.ingress if direction == PolicyType.INGRESS else self.egress

    def is_default_deny(self, direction: PolicyType = PolicyType.INGRESS) -> bool:
        """Check if policy isolates every pod in its namespace without allowing anything."""
        return self.applies_to(direction) and self.pod_selector.is_empty() and not self.rules_for(direction)

    def get_ports(self) -> set[str]:
        """Get all port restrictions mentioned by the policy."""
        ports: set[str] = set()
        for rule in (*self.ingress, *self.egress):
            ports.update(str(port) for port in rule.ports)
        return ports
