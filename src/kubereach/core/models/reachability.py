"""Reachability query results."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kubereach.core.models.cluster import Pod
from kubereach.core.models.policy import Protocol


class EvaluationMode(Enum):
    """Which side(s) of a connection are evaluated."""

    INGRESS = "ingress"  # Destination namespace policies only
    EGRESS = "egress"  # Source namespace policies only
    CONNECTION = "connection"  # Both, as enforced by a real cluster


@dataclass(frozen=True)
class PortSpec:
    """A (protocol, port) pair to query."""

    protocol: Protocol
    port: int

    @classmethod
    def parse(cls, value: str) -> "PortSpec":
        """Parse ``TCP/80``, ``udp/53`` or a bare ``80`` (TCP)."""
        text = value.strip()
        if "/" in text:
            protocol_text, port_text = text.split("/", 1)
        else:
            protocol_text, port_text = "TCP", text

        protocol = Protocol.parse(protocol_text)
        if protocol is None:
            raise ValueError(f"Unsupported protocol: {protocol_text}")
        port = int(port_text)
        if not 1 <= port <= 65535:
            raise ValueError(f"Port out of range: {port}")
        return cls(protocol=protocol, port=port)

    def __str__(self) -> str:
        return f"{self.protocol.value}/{self.port}"


@dataclass
class Verdict:
    """Explained outcome of a single reachability query."""

    source: Pod
    destination: Pod
    protocol: str
    port: int
    allowed: bool

    ingress_allowed: bool = True
    egress_allowed: bool = True
    ingress_protected: bool = False
    egress_protected: bool = False

    # namespace/name of every policy that admitted the connection
    ingress_policies: list[str] = field(default_factory=list)
    egress_policies: list[str] = field(default_factory=list)

    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize the verdict."""
        return {
            "source": self.source.full_name,
            "destination": self.destination.full_name,
            "protocol": self.protocol,
            "port": self.port,
            "allowed": self.allowed,
            "ingress": {
                "protected": self.ingress_protected,
                "allowed": self.ingress_allowed,
                "policies": list(self.ingress_policies),
            },
            "egress": {
                "protected": self.egress_protected,
                "allowed": self.egress_allowed,
                "policies": list(self.egress_policies),
            },
            "reason": self.reason,
        }


@dataclass(frozen=True)
class MatrixEntry:
    """One cell of the reachability matrix."""

    source: str
    destination: str
    port: PortSpec
    allowed: bool


@dataclass
class ReachabilityMatrix:
    """Full table of allow/deny outcomes across (source, destination, port)."""

    mode: EvaluationMode
    sources: list[str] = field(default_factory=list)
    destinations: list[str] = field(default_factory=list)
    ports: list[PortSpec] = field(default_factory=list)
    cells: dict[tuple[str, str, PortSpec], bool] = field(default_factory=dict)

    def set(self, source: str, destination: str, port: PortSpec, allowed: bool) -> None:
        """Record an outcome."""
        self.cells[(source, destination, port)] = allowed

    def is_allowed(self, source: str, destination: str, port: PortSpec) -> bool:
        """Look up an outcome, denying unknown cells."""
        return self.cells.get((source, destination, port), False)

    def entries(self) -> Iterator[MatrixEntry]:
        """Iterate cells in source, destination, port order."""
        for source in self.sources:
            for destination in self.destinations:
                for port in self.ports:
                    key = (source, destination, port)
                    if key in self.cells:
                        yield MatrixEntry(source, destination, port, self.cells[key])

    def allowed(self) -> list[MatrixEntry]:
        """Get all allowed cells."""
        return [entry for entry in self.entries() if entry.allowed]

    def denied(self) -> list[MatrixEntry]:
        """Get all denied cells."""
        return [entry for entry in self.entries() if not entry.allowed]

    def summary(self) -> dict[str, int]:
        """Count cells by outcome."""
        allowed = sum(1 for value in self.cells.values() if value)
        return {"total": len(self.cells), "allowed": allowed, "denied": len(self.cells) - allowed}

    def to_rows(self) -> list[dict[str, Any]]:
        """Flatten the matrix into export rows."""
        return [
            {
                "source": entry.source,
                "destination": entry.destination,
                "protocol": entry.port.protocol.value,
                "port": entry.port.port,
                "allowed": entry.allowed,
            }
            for entry in self.entries()
        ]
