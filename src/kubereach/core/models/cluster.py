"""Namespace and pod models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Namespace:
    """Represents a Kubernetes namespace and its labels."""

    name: str
    labels: dict[str, str] = field(default_factory=dict)

    def __hash__(self) -> int:
        """Make Namespace hashable for use in sets."""
        return hash(self.name)

    def has_label(self, key: str, value: str | None = None) -> bool:
        """Check if namespace has a specific label."""
        if value is None:
            return key in self.labels
        return self.labels.get(key) == value


@dataclass(frozen=True)
class Pod:
    """Represents a pod as seen by network policy evaluation."""

    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)

    # Pod IP, used by ipBlock peers
    ip: str | None = None

    # Named container ports (name -> number), used to resolve named policy ports
    container_ports: dict[str, int] = field(default_factory=dict)

    def __hash__(self) -> int:
        """Make Pod hashable for use in sets."""
        return hash((self.namespace, self.name))

    @property
    def full_name(self) -> str:
        """Get fully qualified pod name."""
        return f"{self.namespace}/{self.name}"

    def resolve_port(self, name: str) -> int | None:
        """Resolve a named container port to its number."""
        return self.container_ports.get(name)
