"""Model builders shared by the unit tests."""

from kubereach.core.models import Namespace, NetworkPolicy, Pod
from kubereach.core.services import ClusterSnapshot, ReachabilityEvaluator


def namespace(name: str, **labels: str) -> Namespace:
    """Build a namespace carrying the automatic name label."""
    return Namespace(name=name, labels={"kubernetes.io/metadata.name": name, **labels})


def pod(reference: str, ip: str | None = None, ports: dict[str, int] | None = None, **labels: str) -> Pod:
    """Build a pod from a namespace/name reference."""
    namespace_name, name = reference.split("/")
    return Pod(name=name, namespace=namespace_name, labels=labels, ip=ip, container_ports=ports or {})


def evaluator_for(
    namespaces: list[Namespace], pods: list[Pod], policies: list[NetworkPolicy]
) -> ReachabilityEvaluator:
    """Build a validated snapshot and an evaluator bound to it."""
    return ReachabilityEvaluator(ClusterSnapshot.build(namespaces, pods, policies))
