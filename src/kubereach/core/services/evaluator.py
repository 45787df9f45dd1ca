"""Reachability evaluation over a cluster snapshot."""

import logging
from collections.abc import Iterable

from kubereach.core.models import (
    EvaluationMode,
    NetworkPolicy,
    Pod,
    PolicyPeer,
    PolicyType,
    PortSpec,
    Protocol,
    ReachabilityMatrix,
    Verdict,
)
from kubereach.core.models.policy import EgressRule, IngressRule
from kubereach.core.services.snapshot import ClusterSnapshot

logger = logging.getLogger(__name__)


class ReachabilityEvaluator:
    """Decide whether traffic between two pods is permitted.

    The evaluator is a pure predicate over the snapshot it was created with.
    Every selecting policy is evaluated and their results are unioned, so
    declaration order never matters. Evaluation never raises. A pod no policy
    selects is open, even in a namespace the snapshot does not know, while
    peers the snapshot cannot resolve never match a selector.
    """

    def __init__(self, snapshot: ClusterSnapshot):
        self.snapshot = snapshot
        self._namespaces = {ns.name: ns for ns in snapshot.namespaces}
        self._policies_by_namespace: dict[str, list[NetworkPolicy]] = {}
        for policy in snapshot.policies:
            self._policies_by_namespace.setdefault(policy.namespace, []).append(policy)

    def selecting_policies(self, pod: Pod, direction: PolicyType) -> list[NetworkPolicy]:
        """Get the policies of the pod's namespace that select it for a direction."""
        return [
            policy
            for policy in self._policies_by_namespace.get(pod.namespace, [])
            if policy.applies_to(direction) and policy.selects(pod)
        ]

    def is_protected(self, pod: Pod, direction: PolicyType = PolicyType.INGRESS) -> bool:
        """Check if at least one policy isolates the pod for a direction."""
        return bool(self.selecting_policies(pod, direction))

    def is_allowed(self, source: Pod, destination: Pod, protocol: str | Protocol, port: int) -> bool:
        """Check if the destination admits ingress from the source.

        Only the destination namespace's ingress policies are consulted.
        """
        allowed, _, _ = self._evaluate(PolicyType.INGRESS, source, destination, protocol, port)
        return allowed

    def is_egress_allowed(self, source: Pod, destination: Pod, protocol: str | Protocol, port: int) -> bool:
        """Check if the source may send to the destination.

        Only the source namespace's egress policies are consulted.
        """
        allowed, _, _ = self._evaluate(PolicyType.EGRESS, source, destination, protocol, port)
        return allowed

    def is_connection_allowed(self, source: Pod, destination: Pod, protocol: str | Protocol, port: int) -> bool:
        """Check both egress at the source and ingress at the destination."""
        return self.is_egress_allowed(source, destination, protocol, port) and self.is_allowed(
            source, destination, protocol, port
        )

    def check(
        self,
        source: Pod,
        destination: Pod,
        protocol: str | Protocol,
        port: int,
        mode: EvaluationMode = EvaluationMode.INGRESS,
    ) -> bool:
        """Evaluate a query in the given mode."""
        if mode == EvaluationMode.INGRESS:
            return self.is_allowed(source, destination, protocol, port)
        if mode == EvaluationMode.EGRESS:
            return self.is_egress_allowed(source, destination, protocol, port)
        return self.is_connection_allowed(source, destination, protocol, port)

    def explain(
        self,
        source: Pod,
        destination: Pod,
        protocol: str | Protocol,
        port: int,
        mode: EvaluationMode = EvaluationMode.CONNECTION,
    ) -> Verdict:
        """Evaluate a query and record which policies decided it."""
        ingress_allowed, ingress_protected, ingress_policies = self._evaluate(
            PolicyType.INGRESS, source, destination, protocol, port
        )
        egress_allowed, egress_protected, egress_policies = self._evaluate(
            PolicyType.EGRESS, source, destination, protocol, port
        )

        if mode == EvaluationMode.INGRESS:
            allowed = ingress_allowed
        elif mode == EvaluationMode.EGRESS:
            allowed = egress_allowed
        else:
            allowed = ingress_allowed and egress_allowed

        protocol_text = protocol.value if isinstance(protocol, Protocol) else str(protocol).upper()
        verdict = Verdict(
            source=source,
            destination=destination,
            protocol=protocol_text,
            port=port,
            allowed=allowed,
            ingress_allowed=ingress_allowed,
            egress_allowed=egress_allowed,
            ingress_protected=ingress_protected,
            egress_protected=egress_protected,
            ingress_policies=ingress_policies,
            egress_policies=egress_policies,
        )
        verdict.reason = self._reason(verdict, mode)
        return verdict

    def allowed_sources(
        self,
        destination: Pod,
        protocol: str | Protocol,
        port: int,
        mode: EvaluationMode = EvaluationMode.INGRESS,
    ) -> list[Pod]:
        """Get every pod that may reach the destination."""
        return [
            pod for pod in self.snapshot.pods if pod != destination and self.check(pod, destination, protocol, port, mode)
        ]

    def reachable_destinations(
        self,
        source: Pod,
        protocol: str | Protocol,
        port: int,
        mode: EvaluationMode = EvaluationMode.EGRESS,
    ) -> list[Pod]:
        """Get every pod the source may reach."""
        return [pod for pod in self.snapshot.pods if pod != source and self.check(source, pod, protocol, port, mode)]

    def build_matrix(
        self,
        ports: Iterable[PortSpec],
        sources: Iterable[Pod] | None = None,
        destinations: Iterable[Pod] | None = None,
        mode: EvaluationMode = EvaluationMode.INGRESS,
    ) -> ReachabilityMatrix:
        """Evaluate every (source, destination, port) triple.

        A pod is never paired with itself.
        """
        ports = list(ports)
        source_pods = list(self.snapshot.pods if sources is None else sources)
        destination_pods = list(self.snapshot.pods if destinations is None else destinations)

        matrix = ReachabilityMatrix(
            mode=mode,
            sources=[pod.full_name for pod in source_pods],
            destinations=[pod.full_name for pod in destination_pods],
            ports=ports,
        )
        for source in source_pods:
            for destination in destination_pods:
                if source == destination:
                    continue
                for port in ports:
                    allowed = self.check(source, destination, port.protocol, port.port, mode)
                    matrix.set(source.full_name, destination.full_name, port, allowed)

        logger.debug("Built %s matrix: %s", mode.value, matrix.summary())
        return matrix

    def _evaluate(
        self,
        direction: PolicyType,
        source: Pod,
        destination: Pod,
        protocol: str | Protocol,
        port: int,
    ) -> tuple[bool, bool, list[str]]:
        """Evaluate one direction.

        Returns:
            Tuple of (allowed, protected, names of admitting policies)
        """
        subject, peer = (destination, source) if direction == PolicyType.INGRESS else (source, destination)

        policies = self.selecting_policies(subject, direction)
        if not policies:
            return True, False, []

        parsed_protocol = Protocol.parse(protocol)
        admitting = [
            policy.get_full_name()
            for policy in policies
            if self._policy_admits(policy, direction, peer, destination, parsed_protocol, port)
        ]
        return bool(admitting), True, admitting

    def _policy_admits(
        self,
        policy: NetworkPolicy,
        direction: PolicyType,
        peer: Pod,
        destination: Pod,
        protocol: Protocol | None,
        port: int,
    ) -> bool:
        """Check if any rule of the policy admits the peer on (protocol, port)."""
        return any(
            self._rule_admits(policy, rule, peer, destination, protocol, port) for rule in policy.rules_for(direction)
        )

    def _rule_admits(
        self,
        policy: NetworkPolicy,
        rule: IngressRule | EgressRule,
        peer: Pod,
        destination: Pod,
        protocol: Protocol | None,
        port: int,
    ) -> bool:
        if rule.peers and not any(self._peer_matches(policy, spec, peer) for spec in rule.peers):
            return False
        if rule.ports and not any(spec.matches(protocol, port, destination) for spec in rule.ports):
            return False
        return True

    def _peer_matches(self, policy: NetworkPolicy, peer: PolicyPeer, pod: Pod) -> bool:
        """Check if a pod is in the candidate set of a peer."""
        if peer.ip_block is not None:
            return peer.ip_block.contains(pod.ip)

        if peer.pod_selector is None and peer.namespace_selector is None:
            return False

        if peer.namespace_selector is None:
            # Pod selector alone is scoped to the policy's own namespace
            if pod.namespace != policy.namespace:
                return False
        else:
            namespace = self._namespaces.get(pod.namespace)
            if namespace is None or not peer.namespace_selector.matches(namespace.labels):
                return False

        return peer.pod_selector is None or peer.pod_selector.matches(pod.labels)

    def _reason(self, verdict: Verdict, mode: EvaluationMode) -> str:
        parts = []
        if mode != EvaluationMode.EGRESS:
            parts.append(
                self._direction_reason(
                    "ingress",
                    verdict.destination,
                    verdict.ingress_protected,
                    verdict.ingress_allowed,
                    verdict.ingress_policies,
                )
            )
        if mode != EvaluationMode.INGRESS:
            parts.append(
                self._direction_reason(
                    "egress",
                    verdict.source,
                    verdict.egress_protected,
                    verdict.egress_allowed,
                    verdict.egress_policies,
                )
            )
        return "; ".join(parts)

    def _direction_reason(
        self, direction: str, subject: Pod, protected: bool, allowed: bool, policies: list[str]
    ) -> str:
        if subject.namespace not in self._namespaces:
            return f"{direction}: {subject.full_name} is not isolated (unknown namespace '{subject.namespace}')"
        if not protected:
            return f"{direction}: {subject.full_name} is not isolated"
        if allowed:
            return f"{direction}: allowed by {', '.join(policies)}"
        return f"{direction}: {subject.full_name} is isolated and no rule matches"
