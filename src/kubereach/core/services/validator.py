"""Construction-time validation of namespaces, pods and policies."""

import ipaddress
from collections.abc import Iterable

from kubereach.core.models import (
    LabelSelector,
    Namespace,
    NetworkPolicy,
    Pod,
    PolicyPeer,
    PolicyPort,
    PolicyValidation,
    SelectorOperator,
)


class SnapshotValidator:
    """Collect every validation finding before a snapshot is built."""

    def validate(
        self,
        namespaces: Iterable[Namespace],
        pods: Iterable[Pod],
        policies: Iterable[NetworkPolicy],
    ) -> list[PolicyValidation]:
        """Validate everything and return the results that carry errors."""
        namespaces = list(namespaces)
        known_namespaces = {ns.name for ns in namespaces}
        results: list[PolicyValidation] = []

        seen_namespaces: set[str] = set()
        for namespace in namespaces:
            validation = PolicyValidation(subject=namespace.name)
            if not namespace.name:
                validation.add_error("metadata.name", "namespace name is empty")
            if namespace.name in seen_namespaces:
                validation.add_error("metadata.name", "duplicate namespace")
            seen_namespaces.add(namespace.name)
            self._check_labels(validation, "metadata.labels", namespace.labels)
            results.append(validation)

        seen_pods: set[tuple[str, str]] = set()
        for pod in pods:
            validation = PolicyValidation(subject=pod.full_name)
            if pod.namespace not in known_namespaces:
                validation.add_error(
                    "metadata.namespace",
                    f"unknown namespace '{pod.namespace}'",
                    "declare the namespace before the pods in it",
                )
            if (pod.namespace, pod.name) in seen_pods:
                validation.add_error("metadata.name", "duplicate pod")
            seen_pods.add((pod.namespace, pod.name))
            self._check_labels(validation, "metadata.labels", pod.labels)
            results.append(validation)

        seen_policies: set[tuple[str, str]] = set()
        for policy in policies:
            validation = self.validate_policy(policy, known_namespaces)
            if (policy.namespace, policy.name) in seen_policies:
                validation.add_error("metadata.name", "duplicate policy")
            seen_policies.add((policy.namespace, policy.name))
            results.append(validation)

        return [result for result in results if result.has_errors()]

    def validate_policy(self, policy: NetworkPolicy, known_namespaces: set[str]) -> PolicyValidation:
        """Validate a single policy."""
        validation = PolicyValidation(subject=policy.get_full_name())

        if policy.namespace not in known_namespaces:
            validation.add_error("metadata.namespace", f"unknown namespace '{policy.namespace}'")
        if not policy.policy_types:
            validation.add_error("spec.policyTypes", "no policy types")

        self._check_selector(validation, "spec.podSelector", policy.pod_selector)

        for direction, rules in (("ingress", policy.ingress), ("egress", policy.egress)):
            peer_field = "from" if direction == "ingress" else "to"
            for i, rule in enumerate(rules):
                for j, peer in enumerate(rule.peers):
                    self._check_peer(validation, f"spec.{direction}[{i}].{peer_field}[{j}]", peer)
                for j, port in enumerate(rule.ports):
                    self._check_port(validation, f"spec.{direction}[{i}].ports[{j}]", port)

        return validation

    def _check_labels(self, validation: PolicyValidation, path: str, labels: dict[str, str]) -> None:
        for key in labels:
            if not key:
                validation.add_error(path, "label with empty key")

    def _check_peer(self, validation: PolicyValidation, path: str, peer: PolicyPeer) -> None:
        if peer.ip_block is not None:
            if peer.pod_selector is not None or peer.namespace_selector is not None:
                validation.add_error(path, "ipBlock cannot be combined with a selector")
            self._check_ip_block(validation, f"{path}.ipBlock", peer.ip_block.cidr, peer.ip_block.except_)
            return

        if peer.pod_selector is None and peer.namespace_selector is None:
            validation.add_error(path, "peer has neither podSelector, namespaceSelector nor ipBlock")
        if peer.pod_selector is not None:
            self._check_selector(validation, f"{path}.podSelector", peer.pod_selector)
        if peer.namespace_selector is not None:
            self._check_selector(validation, f"{path}.namespaceSelector", peer.namespace_selector)

    def _check_ip_block(
        self, validation: PolicyValidation, path: str, cidr: str, excluded: tuple[str, ...]
    ) -> None:
        try:
            network = ipaddress.ip_network(cidr, strict=False)
        except ValueError:
            validation.add_error(f"{path}.cidr", f"invalid CIDR '{cidr}'")
            return

        for value in excluded:
            try:
                excluded_network = ipaddress.ip_network(value, strict=False)
            except ValueError:
                validation.add_error(f"{path}.except", f"invalid CIDR '{value}'")
                continue
            if excluded_network.version != network.version or not excluded_network.subnet_of(network):
                validation.add_error(f"{path}.except", f"'{value}' is outside '{cidr}'")

    def _check_port(self, validation: PolicyValidation, path: str, port: PolicyPort) -> None:
        if isinstance(port.port, int):
            if not 1 <= port.port <= 65535:
                validation.add_error(f"{path}.port", f"port {port.port} out of range 1-65535")
            if port.end_port is not None and port.end_port < port.port:
                validation.add_error(f"{path}.endPort", "endPort is lower than port")
        elif isinstance(port.port, str) and not port.port.strip():
            validation.add_error(f"{path}.port", "empty named port")

    def _check_selector(self, validation: PolicyValidation, path: str, selector: LabelSelector) -> None:
        """Check a selector for malformed or conflicting requirements."""
        for key, value in selector.match_labels.items():
            if not key:
                validation.add_error(f"{path}.matchLabels", f"empty key with value '{value}'")

        # key -> allowed values, narrowed by every positive requirement
        required: dict[str, set[str]] = {key: {value} for key, value in selector.match_labels.items()}
        excluded: dict[str, set[str]] = {}
        must_exist: set[str] = set(selector.match_labels)
        must_not_exist: set[str] = set()

        for i, requirement in enumerate(selector.match_expressions):
            field_path = f"{path}.matchExpressions[{i}]"
            if not requirement.key:
                validation.add_error(field_path, "empty key")
                continue

            if requirement.operator.requires_values() and not requirement.values:
                validation.add_error(field_path, f"operator {requirement.operator.value} requires values")
            if not requirement.operator.requires_values() and requirement.values:
                validation.add_error(field_path, f"operator {requirement.operator.value} takes no values")

            if requirement.operator == SelectorOperator.IN:
                must_exist.add(requirement.key)
                if not requirement.values:
                    continue
                allowed = set(requirement.values)
                if requirement.key in required:
                    allowed &= required[requirement.key]
                required[requirement.key] = allowed
            elif requirement.operator == SelectorOperator.NOT_IN:
                excluded.setdefault(requirement.key, set()).update(requirement.values)
            elif requirement.operator == SelectorOperator.EXISTS:
                must_exist.add(requirement.key)
            else:
                must_not_exist.add(requirement.key)

        for key in sorted(must_exist & must_not_exist):
            validation.add_error(path, f"conflicting requirements: '{key}' must both exist and not exist")

        for key, allowed in sorted(required.items()):
            if key in must_not_exist:
                continue
            if not allowed - excluded.get(key, set()):
                validation.add_error(
                    path,
                    f"conflicting requirements: no value of '{key}' can satisfy the selector",
                    "the selector would never match anything",
                )
