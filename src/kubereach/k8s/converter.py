"""Kubernetes object converter.

Accepts objects either as written in manifests (camelCase) or as produced by
the official client's ``to_dict()`` (snake_case, with ``_from``/``_except``).
Malformed objects raise ConfigurationError naming the offending field.
"""

import logging
from typing import Any

from kubereach.core.models import (
    ConfigurationError,
    EgressRule,
    IngressRule,
    IPBlock,
    LabelSelector,
    Namespace,
    NetworkPolicy,
    Pod,
    PolicyPeer,
    PolicyPort,
    PolicyType,
    Protocol,
    SelectorOperator,
    SelectorRequirement,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Label set on every namespace by the API server since Kubernetes 1.21
NAMESPACE_NAME_LABEL = "kubernetes.io/metadata.name"


def _get(data: dict[str, Any], *keys: str) -> Any:
    """Return the first present, non-None value among alternative key spellings."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


class NetworkPolicyConverter:
    """Convert Kubernetes objects to kubereach models."""

    def convert(self, objects: list[dict[str, Any]]) -> tuple[list[Namespace], list[Pod], list[NetworkPolicy]]:
        """Convert a mixed list of objects, dispatching on kind."""
        namespaces: list[Namespace] = []
        pods: list[Pod] = []
        policies: list[NetworkPolicy] = []

        for obj in objects:
            kind = obj.get("kind")
            if kind == "Namespace":
                namespaces.append(self.convert_namespace(obj))
            elif kind == "Pod":
                pods.append(self.convert_pod(obj))
            elif kind == "NetworkPolicy":
                policies.append(self.convert_network_policy(obj))
            else:
                logger.debug("Skipping unsupported kind %s", kind)

        return namespaces, pods, policies

    def convert_namespace(self, k8s_object: dict[str, Any]) -> Namespace:
        """Convert a Namespace object."""
        metadata = self._mapping(k8s_object.get("metadata"), "Namespace", "metadata")
        name = str(metadata.get("name") or "")
        labels = self._labels(metadata.get("labels"), name or "Namespace", "metadata.labels")
        if name:
            labels.setdefault(NAMESPACE_NAME_LABEL, name)
        return Namespace(name=name, labels=labels)

    def convert_pod(self, k8s_object: dict[str, Any], default_namespace: str = "default") -> Pod:
        """Convert a Pod object.

        Raises:
            ConfigurationError: on malformed sections or non-numeric container ports.
        """
        metadata = self._mapping(k8s_object.get("metadata"), "Pod", "metadata")
        name = str(metadata.get("name") or "")
        namespace = str(metadata.get("namespace") or default_namespace)
        subject = f"{namespace}/{name}"
        spec = self._mapping(k8s_object.get("spec"), subject, "spec")
        status = self._mapping(k8s_object.get("status"), subject, "status")

        container_ports: dict[str, int] = {}
        for i, container in self._entries(spec.get("containers"), subject, "spec.containers"):
            path = f"spec.containers[{i}].ports"
            for j, port in self._entries(container.get("ports"), subject, path):
                port_name = port.get("name")
                number = _get(port, "containerPort", "container_port")
                if port_name and number is not None:
                    container_ports[str(port_name)] = self._integer(number, subject, f"{path}[{j}].containerPort")

        ip = _get(status, "podIP", "pod_ip")
        return Pod(
            name=name,
            namespace=namespace,
            labels=self._labels(metadata.get("labels"), subject, "metadata.labels"),
            ip=str(ip) if ip is not None else None,
            container_ports=container_ports,
        )

    def convert_network_policy(self, k8s_object: dict[str, Any], default_namespace: str = "default") -> NetworkPolicy:
        """Convert a NetworkPolicy object.

        Raises:
            ConfigurationError: on malformed sections, unknown policy types,
                operators or protocols, and non-numeric port ranges.
        """
        metadata = self._mapping(k8s_object.get("metadata"), "NetworkPolicy", "metadata")
        name = str(metadata.get("name") or "")
        namespace = str(metadata.get("namespace") or default_namespace)
        subject = f"{namespace}/{name}"
        spec = self._mapping(k8s_object.get("spec"), subject, "spec")

        ingress_data = self._entries(spec.get("ingress"), subject, "spec.ingress")
        egress_data = self._entries(spec.get("egress"), subject, "spec.egress")

        return NetworkPolicy(
            name=name,
            namespace=namespace,
            pod_selector=self.convert_selector(
                _get(spec, "podSelector", "pod_selector"), subject, "spec.podSelector"
            ),
            policy_types=self._convert_policy_types(
                _get(spec, "policyTypes", "policy_types"), bool(egress_data), subject
            ),
            ingress=tuple(
                IngressRule(
                    peers=self._convert_peers(_get(rule, "from", "_from"), subject, f"spec.ingress[{i}].from"),
                    ports=self._convert_ports(rule.get("ports"), subject, f"spec.ingress[{i}].ports"),
                )
                for i, rule in ingress_data
            ),
            egress=tuple(
                EgressRule(
                    peers=self._convert_peers(_get(rule, "to", "_to"), subject, f"spec.egress[{i}].to"),
                    ports=self._convert_ports(rule.get("ports"), subject, f"spec.egress[{i}].ports"),
                )
                for i, rule in egress_data
            ),
            labels=self._labels(metadata.get("labels"), subject, "metadata.labels"),
            raw_manifest=k8s_object,
        )

    def convert_selector(self, data: Any, subject: str, path: str) -> LabelSelector:
        """Convert a label selector; a missing selector selects everything."""
        data = self._mapping(data, subject, path)
        if not data:
            return LabelSelector()

        requirements = []
        expressions = _get(data, "matchExpressions", "match_expressions")
        for i, expression in self._entries(expressions, subject, f"{path}.matchExpressions"):
            field_path = f"{path}.matchExpressions[{i}]"
            operator_text = expression.get("operator")
            try:
                operator = SelectorOperator(operator_text)
            except ValueError:
                raise self._error(subject, f"{field_path}.operator", f"unknown operator '{operator_text}'") from None
            values = self._sequence(expression.get("values"), subject, f"{field_path}.values")
            requirements.append(
                SelectorRequirement(
                    key=str(expression.get("key") or ""),
                    operator=operator,
                    values=tuple(str(value) for value in values),
                )
            )

        return LabelSelector(
            match_labels=self._labels(_get(data, "matchLabels", "match_labels"), subject, f"{path}.matchLabels"),
            match_expressions=tuple(requirements),
        )

    def _convert_policy_types(self, data: Any, has_egress: bool, subject: str) -> frozenset[PolicyType]:
        values = self._sequence(data, subject, "spec.policyTypes")
        if not values:
            # API server defaulting
            types = {PolicyType.INGRESS}
            if has_egress:
                types.add(PolicyType.EGRESS)
            return frozenset(types)

        types = set()
        for i, value in enumerate(values):
            try:
                types.add(PolicyType(value))
            except ValueError:
                raise self._error(subject, f"spec.policyTypes[{i}]", f"unknown policy type '{value}'") from None
        return frozenset(types)

    def _convert_peers(self, data: Any, subject: str, path: str) -> tuple[PolicyPeer, ...]:
        peers = []
        for i, entry in self._entries(data, subject, path):
            pod_selector = _get(entry, "podSelector", "pod_selector")
            namespace_selector = _get(entry, "namespaceSelector", "namespace_selector")
            ip_block = _get(entry, "ipBlock", "ip_block")

            peers.append(
                PolicyPeer(
                    pod_selector=(
                        None
                        if pod_selector is None
                        else self.convert_selector(pod_selector, subject, f"{path}[{i}].podSelector")
                    ),
                    namespace_selector=(
                        None
                        if namespace_selector is None
                        else self.convert_selector(namespace_selector, subject, f"{path}[{i}].namespaceSelector")
                    ),
                    ip_block=(
                        None if ip_block is None else self._convert_ip_block(ip_block, subject, f"{path}[{i}].ipBlock")
                    ),
                )
            )
        return tuple(peers)

    def _convert_ip_block(self, data: Any, subject: str, path: str) -> IPBlock:
        data = self._mapping(data, subject, path)
        excluded = self._sequence(_get(data, "except", "_except"), subject, f"{path}.except")
        return IPBlock(cidr=str(data.get("cidr") or ""), except_=tuple(str(cidr) for cidr in excluded))

    def _convert_ports(self, data: Any, subject: str, path: str) -> tuple[PolicyPort, ...]:
        ports = []
        for i, entry in self._entries(data, subject, path):
            protocol_text = entry.get("protocol") or "TCP"
            protocol = Protocol.parse(protocol_text)
            if protocol is None:
                raise self._error(subject, f"{path}[{i}].protocol", f"unsupported protocol '{protocol_text}'")

            port = entry.get("port")
            if isinstance(port, str) and port.isdigit():
                port = int(port)
            elif port is not None and (isinstance(port, bool) or not isinstance(port, (int, str))):
                raise self._error(subject, f"{path}[{i}].port", f"expected a number or a port name, got {port!r}")

            end_port = _get(entry, "endPort", "end_port")
            if end_port is not None:
                end_port = self._integer(end_port, subject, f"{path}[{i}].endPort")
                logger.warning(
                    "%s: %s[%d] declares endPort %s; only port %s is evaluated", subject, path, i, end_port, port
                )

            ports.append(PolicyPort(protocol=protocol, port=port, end_port=end_port))
        return tuple(ports)

    def _mapping(self, value: Any, subject: str, path: str) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise self._error(subject, path, f"expected a mapping, got {type(value).__name__}")
        return value

    def _sequence(self, value: Any, subject: str, path: str) -> list[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise self._error(subject, path, f"expected a list, got {type(value).__name__}")
        return value

    def _entries(self, value: Any, subject: str, path: str) -> list[tuple[int, dict[str, Any]]]:
        """Index a list whose items must all be mappings."""
        entries = []
        for i, item in enumerate(self._sequence(value, subject, path)):
            if not isinstance(item, dict):
                raise self._error(subject, f"{path}[{i}]", f"expected a mapping, got {type(item).__name__}")
            entries.append((i, item))
        return entries

    def _labels(self, value: Any, subject: str, path: str) -> dict[str, str]:
        return {str(key): str(label) for key, label in self._mapping(value, subject, path).items()}

    def _integer(self, value: Any, subject: str, path: str) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
        raise self._error(subject, path, f"expected an integer, got {value!r}")

    def _error(self, subject: str, field_path: str, message: str) -> ConfigurationError:
        return ConfigurationError(
            f"{subject}: {field_path}: {message}",
            subject=subject,
            errors=[ValidationError(field=field_path, message=message)],
        )
