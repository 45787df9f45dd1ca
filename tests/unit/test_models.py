"""Unit tests for core models."""

import pytest

from kubereach.core.models import (
    ConfigurationError,
    EvaluationMode,
    IngressRule,
    IPBlock,
    LabelSelector,
    Namespace,
    NetworkPolicy,
    Pod,
    PolicyPort,
    PolicyType,
    PolicyValidation,
    PortSpec,
    Protocol,
    ReachabilityMatrix,
    Verdict,
)


class TestNetworkPolicy:
    """Test NetworkPolicy model."""

    def test_policy_creation(self):
        """Test basic policy creation."""
        policy = NetworkPolicy(name="test-policy", namespace="default")

        assert policy.name == "test-policy"
        assert policy.namespace == "default"
        assert policy.policy_types == frozenset({PolicyType.INGRESS})
        assert policy.pod_selector.is_empty()
        assert policy.ingress == ()
        assert policy.egress == ()

    def test_policy_full_name(self):
        """Test policy full name generation."""
        policy = NetworkPolicy(name="test-policy", namespace="default")

        assert policy.get_full_name() == "default/test-policy"

    def test_policy_hash(self):
        """Test policy hashing for sets."""
        policy1 = NetworkPolicy(name="test-policy", namespace="default", labels={"team": "a"})
        policy2 = NetworkPolicy(name="test-policy", namespace="default", labels={"team": "b"})

        assert hash(policy1) == hash(policy2)
        assert policy1 in {policy2}

    def test_policy_selects_only_own_namespace(self):
        """Test that the pod selector is scoped to the policy namespace."""
        policy = NetworkPolicy(
            name="backend",
            namespace="stars",
            pod_selector=LabelSelector(match_labels={"role": "backend"}),
        )

        assert policy.selects(Pod(name="b", namespace="stars", labels={"role": "backend"}))
        assert not policy.selects(Pod(name="b", namespace="other", labels={"role": "backend"}))
        assert not policy.selects(Pod(name="f", namespace="stars", labels={"role": "frontend"}))

    def test_default_deny(self):
        """Test default deny detection."""
        deny = NetworkPolicy(name="deny", namespace="default")
        allow = NetworkPolicy(name="allow", namespace="default", ingress=(IngressRule(),))

        assert deny.is_default_deny()
        assert not deny.is_default_deny(PolicyType.EGRESS)
        assert not allow.is_default_deny()

    def test_get_ports(self):
        """Test port summary across rules."""
        policy = NetworkPolicy(
            name="web",
            namespace="default",
            ingress=(
                IngressRule(ports=(PolicyPort(port=80), PolicyPort(protocol=Protocol.UDP, port=53))),
                IngressRule(ports=(PolicyPort(port="http"), PolicyPort())),
            ),
        )

        assert policy.get_ports() == {"TCP/80", "UDP/53", "TCP/http", "TCP/*"}


class TestPolicyPort:
    """Test PolicyPort matching."""

    def test_numeric_port(self):
        """Test exact numeric match."""
        port = PolicyPort(protocol=Protocol.TCP, port=6379)

        assert port.matches(Protocol.TCP, 6379)
        assert not port.matches(Protocol.TCP, 80)
        assert not port.matches(Protocol.UDP, 6379)

    def test_protocol_only(self):
        """Test that a missing port admits every port of the protocol."""
        port = PolicyPort(protocol=Protocol.UDP)

        assert port.matches(Protocol.UDP, 53)
        assert not port.matches(Protocol.TCP, 53)

    def test_unsupported_protocol_never_matches(self):
        """Test that an unparsed protocol matches nothing."""
        assert not PolicyPort().matches(None, 80)

    def test_named_port_resolves_on_destination(self):
        """Test named port resolution through the destination's container ports."""
        port = PolicyPort(port="http")
        web = Pod(name="web", namespace="default", container_ports={"http": 8080})

        assert port.matches(Protocol.TCP, 8080, web)
        assert not port.matches(Protocol.TCP, 80, web)
        assert not port.matches(Protocol.TCP, 8080)

    def test_end_port_is_not_a_range(self):
        """Test that only the start of a port range is matched."""
        port = PolicyPort(port=8000, end_port=9000)

        assert port.matches(Protocol.TCP, 8000)
        assert not port.matches(Protocol.TCP, 8500)


class TestIPBlock:
    """Test IPBlock containment."""

    def test_contains(self):
        """Test CIDR membership with exclusions."""
        block = IPBlock(cidr="10.0.0.0/16", except_=("10.0.5.0/24",))

        assert block.contains("10.0.1.10")
        assert not block.contains("10.0.5.10")
        assert not block.contains("192.168.0.1")

    def test_missing_or_invalid_ip(self):
        """Test that pods without a usable IP are never contained."""
        block = IPBlock(cidr="0.0.0.0/0")

        assert not block.contains(None)
        assert not block.contains("not-an-ip")

    def test_mixed_families(self):
        """Test that IPv6 addresses are outside IPv4 blocks."""
        assert not IPBlock(cidr="10.0.0.0/8").contains("fd00::1")


class TestNamespaceAndPod:
    """Test Namespace and Pod models."""

    def test_namespace_labels(self):
        """Test namespace label lookup."""
        ns = Namespace(name="client", labels={"role": "client"})

        assert ns.has_label("role")
        assert ns.has_label("role", "client")
        assert not ns.has_label("role", "ui")

    def test_pod_identity(self):
        """Test pod naming and hashing."""
        pod1 = Pod(name="backend", namespace="stars", labels={"role": "backend"})
        pod2 = Pod(name="backend", namespace="stars", labels={"role": "backend"})

        assert pod1.full_name == "stars/backend"
        assert pod1 in {pod2}

    def test_resolve_port(self):
        """Test named port lookup."""
        pod = Pod(name="db", namespace="default", container_ports={"redis": 6379})

        assert pod.resolve_port("redis") == 6379
        assert pod.resolve_port("http") is None


class TestProtocolAndPortSpec:
    """Test protocol and port parsing."""

    def test_protocol_parse(self):
        """Test case-insensitive protocol parsing."""
        assert Protocol.parse("tcp") == Protocol.TCP
        assert Protocol.parse("SCTP") == Protocol.SCTP
        assert Protocol.parse(Protocol.UDP) == Protocol.UDP
        assert Protocol.parse("ICMP") is None
        assert Protocol.parse(None) is None

    def test_port_spec_parse(self):
        """Test PROTOCOL/PORT parsing."""
        assert PortSpec.parse("TCP/80") == PortSpec(Protocol.TCP, 80)
        assert PortSpec.parse("udp/53") == PortSpec(Protocol.UDP, 53)
        assert PortSpec.parse("443") == PortSpec(Protocol.TCP, 443)
        assert str(PortSpec.parse("sctp/9")) == "SCTP/9"

    @pytest.mark.parametrize("value", ["ICMP/1", "TCP/0", "TCP/70000", "TCP/http", ""])
    def test_port_spec_rejects(self, value):
        """Test invalid port specs."""
        with pytest.raises(ValueError):
            PortSpec.parse(value)


class TestVerdictAndMatrix:
    """Test query result models."""

    def test_verdict_to_dict(self):
        """Test verdict serialization."""
        verdict = Verdict(
            source=Pod(name="frontend", namespace="stars"),
            destination=Pod(name="backend", namespace="stars"),
            protocol="TCP",
            port=6379,
            allowed=True,
            ingress_protected=True,
            ingress_policies=["stars/backend-policy"],
            reason="ingress: allowed by stars/backend-policy",
        )

        data = verdict.to_dict()

        assert data["source"] == "stars/frontend"
        assert data["destination"] == "stars/backend"
        assert data["allowed"] is True
        assert data["ingress"] == {"protected": True, "allowed": True, "policies": ["stars/backend-policy"]}
        assert data["egress"] == {"protected": False, "allowed": True, "policies": []}

    def test_matrix_summary_and_rows(self):
        """Test matrix counting and row ordering."""
        http = PortSpec(Protocol.TCP, 80)
        dns = PortSpec(Protocol.UDP, 53)
        matrix = ReachabilityMatrix(
            mode=EvaluationMode.INGRESS, sources=["a/x", "a/y"], destinations=["a/x", "a/y"], ports=[http, dns]
        )
        matrix.set("a/y", "a/x", dns, False)
        matrix.set("a/x", "a/y", http, True)
        matrix.set("a/x", "a/y", dns, False)
        matrix.set("a/y", "a/x", http, True)

        assert matrix.summary() == {"total": 4, "allowed": 2, "denied": 2}
        assert matrix.is_allowed("a/x", "a/y", http)
        assert not matrix.is_allowed("a/x", "a/x", http)
        assert [(e.source, e.destination, str(e.port)) for e in matrix.entries()] == [
            ("a/x", "a/y", "TCP/80"),
            ("a/x", "a/y", "UDP/53"),
            ("a/y", "a/x", "TCP/80"),
            ("a/y", "a/x", "UDP/53"),
        ]
        assert matrix.to_rows()[0] == {
            "source": "a/x",
            "destination": "a/y",
            "protocol": "TCP",
            "port": 80,
            "allowed": True,
        }
        assert len(matrix.denied()) == 2


class TestConfigurationError:
    """Test error aggregation."""

    def test_from_validations(self):
        """Test that every finding is reported and the first subject is kept."""
        first = PolicyValidation(subject="stars/bad")
        first.add_error("spec.podSelector", "conflicting requirements")
        second = PolicyValidation(subject="client/worse")
        second.add_error("spec.ingress[0].ports[0].port", "port 0 out of range 1-65535", "use 1-65535")
        second.add_error("metadata.namespace", "unknown namespace 'client'")

        error = ConfigurationError.from_validations([first, PolicyValidation(subject="ok"), second])

        assert error.subject == "stars/bad"
        assert error.subjects() == ["stars/bad", "client/worse"]
        assert len(error.errors) == 1
        assert str(error).startswith("3 configuration error(s):")
        assert "client/worse: spec.ingress[0].ports[0].port: port 0 out of range 1-65535 (use 1-65535)" in str(error)
