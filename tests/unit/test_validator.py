"""Unit tests for snapshot validation."""

import pytest

from kubereach.core.models import (
    ConfigurationError,
    IngressRule,
    IPBlock,
    LabelSelector,
    NetworkPolicy,
    PolicyPeer,
    PolicyPort,
    SelectorOperator,
    SelectorRequirement,
)
from kubereach.core.services import ClusterSnapshot, SnapshotValidator
from tests.helpers import namespace, pod


def policy_with_peer(peer: PolicyPeer) -> NetworkPolicy:
    return NetworkPolicy(name="p", namespace="app", ingress=(IngressRule(peers=(peer,)),))


def policy_with_selector(selector: LabelSelector) -> NetworkPolicy:
    return NetworkPolicy(name="p", namespace="app", pod_selector=selector)


def messages(policy: NetworkPolicy) -> list[str]:
    validation = SnapshotValidator().validate_policy(policy, {"app"})
    return [error.message for error in validation.errors]


class TestSelectorValidation:
    """Test malformed and unsatisfiable selectors."""

    def test_valid_selector(self):
        """Test that a well-formed selector passes."""
        selector = LabelSelector(
            match_labels={"role": "db"},
            match_expressions=(
                SelectorRequirement("env", SelectorOperator.IN, ("prod", "staging")),
                SelectorRequirement("env", SelectorOperator.NOT_IN, ("staging",)),
                SelectorRequirement("canary", SelectorOperator.DOES_NOT_EXIST),
            ),
        )

        assert messages(policy_with_selector(selector)) == []

    def test_empty_key(self):
        """Test empty label keys."""
        selector = LabelSelector(match_labels={"": "x"})

        assert messages(policy_with_selector(selector)) == ["empty key with value 'x'"]

    def test_operator_values(self):
        """Test value lists that do not fit the operator."""
        selector = LabelSelector(
            match_expressions=(
                SelectorRequirement("env", SelectorOperator.IN),
                SelectorRequirement("tier", SelectorOperator.EXISTS, ("web",)),
            )
        )

        assert messages(policy_with_selector(selector)) == [
            "operator In requires values",
            "operator Exists takes no values",
        ]

    def test_exists_and_does_not_exist(self):
        """Test a key required both present and absent."""
        selector = LabelSelector(
            match_expressions=(
                SelectorRequirement("canary", SelectorOperator.EXISTS),
                SelectorRequirement("canary", SelectorOperator.DOES_NOT_EXIST),
            )
        )

        assert messages(policy_with_selector(selector)) == [
            "conflicting requirements: 'canary' must both exist and not exist"
        ]

    @pytest.mark.parametrize(
        "selector",
        [
            LabelSelector(
                match_labels={"env": "prod"},
                match_expressions=(SelectorRequirement("env", SelectorOperator.IN, ("dev",)),),
            ),
            LabelSelector(
                match_labels={"env": "prod"},
                match_expressions=(SelectorRequirement("env", SelectorOperator.NOT_IN, ("prod",)),),
            ),
            LabelSelector(
                match_expressions=(
                    SelectorRequirement("env", SelectorOperator.IN, ("prod",)),
                    SelectorRequirement("env", SelectorOperator.IN, ("dev",)),
                )
            ),
        ],
    )
    def test_unsatisfiable(self, selector):
        """Test selectors no label set can satisfy."""
        assert messages(policy_with_selector(selector)) == [
            "conflicting requirements: no value of 'env' can satisfy the selector"
        ]

    def test_peer_selectors_are_checked(self):
        """Test that selectors inside peers are validated with their path."""
        peer = PolicyPeer(namespace_selector=LabelSelector(match_labels={"": "x"}))
        validation = SnapshotValidator().validate_policy(policy_with_peer(peer), {"app"})

        assert [e.field for e in validation.errors] == ["spec.ingress[0].from[0].namespaceSelector.matchLabels"]


class TestPeerAndPortValidation:
    """Test peers and ports."""

    def test_ip_block_with_selector(self):
        """Test that ipBlock is exclusive."""
        peer = PolicyPeer(pod_selector=LabelSelector(), ip_block=IPBlock("10.0.0.0/8"))

        assert messages(policy_with_peer(peer)) == ["ipBlock cannot be combined with a selector"]

    def test_invalid_cidr(self):
        """Test malformed CIDRs."""
        assert messages(policy_with_peer(PolicyPeer(ip_block=IPBlock("10.0.0.0/33")))) == [
            "invalid CIDR '10.0.0.0/33'"
        ]

    def test_except_outside_cidr(self):
        """Test exclusions that are not subnets of the block."""
        peer = PolicyPeer(ip_block=IPBlock("10.0.0.0/16", ("10.1.0.0/24", "10.0.1.0/24")))

        assert messages(policy_with_peer(peer)) == ["'10.1.0.0/24' is outside '10.0.0.0/16'"]

    def test_empty_peer(self):
        """Test peers with nothing set."""
        assert messages(policy_with_peer(PolicyPeer())) == [
            "peer has neither podSelector, namespaceSelector nor ipBlock"
        ]

    @pytest.mark.parametrize(
        "port, expected",
        [
            (PolicyPort(port=0), ["port 0 out of range 1-65535"]),
            (PolicyPort(port=70000), ["port 70000 out of range 1-65535"]),
            (PolicyPort(port=9000, end_port=8000), ["endPort is lower than port"]),
            (PolicyPort(port=" "), ["empty named port"]),
            (PolicyPort(port="http"), []),
            (PolicyPort(), []),
        ],
    )
    def test_ports(self, port, expected):
        """Test port range checks."""
        policy = NetworkPolicy(name="p", namespace="app", ingress=(IngressRule(ports=(port,)),))

        assert messages(policy) == expected


class TestSnapshotBuild:
    """Test that invalid input never produces a snapshot."""

    def test_valid(self):
        """Test building a valid snapshot."""
        snapshot = ClusterSnapshot.build([namespace("app")], [pod("app/a")], [NetworkPolicy(name="p", namespace="app")])

        assert len(snapshot.pods) == 1
        assert snapshot.get_policies_in("app")[0].name == "p"

    def test_all_findings_reported(self):
        """Test that validation collects every error before failing."""
        bad_selector = policy_with_selector(
            LabelSelector(
                match_expressions=(
                    SelectorRequirement("a", SelectorOperator.EXISTS),
                    SelectorRequirement("a", SelectorOperator.DOES_NOT_EXIST),
                )
            )
        )
        orphan_policy = NetworkPolicy(name="orphan", namespace="missing")

        with pytest.raises(ConfigurationError) as exc_info:
            ClusterSnapshot.build(
                [namespace("app")],
                [pod("app/a"), pod("app/a"), pod("ghost/b")],
                [bad_selector, orphan_policy],
            )

        error = exc_info.value
        assert error.subject == "app/a"
        assert error.subjects() == ["app/a", "ghost/b", "app/p", "missing/orphan"]
        assert "duplicate pod" in str(error)
        assert "unknown namespace 'ghost'" in str(error)
        assert "must both exist and not exist" in str(error)
        assert str(error).startswith("4 configuration error(s):")

    def test_duplicate_namespace_and_policy(self):
        """Test duplicate names."""
        with pytest.raises(ConfigurationError) as exc_info:
            ClusterSnapshot.build(
                [namespace("app"), namespace("app")],
                [],
                [NetworkPolicy(name="p", namespace="app"), NetworkPolicy(name="p", namespace="app")],
            )

        assert exc_info.value.subjects() == ["app", "app/p"]

    def test_empty_label_key_on_pod(self):
        """Test entity labels with empty keys."""
        with pytest.raises(ConfigurationError, match="label with empty key"):
            ClusterSnapshot.build([namespace("app")], [pod("app/a", **{"": "x"})])
