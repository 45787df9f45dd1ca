"""Core domain models for kubereach."""

from kubereach.core.models.cluster import Namespace, Pod
from kubereach.core.models.errors import ConfigurationError
from kubereach.core.models.policy import (
    EgressRule,
    IngressRule,
    IPBlock,
    NetworkPolicy,
    PolicyPeer,
    PolicyPort,
    PolicyType,
    Protocol,
)
from kubereach.core.models.reachability import (
    EvaluationMode,
    MatrixEntry,
    PortSpec,
    ReachabilityMatrix,
    Verdict,
)
from kubereach.core.models.selectors import LabelSelector, SelectorOperator, SelectorRequirement, labels_match
from kubereach.core.models.validation import PolicyValidation, ValidationError

__all__ = [
    "ConfigurationError",
    "EgressRule",
    "EvaluationMode",
    "IPBlock",
    "IngressRule",
    "LabelSelector",
    "MatrixEntry",
    "Namespace",
    "NetworkPolicy",
    "Pod",
    "PolicyPeer",
    "PolicyPort",
    "PolicyType",
    "PolicyValidation",
    "PortSpec",
    "Protocol",
    "ReachabilityMatrix",
    "SelectorOperator",
    "SelectorRequirement",
    "ValidationError",
    "Verdict",
    "labels_match",
]
