"""Label selector models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


def labels_match(required: Mapping[str, str], labels: Mapping[str, str]) -> bool:
    """Check if every required key is present in labels with an equal value.

    Matching is directional: the selector must be a subset of the entity's
    labels, never the reverse. An empty selector matches everything.
    """
    return all(key in labels and labels[key] == value for key, value in required.items())


class SelectorOperator(Enum):
    """Set-based selector operators."""

    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"

    def requires_values(self) -> bool:
        """Check if the operator needs a non-empty values list."""
        return self in (SelectorOperator.IN, SelectorOperator.NOT_IN)


@dataclass(frozen=True)
class SelectorRequirement:
    """A single matchExpressions entry."""

    key: str
    operator: SelectorOperator
    values: tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Check if the labels satisfy this requirement."""
        if self.operator == SelectorOperator.IN:
            return self.key in labels and labels[self.key] in self.values
        if self.operator == SelectorOperator.NOT_IN:
            # Absent keys satisfy NotIn
            return self.key not in labels or labels[self.key] not in self.values
        if self.operator == SelectorOperator.EXISTS:
            return self.key in labels
        return self.key not in labels

    def __str__(self) -> str:
        if self.operator.requires_values():
            return f"{self.key} {self.operator.value} ({', '.join(self.values)})"
        if self.operator == SelectorOperator.EXISTS:
            return self.key
        return f"!{self.key}"


@dataclass(frozen=True)
class LabelSelector:
    """Label selector used to pick pods or namespaces."""

    match_labels: dict[str, str] = field(default_factory=dict)
    match_expressions: tuple[SelectorRequirement, ...] = ()

    def __hash__(self) -> int:
        """Make LabelSelector hashable despite its dict field."""
        return hash((tuple(sorted(self.match_labels.items())), self.match_expressions))

    def is_empty(self) -> bool:
        """Check if the selector selects everything in scope."""
        return not self.match_labels and not self.match_expressions

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Check if an entity with the given labels is selected."""
        if not labels_match(self.match_labels, labels):
            return False
        return all(requirement.matches(labels) for requirement in self.match_expressions)

    def keys(self) -> set[str]:
        """Get every label key the selector constrains."""
        keys = set(self.match_labels)
        keys.update(requirement.key for requirement in self.match_expressions)
        return keys

    def __str__(self) -> str:
        if self.is_empty():
            return "<all>"
        parts = [f"{key}={value}" for key, value in sorted(self.match_labels.items())]
        parts.extend(str(requirement) for requirement in self.match_expressions)
        return ",".join(parts)
