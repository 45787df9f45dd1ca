"""Policy validation models."""

from dataclasses import dataclass, field


@dataclass
class ValidationError:
    """Represents a validation error in a policy, pod or namespace."""

    field: str  # Field path that has the error
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        base = f"{self.field}: {self.message}"
        return f"{base} ({self.suggestion})" if self.suggestion else base


@dataclass
class PolicyValidation:
    """Errors found for one object while building a snapshot."""

    subject: str  # namespace/name of the validated object
    errors: list[ValidationError] = field(default_factory=list)

    def has_errors(self) -> bool:
        """Check if validation has any errors."""
        return bool(self.errors)

    def add_error(self, field_path: str, message: str, suggestion: str | None = None) -> None:
        """Record a validation error."""
        self.errors.append(ValidationError(field=field_path, message=message, suggestion=suggestion))
