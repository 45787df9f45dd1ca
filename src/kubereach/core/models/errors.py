"""Error types raised while building a reachability model."""

from kubereach.core.models.validation import PolicyValidation, ValidationError


class ConfigurationError(Exception):
    """Malformed input detected at model construction time.

    Carries the offending object (``namespace/name`` of a policy or pod) and
    the validation errors found for it.
    """

    def __init__(
        self,
        message: str,
        subject: str | None = None,
        errors: list[ValidationError] | None = None,
        validations: list[PolicyValidation] | None = None,
    ) -> None:
        self.subject = subject
        self.errors = list(errors or [])
        self.validations = list(validations or [])
        super().__init__(message)

    @classmethod
    def from_validations(cls, validations: list[PolicyValidation]) -> "ConfigurationError":
        """Build a single error out of every failed validation."""
        failed = [validation for validation in validations if validation.has_errors()]
        lines = []
        for validation in failed:
            for error in validation.errors:
                lines.append(f"{validation.subject}: {error}")

        subject = failed[0].subject if failed else None
        errors = failed[0].errors if failed else []
        message = f"{len(lines)} configuration error(s):\n  " + "\n  ".join(lines)
        return cls(message, subject=subject, errors=errors, validations=failed)

    def subjects(self) -> list[str]:
        """Get every object that failed validation."""
        if self.validations:
            return [validation.subject for validation in self.validations]
        return [self.subject] if self.subject else []
