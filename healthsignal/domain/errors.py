"""
Domain errors raised by the health signal core.

Both errors are local and synchronous: the caller rejects the offending
request or record instead of retrying it with the same input.
"""


class HealthSignalError(Exception):
    """Base class for errors raised by the core."""


class ValidationError(HealthSignalError, ValueError):
    """Scoring input is malformed (empty identifiers, out-of-range answers)."""


class PrivacyViolation(HealthSignalError):
    """A record about to leave the trust boundary still carries personal data."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"PII field '{field}' detected in anonymized record")
