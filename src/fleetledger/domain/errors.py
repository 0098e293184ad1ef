"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConfigurationError(DomainError):
    """Missing or invalid settings; aborts a run before any work starts."""


class SequenceConflictError(DomainError):
    """A counter increment could not be committed."""


class BatchCommitError(DomainError):
    """A group of batched writes could not be committed."""


def record_not_found(record_id: str) -> str:
    """Return message for missing service record."""
    return f"Service record '{record_id}' not found"


def sequence_conflict(scope: str, attempts: int) -> str:
    """Return message when a counter transaction keeps failing."""
    return f"Could not increment counter '{scope}' after {attempts} attempt{'s' if attempts != 1 else ''}"


def batch_commit_failed(operation_count: int, error: Exception) -> str:
    """Return message for a failed batch commit."""
    return f"Batch of {operation_count} operation{'s' if operation_count != 1 else ''} failed to commit: {error}"


def invalid_setting(name: str, value: object, expected: str) -> str:
    """Return message for a setting that cannot be used."""
    return f"Invalid value for {name}: {value!r} ({expected})"
