"""Database repository exceptions.

Custom exceptions for repository operations that provide better
error messages and typing than raw SQLAlchemy exceptions.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.exc import IntegrityError

# PostgreSQL SQLSTATE for unique_violation
PG_UNIQUE_VIOLATION = "23505"


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize repository error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class NotFoundError(RepositoryError):
    """Entity not found in database.

    This is a data-level error (404-like) rather than a system error.

    Attributes:
        model_name: Name of the model class that wasn't found
        identifier: The key/value that was searched for
    """

    def __init__(self, model_name: str, identifier: dict[str, Any]):
        self.model_name = model_name
        self.identifier = identifier

        id_str = ", ".join(f"{k}={v}" for k, v in identifier.items())
        message = f"{model_name} not found with {id_str}"

        super().__init__(message, details={"model": model_name, **identifier})

    def __repr__(self) -> str:
        return f"NotFoundError(model={self.model_name!r}, identifier={self.identifier!r})"


class UniqueConstraintError(RepositoryError):
    """A uniqueness invariant was violated by an insert or update.

    Callers map this to a conflict response; it is never retried.

    Attributes:
        detail: Driver-provided description of the violated constraint.
    """

    def __init__(self, detail: str, model_name: str | None = None):
        self.detail = detail
        self.model_name = model_name
        details = {"model": model_name} if model_name else {}
        super().__init__(f"resource must be unique: {detail}", details=details)


class InvalidFilterError(RepositoryError):
    """Invalid filter or query parameters.

    Raised when a query filters on a field the repository does not expose
    or with a value that cannot be coerced to the column type.
    """

    def __init__(self, message: str, filter_name: str | None = None):
        details = {"filter": filter_name} if filter_name else {}
        super().__init__(message, details=details)


class TransactionError(RepositoryError):
    """Begin, commit or rollback failed at the storage layer.

    When a rollback fails, ``original_error`` holds the exception that
    triggered the rollback; the rollback failure itself is the ``__cause__``.
    """

    def __init__(self, message: str, original_error: BaseException | None = None):
        self.original_error = original_error
        details = {"original_error": repr(original_error)} if original_error else {}
        super().__init__(message, details=details)


def is_unique_violation(exc: IntegrityError) -> bool:
    """Check whether an IntegrityError was caused by a unique constraint."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == PG_UNIQUE_VIOLATION
    return "unique constraint" in str(orig).lower()


def translate_integrity_error(
    exc: IntegrityError, model_name: str | None = None
) -> RepositoryError:
    """Convert a SQLAlchemy IntegrityError into a repository error.

    Args:
        exc: The error raised by flush or commit.
        model_name: Model involved, for the error details.

    Returns:
        UniqueConstraintError for unique violations, RepositoryError otherwise.
    """
    orig = exc.orig
    if is_unique_violation(exc):
        diag = getattr(orig, "diag", None)
        detail = getattr(diag, "message_detail", None) or str(orig)
        return UniqueConstraintError(detail, model_name=model_name)
    return RepositoryError(
        "integrity constraint violated",
        details={"model": model_name, "error": str(orig)} if model_name else {"error": str(orig)},
    )


__all__ = [
    "InvalidFilterError",
    "NotFoundError",
    "RepositoryError",
    "TransactionError",
    "UniqueConstraintError",
    "is_unique_violation",
    "translate_integrity_error",
]
