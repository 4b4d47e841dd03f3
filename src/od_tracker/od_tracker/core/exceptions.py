from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTransitionError(ValidationError):
    """Raised when an OD request is moved out of a terminal state."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class PasswordChangeRequired(AuthenticationError):
    """Raised when the account still uses its temporary password."""

    def __init__(self, email: str):
        super().__init__("Please set a new password before logging in")
        self.email = email


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced user, event or request does not exist."""


class RemoteStoreError(DomainError):
    """Raised when the backing store cannot be reached or rejects a call.

    Callers may retry; the failed write either completed or did not, never half.
    """

    retryable = True


class ConcurrencyAnomaly(DomainError):
    """More than one attendance record exists for the same student and day."""

    def __init__(self, student_email: str, on_date, record_ids):
        self.student_email = student_email
        self.on_date = on_date
        self.record_ids = tuple(record_ids)
        super().__init__(
            f"{len(self.record_ids)} attendance records for {student_email} on {on_date}: "
            + ", ".join(str(r) for r in self.record_ids)
        )
