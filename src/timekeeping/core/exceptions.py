from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class SequenceError(DomainError):
    """Raised when an action is attempted out of the allowed order."""


class RateLimitError(DomainError):
    """Raised when an action is repeated inside its cooldown window."""

    def __init__(self, message: str, wait_seconds: float) -> None:
        self.wait_seconds = wait_seconds
        super().__init__(message)


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class RemoteError(DomainError):
    """Base class for failures talking to the remote API."""


class TransientNetworkError(RemoteError):
    """The remote API could not be reached (connection error, timeout, 5xx)."""


class RemoteRejectionError(RemoteError):
    """The remote API actively rejected a well-formed request."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"[{status_code}] {detail}")

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409
