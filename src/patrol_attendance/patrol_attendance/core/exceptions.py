class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class RecordNotFoundError(DomainError):
    """Raised when a referenced guard, site or attendance record does not exist."""


class InvalidCodeError(DomainError):
    """Raised when a scanned payload is not a site check-in code."""


class DuplicateCheckInError(DomainError):
    """Raised when the guard already has a record for this site today."""


class ConcurrentScanError(DuplicateCheckInError):
    """Raised when another scan changed the guard's open session first."""


class TransientStorageError(DomainError):
    """Raised when the database fails; the action can simply be repeated."""


class JobAbortError(DomainError):
    """Raised when a reconciliation job cannot read its working set."""
