class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class UserNotFoundError(NotFoundError):
    """Raised when a user has no profile record."""


class PayslipNotFoundError(NotFoundError):
    """Raised when a payslip id does not exist."""


class DuplicatePayslipError(DomainError):
    """Raised by storage when a payslip already exists for (user, period_start, period_end)."""


class StorageError(DomainError):
    """Raised when the persistence layer fails."""
