class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when a token is missing, invalid or expired."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when an addressed entity (order, employee, earning, ...) does not exist."""


class ConflictError(DomainError):
    """Raised when creating an entity whose unique key is already taken."""


class BusinessRuleError(DomainError):
    """Rejected by a business rule (insufficient balance, already checked in, order locked).

    These are reported to clients as HTTP 200 with ``success: false``.
    """
