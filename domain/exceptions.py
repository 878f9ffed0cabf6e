"""Domain Exceptions - business rule failures raised to the caller"""


class DomainError(ValueError):
    """Base class for business-rule failures"""
    status_code = 400


class DomainValidationError(DomainError):
    """Bad input shape or range (dates, capacity, transitions)"""
    status_code = 400


class ConflictError(DomainError):
    """Requested dates clash with an existing reservation"""
    status_code = 400


class NotFoundError(DomainError):
    """Listing, booking or user does not exist"""
    status_code = 404


class AuthorizationError(DomainError):
    """Caller lacks the role or ownership required"""
    status_code = 403
