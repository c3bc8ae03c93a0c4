# unistay/common/exceptions/exceptions.py
# =============================================================================
# Custom exceptions for UniStay Chat Service
# =============================================================================


class UniStayException(Exception):
    """Base exception for UniStay platform"""

    code: str = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class PermissionError(UniStayException):
    """Raised when user doesn't have permission for an action"""
    code = "forbidden"


class AuthenticationError(UniStayException):
    """Raised when authentication fails"""
    code = "unauthorized"


class ValidationError(UniStayException):
    """Raised when validation fails"""
    code = "validation_error"


class NotFoundError(UniStayException):
    """Raised when a resource is not found"""
    code = "not_found"


# Alias for compatibility
ResourceNotFoundError = NotFoundError


class ConflictError(UniStayException):
    """Raised when there's a conflict (e.g., duplicate)"""
    code = "conflict"


class DomainError(UniStayException):
    """Raised for domain-specific errors"""
    code = "domain_error"


class BusinessRuleError(DomainError):
    """Raised when an operation breaks a business rule of the current state"""
    code = "business_rule_violation"


class SelfReferenceError(DomainError):
    """Raised when a user targets themselves where that is not allowed"""
    code = "self_reference"


class OperationFailedError(UniStayException):
    """Raised when an operation fails for an unexpected reason.

    The message is safe to log but is never returned to clients.
    """
    code = "operation_failed"


class InfrastructureError(UniStayException):
    """Raised for infrastructure errors"""
    code = "infrastructure_error"
