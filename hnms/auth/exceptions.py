"""
Authentication-specific exceptions.
"""
from ..exceptions import (
    ConflictException,
    ForbiddenException,
    UnauthorizedException,
)

class InvalidCredentialsException(UnauthorizedException):
    """Exception raised when credentials are invalid."""
    default_detail = "Invalid credentials."

class MissingTokenException(UnauthorizedException):
    """Exception raised when no bearer token is presented."""
    default_detail = "No token provided. Access denied."

class InvalidTokenException(UnauthorizedException):
    """Exception raised when a token is malformed, tampered with or expired."""
    default_detail = "Invalid or expired token."

class EmailAlreadyExistsException(ConflictException):
    """Exception raised when email already exists."""
    default_detail = "Email already registered."

class AccountDisabledException(ForbiddenException):
    """Exception raised when a deactivated account tries to log in."""
    default_detail = "Account is disabled. Please contact administrator."

class RoleDeniedException(ForbiddenException):
    """Exception raised when user doesn't have required role."""
    def __init__(self, required_roles: list):
        detail = f"Access denied. Required roles: {', '.join(role.value for role in required_roles)}"
        super().__init__(detail)

class TenantDeniedException(ForbiddenException):
    """Exception raised when a principal reaches outside its hospital."""
    default_detail = "Access denied to resources of another hospital."

class NoTenantException(ForbiddenException):
    """Exception raised when a non super admin has no hospital."""
    default_detail = "User is not associated with any hospital."
