"""
FastAPI dependencies for authentication and authorization.

The bearer token is decoded into an explicit ``Principal`` which route
handlers pass on to the service layer.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.permissions import Action, Principal, authorize
from ..core.security import verify_token
from .exceptions import MissingTokenException

# Bearer scheme; missing credentials are reported by get_current_principal
bearer_scheme = HTTPBearer(auto_error=False)

def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Principal:
    """
    Get the authenticated principal from the Authorization header.

    Args:
        credentials: Parsed ``Authorization: Bearer <token>`` header

    Returns:
        Principal: Identity, role and hospital carried by the token

    Raises:
        MissingTokenException: If no bearer token is presented
        InvalidTokenException: If the token is invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenException()
    claims = verify_token(credentials.credentials)
    return Principal.from_claims(claims)

def require_action(action: Action):
    """
    Dependency factory enforcing an action's role allow-list and the
    principal's hospital association.

    Args:
        action: Action the route performs

    Returns:
        Function resolving to the authorized principal
    """
    def action_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        authorize(principal, action)
        return principal
    return action_checker
