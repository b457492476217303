"""
Authentication routes for the hospital network API.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..core.permissions import Principal
from .dependencies import get_current_principal
from .schemas import (
    UserLogin, UserRegistration, ProfileUpdate, PasswordChange,
    UserResponse, ProfileResponse, AuthResponse, ProfileEnvelope, MessageResponse
)
from .service import (
    login_user, register_user, get_user_for_principal, update_profile, change_password
)

# Create API router
router = APIRouter()

@router.post("/login", response_model=AuthResponse, summary="Log in with email and password")
def login_route(credentials: UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate with email and password.

    Returns a signed bearer token valid for 24 hours and the user's public
    profile. Unknown emails and wrong passwords both return 401.
    """
    result = login_user(db, credentials.email, credentials.password)
    return AuthResponse(
        message="Login successful.",
        token=result["token"],
        user=UserResponse.model_validate(result["user"])
    )

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED, summary="Register a new user")
def register_route(data: UserRegistration, db: Session = Depends(get_db)):
    """
    Register a user with one of the roles ADMIN, DOCTOR, NURSE or PATIENT.
    """
    result = register_user(db, data)
    return AuthResponse(
        message="User registered successfully.",
        token=result["token"],
        user=UserResponse.model_validate(result["user"])
    )

@router.get("/me", response_model=ProfileEnvelope)
def get_me(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Get the current user's profile."""
    user = get_user_for_principal(db, principal)
    return ProfileEnvelope(user=ProfileResponse.model_validate(user))

@router.put("/me", response_model=ProfileEnvelope)
def update_me(
    data: ProfileUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Update the current user's name and phone."""
    user = update_profile(db, principal, data)
    return ProfileEnvelope(
        message="Profile updated successfully.",
        user=ProfileResponse.model_validate(user)
    )

@router.post("/change-password", response_model=MessageResponse)
def change_password_route(
    data: PasswordChange,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Change the current user's password."""
    change_password(db, principal, data)
    return MessageResponse(message="Password changed successfully.")
