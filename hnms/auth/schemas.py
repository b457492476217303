"""
User Schemas - Pydantic models for authentication request and response bodies.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from .models import UserRole

class UserLogin(BaseModel):
    """
    User Login Schema - Used for authentication

    Fields:
    - email: User's email address, matched case-insensitively
    - password: User's plain text password
    """
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class UserRegistration(BaseModel):
    """
    User Registration Schema - Used when registering a new user

    Fields:
    - name: User's display name
    - email: User's email address
    - password: Plain text password (hashed before storage)
    - role: Requested role (SUPER_ADMIN cannot be self-assigned)
    - hospitalId: Hospital the user belongs to (optional)
    - phone: Contact number (optional)
    """
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: UserRole
    hospital_id: Optional[int] = Field(None, alias="hospitalId")
    phone: Optional[str] = None

    class Config:
        populate_by_name = True

class ProfileUpdate(BaseModel):
    """
    Profile Update Schema - Partial update of the current user

    Fields:
    - name: New display name (optional)
    - phone: New contact number (optional)
    """
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None

class PasswordChange(BaseModel):
    """
    Password Change Schema - Used by an authenticated user

    Fields:
    - currentPassword: Current password
    - newPassword: Replacement password
    """
    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=1)

    class Config:
        populate_by_name = True

class UserResponse(BaseModel):
    """
    User Response Schema - Used when returning user data

    Fields:
    - id: User ID
    - name: Display name
    - email: Email address
    - role: User role
    - hospitalId: Hospital the user belongs to
    - phone: Contact number
    """
    id: int
    name: str
    email: str
    role: UserRole
    hospital_id: Optional[int] = Field(None, alias="hospitalId")
    phone: Optional[str] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True
        populate_by_name = True

class ProfileResponse(UserResponse):
    """
    Profile Response Schema - The current user's full profile

    Extends UserResponse with:
    - isActive: Whether the account may log in
    - hospitalName: Name of the user's hospital
    - createdAt: When the account was created
    """
    is_active: bool = Field(..., alias="isActive")
    hospital_name: Optional[str] = Field(None, alias="hospitalName")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

class AuthResponse(BaseModel):
    """Returned by login and registration"""
    success: bool = True
    message: str
    token: str
    user: UserResponse

class ProfileEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: ProfileResponse

class MessageResponse(BaseModel):
    success: bool = True
    message: str
