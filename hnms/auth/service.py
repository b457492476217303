"""
Authentication service layer for business logic.
"""
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Dict, Any

from ..core.permissions import Principal
from ..core.security import (
    hash_password,
    verify_password,
    create_access_token,
    token_claims_for,
)
from ..core.updates import apply_patch, patch_values
from ..exceptions import NotFoundException, ValidationException
from ..hospitals.models import Hospital
from .models import User, REGISTRABLE_ROLES
from .schemas import UserRegistration, ProfileUpdate, PasswordChange
from .exceptions import (
    InvalidCredentialsException,
    EmailAlreadyExistsException,
    AccountDisabledException,
)

# Set up logging
logger = logging.getLogger(__name__)

# Checked against when the email is unknown so both failure paths cost one hash check
_DUMMY_HASH = hash_password("not-a-real-password")

def normalize_email(email: str) -> str:
    return email.strip().lower()

def login_user(db: Session, email: str, password: str) -> Dict[str, Any]:
    """
    Authenticate a user and generate an access token.

    Unknown emails and wrong passwords fail identically. The account status
    is only revealed once the password has been verified.

    Args:
        db: Database session
        email: User's email address
        password: User's password

    Returns:
        Dict with the access token and the authenticated user

    Raises:
        InvalidCredentialsException: If credentials are invalid
        AccountDisabledException: If the account has been deactivated
    """
    email = normalize_email(email)
    user = db.query(User).filter(User.email == email).first()

    stored_hash = user.password_hash if user else _DUMMY_HASH
    password_ok = verify_password(password, stored_hash)
    if user is None or not password_ok:
        logger.warning("Login failed: invalid credentials")
        raise InvalidCredentialsException()

    if not user.is_active:
        logger.warning(f"Login refused for deactivated user {user.id}")
        raise AccountDisabledException()

    token = create_access_token(token_claims_for(user))
    logger.info(f"Login successful: User {user.id}")

    return {"token": token, "user": user}

def register_user(db: Session, data: UserRegistration) -> Dict[str, Any]:
    """
    Register a new user and issue an access token.

    Args:
        db: Database session
        data: Registration data

    Returns:
        Dict with the access token and the created user

    Raises:
        ValidationException: If the role cannot be self-assigned or the hospital does not exist
        EmailAlreadyExistsException: If the email is already registered
    """
    if data.role not in REGISTRABLE_ROLES:
        raise ValidationException(
            f"Invalid role. Must be one of: {', '.join(role.value for role in REGISTRABLE_ROLES)}"
        )

    if data.hospital_id is not None and db.get(Hospital, data.hospital_id) is None:
        raise ValidationException("Hospital not found.")

    email = normalize_email(data.email)
    if db.query(User.id).filter(User.email == email).first():
        logger.warning("Registration failed: email already registered")
        raise EmailAlreadyExistsException()

    user = User(
        hospital_id=data.hospital_id,
        name=data.name,
        email=email,
        password_hash=hash_password(data.password),
        role=data.role,
        phone=data.phone,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent registration with the same email
        db.rollback()
        raise EmailAlreadyExistsException()
    db.refresh(user)

    logger.info(f"User registered: {user.id} ({user.role.value}, hospital {user.hospital_id})")
    token = create_access_token(token_claims_for(user))
    return {"token": token, "user": user}

def get_user_for_principal(db: Session, principal: Principal) -> User:
    """
    Load the user row behind a principal.

    Raises:
        NotFoundException: If the user no longer exists
    """
    user = db.get(User, principal.id)
    if user is None:
        raise NotFoundException("User not found.")
    return user

def update_profile(db: Session, principal: Principal, data: ProfileUpdate) -> User:
    """
    Update the current user's name and phone; omitted fields are kept.
    """
    user = get_user_for_principal(db, principal)
    if apply_patch(user, patch_values(data)):
        db.commit()
        db.refresh(user)
        logger.info(f"Profile updated for user {user.id}")
    return user

def change_password(db: Session, principal: Principal, data: PasswordChange) -> None:
    """
    Allows a currently authenticated user to change their password.

    Raises:
        InvalidCredentialsException: If the current password is incorrect
    """
    user = get_user_for_principal(db, principal)
    if not verify_password(data.current_password, user.password_hash):
        logger.warning(f"Password change failed for user {user.id}: wrong current password")
        raise InvalidCredentialsException("Current password is incorrect.")

    user.password_hash = hash_password(data.new_password)
    db.commit()
    logger.info(f"User {user.id} changed their password")
