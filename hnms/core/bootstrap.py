"""
Bootstrap utilities for first SUPER_ADMIN creation.
Creates the first super administrator from environment variables, since
SUPER_ADMIN cannot be chosen at registration.
"""
import logging
from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.models import User, UserRole
from ..auth.service import normalize_email
from ..config import settings
from .security import hash_password

logger = logging.getLogger(__name__)

def super_admin_exists(db: Session) -> bool:
    """
    Check if any SUPER_ADMIN user exists in the database.

    Args:
        db: Database session

    Returns:
        bool: True if at least one super admin exists, False otherwise
    """
    return db.query(User).filter(User.role == UserRole.SUPER_ADMIN).count() > 0

def create_bootstrap_super_admin(db: Session) -> bool:
    """
    Create the first SUPER_ADMIN from environment variables.

    Args:
        db: Database session

    Returns:
        bool: True if the account was created, False otherwise
    """
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        logger.warning("Bootstrap admin credentials not provided in environment variables")
        return False

    email = normalize_email(settings.bootstrap_admin_email)
    # Same address rules as registration
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        logger.error(f"Bootstrap skipped: BOOTSTRAP_ADMIN_EMAIL is not a valid email address ({str(e)})")
        return False

    if db.query(User).filter(User.email == email).first():
        logger.warning(f"Bootstrap failed: Email {email} already exists")
        return False

    super_admin = User(
        email=email,
        name=settings.bootstrap_admin_name,
        password_hash=hash_password(settings.bootstrap_admin_password),
        role=UserRole.SUPER_ADMIN,
        hospital_id=None,
        is_active=True,
    )
    try:
        db.add(super_admin)
        db.commit()
        db.refresh(super_admin)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create bootstrap super admin: {str(e)}")
        return False

    logger.info(f"Bootstrap super admin created: {super_admin.email} (ID: {super_admin.id})")
    return True

def bootstrap_super_admin_if_needed(db: Session) -> None:
    """
    Create the bootstrap SUPER_ADMIN unless one already exists.
    Called once during application startup.

    Args:
        db: Database session
    """
    if super_admin_exists(db):
        logger.info("Super admin found. Bootstrap not needed.")
        return

    logger.info("No super admin found. Attempting bootstrap creation...")
    if not create_bootstrap_super_admin(db):
        logger.info(
            "To create the first super admin, set BOOTSTRAP_ADMIN_EMAIL and "
            "BOOTSTRAP_ADMIN_PASSWORD in your .env file."
        )
