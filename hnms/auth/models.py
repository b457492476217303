"""
User Model - Stores every principal that can authenticate against the API.

Users belong to one hospital (tenant) except SUPER_ADMIN accounts, which
operate across all hospitals.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from ..database import Base

class UserRole(str, enum.Enum):
    """
    Enumeration for user roles in the hospital network.

    Roles:
    - SUPER_ADMIN: Network operator with access to every hospital
    - ADMIN: Hospital administrator
    - DOCTOR: Medical practitioner who is assigned appointments
    - NURSE: Clinical staff member
    - PATIENT: Patient account
    """
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    NURSE = "NURSE"
    PATIENT = "PATIENT"

# Roles that may be chosen at self-registration
REGISTRABLE_ROLES = (UserRole.ADMIN, UserRole.DOCTOR, UserRole.NURSE, UserRole.PATIENT)

class User(Base):
    """
    User Model - Stores all user information in the system

    Fields:
    - id: Primary key for user identification
    - hospital_id: Hospital the user belongs to (null for SUPER_ADMIN)
    - name: User's display name
    - email: Unique email address, stored lowercase
    - password_hash: bcrypt hash (raw passwords are never stored)
    - role: User role
    - phone: Contact number (optional)
    - is_active: Deactivated users cannot log in; rows are never deleted
    - created_at: Timestamp when user was created
    - updated_at: Timestamp when user was last updated
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    hospital_id = Column(Integer, ForeignKey("hospitals.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.PATIENT)
    phone = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    hospital = relationship("Hospital", back_populates="users")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

    @property
    def hospital_name(self):
        """Name of the user's hospital, if any"""
        return self.hospital.name if self.hospital else None
