"""
Import every model module so SQLAlchemy can resolve string relationships
and ``Base.metadata`` knows about all tables.
"""
from .database import Base
from .hospitals.models import Hospital
from .auth.models import User, UserRole
from .patients.models import Patient
from .appointments.models import Appointment, AppointmentStatus
from .medical_records.models import MedicalRecord

__all__ = [
    "Base",
    "Hospital",
    "User",
    "UserRole",
    "Patient",
    "Appointment",
    "AppointmentStatus",
    "MedicalRecord",
]
