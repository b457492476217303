"""
Appointment Schemas - Pydantic models for appointment data validation and serialization.
"""
from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel, Field
from datetime import datetime, timezone

from ..core.pagination import PaginationMeta
from .models import AppointmentStatus, DEFAULT_DURATION_MINUTES

def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Coerce a datetime into UTC timezone-aware form; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]

class AppointmentCreate(BaseModel):
    """
    Appointment Create Schema

    Fields:
    - patient_id: Patient the appointment is for
    - doctor_id: Doctor (user id) the appointment is with
    - appointment_time: Start time; normalised to UTC
    - duration_minutes: Length in minutes (default 30)
    - reason: Reason for the visit (optional)
    - notes: Additional notes (optional)
    """
    patient_id: int
    doctor_id: int
    appointment_time: UtcDatetime
    duration_minutes: int = Field(DEFAULT_DURATION_MINUTES, ge=1, le=24 * 60)
    reason: Optional[str] = None
    notes: Optional[str] = None

class AppointmentUpdate(BaseModel):
    """
    Appointment Update Schema - every field optional, omitted fields are kept

    A changed appointment_time is checked against the doctor's other
    scheduled appointments.
    """
    appointment_time: Optional[UtcDatetime] = None
    duration_minutes: Optional[int] = Field(None, ge=1, le=24 * 60)
    status: Optional[AppointmentStatus] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    hospital_id: Optional[int] = None
    appointment_time: UtcDatetime
    duration_minutes: int
    status: AppointmentStatus
    reason: Optional[str] = None
    notes: Optional[str] = None
    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True

class AppointmentEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: AppointmentResponse

class AppointmentListResponse(BaseModel):
    success: bool = True
    data: List[AppointmentResponse]
    pagination: Optional[PaginationMeta] = None
