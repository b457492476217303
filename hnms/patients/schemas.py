"""
Patient Schemas - Pydantic models for patient data validation and serialization.
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import date, datetime

from ..core.pagination import PaginationMeta

class PatientBase(BaseModel):
    """
    Fields shared by patient create and update bodies

    Fields:
    - dob: Date of birth (optional)
    - gender, phone, email, address: Demographic and contact data (optional)
    - emergency_contact: Emergency contact information (optional)
    - blood_type: Blood type (optional)
    - allergies: Known allergies (optional)
    """
    dob: Optional[date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    blood_type: Optional[str] = None
    allergies: Optional[str] = None

class PatientCreate(PatientBase):
    """
    Patient Create Schema

    Extends PatientBase with:
    - full_name: Patient's full name (required)
    - hospital_id: Owning hospital; defaults to the caller's hospital and is
      required for SUPER_ADMIN callers
    """
    full_name: str = Field(..., min_length=1)
    hospital_id: Optional[int] = None

class PatientUpdate(PatientBase):
    """Patient Update Schema - every field optional, omitted fields are kept"""
    full_name: Optional[str] = Field(None, min_length=1)

class PatientResponse(PatientBase):
    id: int
    hospital_id: int
    hospital_name: Optional[str] = None
    full_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True

class PatientEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: PatientResponse

class PatientListResponse(BaseModel):
    success: bool = True
    data: List[PatientResponse]
    pagination: PaginationMeta
