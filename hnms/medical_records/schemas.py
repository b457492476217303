"""
Medical Record Schemas - Read-only representation of medical records.
"""
from typing import List, Optional
from pydantic import BaseModel
from datetime import datetime

class MedicalRecordResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: Optional[int] = None
    doctor_name: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    prescription: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True

class MedicalRecordListResponse(BaseModel):
    success: bool = True
    data: List[MedicalRecordResponse]
