"""
Patient Model - Stores patient demographic and contact information.

Every patient is owned by exactly one hospital.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Date, func
from sqlalchemy.orm import relationship
from ..database import Base

class Patient(Base):
    """
    Patient Model - Stores patient-specific information

    Fields:
    - id: Primary key for patient
    - hospital_id: Owning hospital
    - full_name: Patient's full name
    - dob: Date of birth
    - gender: Patient's gender
    - phone, email, address: Contact information
    - emergency_contact: Emergency contact information
    - blood_type: Blood type
    - allergies: Known allergies
    - created_at: When the patient was created
    - updated_at: When the patient was last updated
    """
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    hospital_id = Column(Integer, ForeignKey("hospitals.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String, nullable=False)
    dob = Column(Date, nullable=True)
    gender = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=True)
    emergency_contact = Column(String, nullable=True)
    blood_type = Column(String, nullable=True)
    allergies = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    hospital = relationship("Hospital", back_populates="patients")
    appointments = relationship("Appointment", back_populates="patient", cascade="all, delete-orphan")
    medical_records = relationship("MedicalRecord", back_populates="patient", cascade="all, delete-orphan")

    def __repr__(self):
        """String representation of the Patient model"""
        return f"<Patient(id={self.id}, hospital_id={self.hospital_id})>"

    @property
    def hospital_name(self) -> str:
        """Get the owning hospital's name"""
        return self.hospital.name if self.hospital else None
