"""
Appointment Model - Stores appointment information and scheduling.

This model links a patient to a doctor at a point in time.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Index, func, text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
from ..database import Base

class AppointmentStatus(str, enum.Enum):
    """Enum for appointment status"""
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

DEFAULT_DURATION_MINUTES = 30

class Appointment(Base):
    """
    Appointment Model - Stores appointment information

    Fields:
    - id: Primary key for appointment
    - patient_id: Foreign key to Patient model
    - doctor_id: Foreign key to the doctor's User row
    - appointment_time: Start of the appointment (UTC)
    - duration_minutes: Length of the appointment
    - status: Current status of the appointment
    - reason: Reason for the appointment
    - notes: Additional notes about the appointment
    - created_at: When the appointment was created
    - updated_at: When the appointment was last updated
    """
    __tablename__ = "appointments"
    __table_args__ = (
        # One SCHEDULED appointment per doctor and start time
        Index(
            "uq_appointments_doctor_time_scheduled",
            "doctor_id",
            "appointment_time",
            unique=True,
            postgresql_where=text("status = 'SCHEDULED'"),
            sqlite_where=text("status = 'SCHEDULED'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_time = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=DEFAULT_DURATION_MINUTES)
    status = Column(Enum(AppointmentStatus, name="appointment_status"), nullable=False, default=AppointmentStatus.SCHEDULED)
    reason = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    doctor = relationship("User")
    patient = relationship("Patient", back_populates="appointments")

    def __repr__(self):
        """String representation of the Appointment model"""
        return f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, patient_id={self.patient_id}, time='{self.appointment_time}')>"

    @property
    def patient_name(self):
        return self.patient.full_name if self.patient else None

    @property
    def doctor_name(self):
        return self.doctor.name if self.doctor else None

    @property
    def hospital_id(self):
        return self.patient.hospital_id if self.patient else None

    def update_status(self, status: AppointmentStatus) -> None:
        """
        Update appointment status

        Args:
            status: New appointment status
        """
        self.status = status
        self.updated_at = datetime.now(timezone.utc)
