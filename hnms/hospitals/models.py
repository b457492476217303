"""
Hospital Model - The tenant that owns users and patients.
"""
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from ..database import Base

class Hospital(Base):
    """
    Hospital Model - Unit of data isolation

    Fields:
    - id: Primary key for hospital
    - name: Hospital name
    - address: Physical address (optional)
    - phone: Contact number (optional)
    - created_at: When the hospital was created
    """
    __tablename__ = "hospitals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    users = relationship("User", back_populates="hospital")
    patients = relationship("Patient", back_populates="hospital")

    def __repr__(self):
        return f"<Hospital(id={self.id}, name='{self.name}')>"
