"""
Patient Router - API endpoints for patient records.

All endpoints require a bearer token. Results are limited to the caller's
hospital; SUPER_ADMIN sees every hospital.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import require_action
from ..core.pagination import PageParams
from ..core.permissions import Action, Principal
from ..appointments.models import AppointmentStatus
from ..appointments.schemas import AppointmentListResponse, AppointmentResponse
from ..appointments.service import list_patient_appointments
from ..medical_records.schemas import MedicalRecordListResponse, MedicalRecordResponse
from ..auth.schemas import MessageResponse
from .schemas import (
    PatientCreate,
    PatientUpdate,
    PatientResponse,
    PatientEnvelope,
    PatientListResponse,
)
from .service import (
    get_patient,
    list_patients,
    create_patient,
    update_patient,
    delete_patient,
    list_medical_records,
)

router = APIRouter()

@router.get("/", response_model=PatientListResponse)
def list_patients_route(
    search: Optional[str] = Query(None, description="Search by name or email"),
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.LIST_PATIENTS))
):
    """
    Get a paginated list of patients, newest first.
    """
    page = list_patients(db, principal, page_params, search)
    return PatientListResponse(
        data=[PatientResponse.model_validate(patient) for patient in page.items],
        pagination=page.meta
    )

@router.get("/{patient_id}", response_model=PatientEnvelope)
def get_patient_route(
    patient_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.READ_PATIENT))
):
    """
    Get a patient by ID. Patients of other hospitals are reported as not found.
    """
    patient = get_patient(db, principal, patient_id)
    return PatientEnvelope(data=PatientResponse.model_validate(patient))

@router.post("/", response_model=PatientEnvelope, status_code=status.HTTP_201_CREATED)
def create_patient_route(
    data: PatientCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.CREATE_PATIENT))
):
    """
    Create a patient in the caller's hospital.
    """
    patient = create_patient(db, principal, data)
    return PatientEnvelope(
        message="Patient created successfully.",
        data=PatientResponse.model_validate(patient)
    )

@router.put("/{patient_id}", response_model=PatientEnvelope)
def update_patient_route(
    patient_id: int,
    data: PatientUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.UPDATE_PATIENT))
):
    """
    Update a patient. Only the supplied fields are changed.
    """
    patient = update_patient(db, principal, patient_id, data)
    return PatientEnvelope(
        message="Patient updated successfully.",
        data=PatientResponse.model_validate(patient)
    )

@router.delete("/{patient_id}", response_model=MessageResponse)
def delete_patient_route(
    patient_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.DELETE_PATIENT))
):
    """
    Delete a patient with all of their appointments and medical records.

    Only SUPER_ADMIN and ADMIN may delete patients.
    """
    delete_patient(db, principal, patient_id)
    return MessageResponse(message="Patient deleted successfully.")

@router.get("/{patient_id}/medical-records", response_model=MedicalRecordListResponse)
def list_medical_records_route(
    patient_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.READ_MEDICAL_RECORDS))
):
    records = list_medical_records(db, principal, patient_id)
    return MedicalRecordListResponse(
        data=[MedicalRecordResponse.model_validate(record) for record in records]
    )

@router.get("/{patient_id}/appointments", response_model=AppointmentListResponse)
def list_patient_appointments_route(
    patient_id: int,
    appointment_status: Optional[AppointmentStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.LIST_PATIENT_APPOINTMENTS))
):
    """
    Get a patient's appointments, latest first. Doctors only see their own.
    """
    appointments = list_patient_appointments(db, principal, patient_id, appointment_status)
    return AppointmentListResponse(
        data=[AppointmentResponse.model_validate(appointment) for appointment in appointments]
    )
