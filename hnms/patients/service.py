"""
Patient Service - Business logic for patient records.

Every lookup goes through a ``ScopedQuery`` so principals only ever see
patients of their own hospital (SUPER_ADMIN sees all).
"""
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from ..core.pagination import Page, PageParams
from ..core.permissions import Action, Principal, authorize
from ..core.query import ScopedQuery
from ..core.updates import apply_patch, patch_values
from ..exceptions import (
    InternalServerException,
    NotFoundOrForbiddenException,
    ValidationException,
)
from ..hospitals.models import Hospital
from ..medical_records.models import MedicalRecord
from .models import Patient
from .schemas import PatientCreate, PatientUpdate

# Set up logging
logger = logging.getLogger(__name__)

def scoped_patients(db: Session, principal: Principal, action: Action) -> ScopedQuery:
    """
    Patient query restricted to what the principal may see for ``action``.

    Raises:
        ForbiddenException: If the principal may not perform the action
    """
    decision = authorize(principal, action)
    return ScopedQuery(db.query(Patient), decision, tenant_column=Patient.hospital_id)

def get_patient(db: Session, principal: Principal, patient_id: int, action: Action = Action.READ_PATIENT) -> Patient:
    """
    Get a patient by ID within the principal's scope.

    Args:
        db: Database session
        principal: Authenticated actor
        patient_id: ID of the patient
        action: Action the lookup is performed for

    Returns:
        Patient: Patient row

    Raises:
        NotFoundOrForbiddenException: If the patient does not exist or belongs to another hospital
    """
    patient = scoped_patients(db, principal, action).filter(Patient.id == patient_id).first()
    if patient is None:
        raise NotFoundOrForbiddenException("Patient")
    return patient

def list_patients(
    db: Session,
    principal: Principal,
    page_params: PageParams,
    search: Optional[str] = None
) -> Page:
    """
    Get a paginated list of patients, newest first.

    Args:
        db: Database session
        principal: Authenticated actor
        page_params: Page number and size
        search: Optional text matched against name and email

    Returns:
        Page: Patients on the requested page and pagination metadata
    """
    return (
        scoped_patients(db, principal, Action.LIST_PATIENTS)
        .search(search, Patient.full_name, Patient.email)
        .order_by(Patient.created_at.desc(), Patient.id.desc())
        .page(page_params)
    )

def create_patient(db: Session, principal: Principal, data: PatientCreate) -> Patient:
    """
    Create a patient in the caller's hospital.

    A hospital id in the body must match the caller's own hospital unless the
    caller is SUPER_ADMIN, who has to name one.

    Raises:
        ValidationException: If no hospital can be determined or it does not exist
        ForbiddenException: If the hospital belongs to another tenant
    """
    hospital_id = data.hospital_id if data.hospital_id is not None else principal.tenant_id
    if hospital_id is None:
        raise ValidationException("Hospital ID is required.")

    authorize(principal, Action.CREATE_PATIENT, resource_tenant_id=hospital_id)

    if db.get(Hospital, hospital_id) is None:
        raise ValidationException("Hospital not found.")

    patient = Patient(hospital_id=hospital_id, **data.model_dump(exclude={"hospital_id"}))
    db.add(patient)
    try:
        db.commit()
        db.refresh(patient)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating patient: {str(e)}")
        raise InternalServerException("Error creating patient.")

    logger.info(f"Patient {patient.id} created in hospital {hospital_id} by user {principal.id}")
    return patient

def update_patient(db: Session, principal: Principal, patient_id: int, data: PatientUpdate) -> Patient:
    """
    Partially update a patient; omitted fields keep their values.

    Raises:
        NotFoundOrForbiddenException: If the patient is outside the principal's scope
    """
    patient = get_patient(db, principal, patient_id, Action.UPDATE_PATIENT)

    if apply_patch(patient, patch_values(data)):
        try:
            db.commit()
            db.refresh(patient)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating patient {patient_id}: {str(e)}")
            raise InternalServerException("Error updating patient.")
        logger.info(f"Patient {patient_id} updated by user {principal.id}")

    return patient

def delete_patient(db: Session, principal: Principal, patient_id: int) -> None:
    """
    Delete a patient together with their appointments and medical records.

    Raises:
        ForbiddenException: If the role may not delete patients
        NotFoundOrForbiddenException: If the patient is outside the principal's scope
    """
    patient = get_patient(db, principal, patient_id, Action.DELETE_PATIENT)
    db.delete(patient)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting patient {patient_id}: {str(e)}")
        raise InternalServerException("Error deleting patient.")
    logger.info(f"Patient {patient_id} deleted by user {principal.id}")

def list_medical_records(db: Session, principal: Principal, patient_id: int) -> List[MedicalRecord]:
    """
    Get a patient's medical records, newest first.
    """
    patient = get_patient(db, principal, patient_id, Action.READ_MEDICAL_RECORDS)
    return (
        db.query(MedicalRecord)
        .filter(MedicalRecord.patient_id == patient.id)
        .order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc())
        .all()
    )
