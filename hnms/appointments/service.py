"""
Appointment Service - Scheduling rules for appointments.

Appointments are isolated through their patient's hospital. A doctor may
hold at most one SCHEDULED appointment per start time; the check below
gives the user-facing error and the partial unique index on the table is
what actually guarantees it under concurrent writers. Cancelling only
changes the status, rows are never deleted here.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from ..auth.models import User, UserRole
from ..core.pagination import Page, PageParams
from ..core.permissions import Action, Principal, authorize
from ..core.query import ScopedQuery
from ..core.updates import apply_patch, patch_values
from ..exceptions import (
    ConflictException,
    InternalServerException,
    NotFoundException,
    NotFoundOrForbiddenException,
    ValidationException,
)
from ..patients.models import Patient
from ..patients.service import get_patient
from .models import Appointment, AppointmentStatus
from .schemas import AppointmentCreate, AppointmentUpdate

# Set up logging
logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Doctor already has an appointment at this time."

def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """UTC start of ``day`` and of the following day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)

def scoped_appointments(db: Session, principal: Principal, action: Action) -> ScopedQuery:
    """
    Appointment query restricted through the patient's hospital and, for
    doctors on read actions, to the doctor's own appointments.

    Raises:
        ForbiddenException: If the principal may not perform the action
    """
    decision = authorize(principal, action)
    query = db.query(Appointment).join(Patient, Appointment.patient_id == Patient.id)
    return ScopedQuery(
        query,
        decision,
        tenant_column=Patient.hospital_id,
        doctor_column=Appointment.doctor_id,
    )

def get_appointment(
    db: Session,
    principal: Principal,
    appointment_id: int,
    action: Action = Action.READ_APPOINTMENT
) -> Appointment:
    """
    Get an appointment by ID within the principal's scope.

    Raises:
        NotFoundOrForbiddenException: If it does not exist or is outside the principal's scope
    """
    appointment = (
        scoped_appointments(db, principal, action)
        .filter(Appointment.id == appointment_id)
        .first()
    )
    if appointment is None:
        raise NotFoundOrForbiddenException("Appointment")
    return appointment

def list_appointments(
    db: Session,
    principal: Principal,
    page_params: PageParams,
    status: Optional[AppointmentStatus] = None,
    doctor_id: Optional[int] = None,
    patient_id: Optional[int] = None,
    day: Optional[date] = None
) -> Page:
    """
    Get a paginated list of appointments, latest first.

    Args:
        db: Database session
        principal: Authenticated actor
        page_params: Page number and size
        status: Only appointments with this status
        doctor_id: Only appointments with this doctor
        patient_id: Only appointments of this patient
        day: Only appointments starting on this (UTC) date

    Returns:
        Page: Appointments on the requested page and pagination metadata
    """
    return (
        scoped_appointments(db, principal, Action.LIST_APPOINTMENTS)
        .filter_if(status, lambda value: Appointment.status == value)
        .filter_if(doctor_id, lambda value: Appointment.doctor_id == value)
        .filter_if(patient_id, lambda value: Appointment.patient_id == value)
        .filter_if(day, lambda value: _starts_within(*day_bounds(value)))
        .order_by(Appointment.appointment_time.desc(), Appointment.id.desc())
        .page(page_params)
    )

def _starts_within(start: datetime, end: datetime):
    # end exclusive
    return and_(Appointment.appointment_time >= start, Appointment.appointment_time < end)

def list_patient_appointments(
    db: Session,
    principal: Principal,
    patient_id: int,
    status: Optional[AppointmentStatus] = None
) -> List[Appointment]:
    """
    Get all appointments of one patient, latest first.

    Raises:
        NotFoundOrForbiddenException: If the patient is outside the principal's scope
    """
    patient = get_patient(db, principal, patient_id, Action.READ_PATIENT)
    return (
        scoped_appointments(db, principal, Action.LIST_PATIENT_APPOINTMENTS)
        .filter(Appointment.patient_id == patient.id)
        .filter_if(status, lambda value: Appointment.status == value)
        .order_by(Appointment.appointment_time.desc(), Appointment.id.desc())
        .all()
    )

def find_conflicting_appointment(
    db: Session,
    doctor_id: int,
    appointment_time: datetime,
    exclude_id: Optional[int] = None
) -> Optional[Appointment]:
    """
    Find a SCHEDULED appointment of the doctor starting at exactly ``appointment_time``.

    Appointments that merely overlap, starting at a different instant, are
    not considered conflicting.

    Args:
        db: Database session
        doctor_id: Doctor to check
        appointment_time: Requested start time
        exclude_id: Appointment to ignore, used when rescheduling

    Returns:
        The conflicting appointment, if any
    """
    query = db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.status == AppointmentStatus.SCHEDULED,
        Appointment.appointment_time == appointment_time,
    )
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)
    return query.first()

def resolve_doctor(db: Session, doctor_id: int, hospital_id: int) -> User:
    """
    Get an active doctor working at ``hospital_id``.

    Raises:
        NotFoundException: If no such doctor exists
    """
    doctor = (
        db.query(User)
        .filter(
            User.id == doctor_id,
            User.role == UserRole.DOCTOR,
            User.is_active.is_(True),
            User.hospital_id == hospital_id,
        )
        .first()
    )
    if doctor is None:
        raise NotFoundException("Doctor not found.")
    return doctor

def _commit_schedule_change(db: Session, appointment: Appointment, error_message: str) -> None:
    """Commit, mapping a unique index violation to a scheduling conflict."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Scheduling conflict for doctor {appointment.doctor_id} at {appointment.appointment_time}")
        raise ConflictException(CONFLICT_MESSAGE)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{error_message}: {str(e)}")
        raise InternalServerException(error_message)
    db.refresh(appointment)

def create_appointment(db: Session, principal: Principal, data: AppointmentCreate) -> Appointment:
    """
    Book an appointment.

    Args:
        db: Database session
        principal: Authenticated actor
        data: Appointment details

    Returns:
        Appointment: The new SCHEDULED appointment

    Raises:
        NotFoundOrForbiddenException: If the patient is outside the principal's scope
        NotFoundException: If the doctor does not exist at the patient's hospital
        ConflictException: If the doctor already has a scheduled appointment at that time
    """
    patient = get_patient(db, principal, data.patient_id, Action.CREATE_APPOINTMENT)
    doctor = resolve_doctor(db, data.doctor_id, patient.hospital_id)

    if find_conflicting_appointment(db, doctor.id, data.appointment_time):
        logger.warning(f"Booking rejected: doctor {doctor.id} already booked at {data.appointment_time}")
        raise ConflictException(CONFLICT_MESSAGE)

    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        appointment_time=data.appointment_time,
        duration_minutes=data.duration_minutes,
        status=AppointmentStatus.SCHEDULED,
        reason=data.reason,
        notes=data.notes,
    )
    db.add(appointment)
    _commit_schedule_change(db, appointment, "Error creating appointment.")

    logger.info(f"Appointment {appointment.id} booked with doctor {doctor.id} by user {principal.id}")
    return appointment

def update_appointment(
    db: Session,
    principal: Principal,
    appointment_id: int,
    data: AppointmentUpdate
) -> Appointment:
    """
    Partially update or reschedule an appointment.

    Omitted and null fields keep their values. A supplied time is checked for
    conflicts against the doctor's other appointments. An appointment that is
    no longer SCHEDULED cannot be moved back to SCHEDULED.

    Raises:
        NotFoundOrForbiddenException: If it is outside the principal's scope
        ValidationException: On a status change back to SCHEDULED
        ConflictException: If the new time is already booked for the doctor
    """
    appointment = get_appointment(db, principal, appointment_id, Action.UPDATE_APPOINTMENT)
    values = patch_values(data)

    new_status = values.get("status")
    if (
        new_status == AppointmentStatus.SCHEDULED
        and appointment.status != AppointmentStatus.SCHEDULED
    ):
        raise ValidationException(
            f"Cannot change a {appointment.status.value} appointment back to SCHEDULED."
        )

    # Checked whatever the current status, so a cancelled appointment cannot be moved onto a booked slot
    if "appointment_time" in values and find_conflicting_appointment(
        db, appointment.doctor_id, values["appointment_time"], exclude_id=appointment.id
    ):
        logger.warning(f"Reschedule of appointment {appointment.id} rejected: slot taken")
        raise ConflictException(CONFLICT_MESSAGE)

    if apply_patch(appointment, values):
        _commit_schedule_change(db, appointment, "Error updating appointment.")
        logger.info(f"Appointment {appointment.id} updated by user {principal.id}: {sorted(values)}")

    return appointment

def cancel_appointment(db: Session, principal: Principal, appointment_id: int) -> Appointment:
    """
    Cancel an appointment by setting its status to CANCELLED.

    Raises:
        NotFoundOrForbiddenException: If it is outside the principal's scope
    """
    appointment = get_appointment(db, principal, appointment_id, Action.CANCEL_APPOINTMENT)
    if appointment.status != AppointmentStatus.CANCELLED:
        appointment.update_status(AppointmentStatus.CANCELLED)
        _commit_schedule_change(db, appointment, "Error cancelling appointment.")
        logger.info(f"Appointment {appointment.id} cancelled by user {principal.id}")
    return appointment

def get_doctor_schedule(
    db: Session,
    principal: Principal,
    doctor_id: int,
    day: Optional[date] = None,
    week_start: Optional[date] = None
) -> List[Appointment]:
    """
    Get a doctor's SCHEDULED appointments in chronological order.

    Args:
        db: Database session
        principal: Authenticated actor
        doctor_id: Doctor whose schedule is requested
        day: Only this (UTC) date; takes precedence over ``week_start``
        week_start: Seven days starting at this date, end exclusive

    Returns:
        List of appointments
    """
    scoped = (
        scoped_appointments(db, principal, Action.VIEW_DOCTOR_SCHEDULE)
        .filter(
            Appointment.doctor_id == doctor_id,
            Appointment.status == AppointmentStatus.SCHEDULED,
        )
    )

    if day is not None:
        start, end = day_bounds(day)
    elif week_start is not None:
        start = day_bounds(week_start)[0]
        end = start + timedelta(days=7)
    else:
        start = end = None

    if start is not None:
        scoped.filter(_starts_within(start, end))

    return scoped.order_by(Appointment.appointment_time.asc(), Appointment.id.asc()).all()
