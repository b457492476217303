"""
Appointment Router - API endpoints for booking and managing appointments.

Appointments are visible within the hospital of their patient. Doctors only
see their own appointments when listing or reading.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import require_action
from ..core.pagination import PageParams
from ..core.permissions import Action, Principal
from .models import AppointmentStatus
from .schemas import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentResponse,
    AppointmentEnvelope,
    AppointmentListResponse,
)
from .service import (
    get_appointment,
    list_appointments,
    create_appointment,
    update_appointment,
    cancel_appointment,
    get_doctor_schedule,
)

router = APIRouter()

@router.get("/", response_model=AppointmentListResponse)
def list_appointments_route(
    appointment_status: Optional[AppointmentStatus] = Query(None, alias="status", description="Filter by status"),
    doctor_id: Optional[int] = Query(None, alias="doctorId", description="Filter by doctor"),
    patient_id: Optional[int] = Query(None, alias="patientId", description="Filter by patient"),
    day: Optional[date] = Query(None, alias="date", description="Only appointments on this date (UTC)"),
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.LIST_APPOINTMENTS))
):
    """
    Get a paginated list of appointments, latest first.
    """
    page = list_appointments(
        db,
        principal,
        page_params,
        status=appointment_status,
        doctor_id=doctor_id,
        patient_id=patient_id,
        day=day,
    )
    return AppointmentListResponse(
        data=[AppointmentResponse.model_validate(appointment) for appointment in page.items],
        pagination=page.meta
    )

@router.get("/doctor/{doctor_id}/schedule", response_model=AppointmentListResponse)
def doctor_schedule_route(
    doctor_id: int,
    day: Optional[date] = Query(None, alias="date", description="Only this date (UTC)"),
    week: Optional[date] = Query(None, description="Seven days starting at this date"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.VIEW_DOCTOR_SCHEDULE))
):
    """
    Get a doctor's scheduled appointments in chronological order.

    ``date`` takes precedence over ``week``. Without either the whole schedule is returned.
    """
    appointments = get_doctor_schedule(db, principal, doctor_id, day=day, week_start=week)
    return AppointmentListResponse(
        data=[AppointmentResponse.model_validate(appointment) for appointment in appointments]
    )

@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
def get_appointment_route(
    appointment_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.READ_APPOINTMENT))
):
    appointment = get_appointment(db, principal, appointment_id)
    return AppointmentEnvelope(data=AppointmentResponse.model_validate(appointment))

@router.post("/", response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
def create_appointment_route(
    data: AppointmentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.CREATE_APPOINTMENT))
):
    """
    Book an appointment.

    Returns 409 when the doctor already has a scheduled appointment at the
    same time.
    """
    appointment = create_appointment(db, principal, data)
    return AppointmentEnvelope(
        message="Appointment created successfully.",
        data=AppointmentResponse.model_validate(appointment)
    )

@router.put("/{appointment_id}", response_model=AppointmentEnvelope)
def update_appointment_route(
    appointment_id: int,
    data: AppointmentUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.UPDATE_APPOINTMENT))
):
    """
    Update or reschedule an appointment. Only the supplied fields are changed.
    """
    appointment = update_appointment(db, principal, appointment_id, data)
    return AppointmentEnvelope(
        message="Appointment updated successfully.",
        data=AppointmentResponse.model_validate(appointment)
    )

@router.delete("/{appointment_id}", response_model=AppointmentEnvelope)
def cancel_appointment_route(
    appointment_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_action(Action.CANCEL_APPOINTMENT))
):
    """
    Cancel an appointment. The row is kept with status CANCELLED.
    """
    appointment = cancel_appointment(db, principal, appointment_id)
    return AppointmentEnvelope(
        message="Appointment cancelled successfully.",
        data=AppointmentResponse.model_validate(appointment)
    )
