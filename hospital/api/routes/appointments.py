from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...core.exceptions import PermissionDenied
from ...api.deps import Principal, get_admin, get_current_principal, ensure_patient_access
from ...models.appointment import AppointmentStatus
from ...services.appointment_service import AppointmentService, parse_status
from ...services.report_service import ReportService
from ...schemas.common import APIResponse
from ...schemas.appointment import (
    AppointmentCreate, AppointmentUpdate, AppointmentStatusUpdate,
    AppointmentResponse, AppointmentDetailResponse, StatsSummary
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.get("/stats/summary", response_model=APIResponse[StatsSummary])
def stats_summary(
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    """Appointment counts per status plus today's bookings."""
    return APIResponse(data=ReportService(db).stats_summary())


@router.get("", response_model=APIResponse[List[AppointmentResponse]])
def list_appointments(
    status_filter: Optional[str] = Query(None, alias="status"),
    patient_id: Optional[int] = Query(None, alias="patientId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    if not principal.is_admin:
        # Patients only ever see their own bookings
        patient_id = principal.patient_id

    appointments = AppointmentService(db).list_appointments(
        status=status_filter, patient_id=patient_id
    )
    return APIResponse(data=appointments)


@router.get("/{appointment_id}", response_model=APIResponse[AppointmentDetailResponse])
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    appointment = AppointmentService(db).get_appointment(appointment_id)
    ensure_patient_access(principal, appointment.patient_id)
    return APIResponse(data=appointment)


@router.post(
    "",
    response_model=APIResponse[AppointmentResponse],
    status_code=status.HTTP_201_CREATED
)
def create_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    if appointment_data.patient_id is not None:
        ensure_patient_access(principal, appointment_data.patient_id)

    appointment = AppointmentService(db).create_appointment(appointment_data)
    return APIResponse(message="Appointment booked successfully", data=appointment)


@router.put("/{appointment_id}/status", response_model=APIResponse[AppointmentResponse])
def update_appointment_status(
    appointment_id: int,
    status_data: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    service = AppointmentService(db)
    target = parse_status(status_data.status)

    if not principal.is_admin:
        ensure_patient_access(principal, service.get_owner_id(appointment_id))
        if target != AppointmentStatus.CANCELLED:
            raise PermissionDenied("Patients can only cancel appointments")

    appointment = service.set_status(appointment_id, target.value)
    return APIResponse(message=f"Appointment {target.value} successfully", data=appointment)


@router.put("/{appointment_id}", response_model=APIResponse[AppointmentResponse])
def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    appointment = AppointmentService(db).update_appointment(appointment_id, appointment_data)
    return APIResponse(message="Appointment updated successfully", data=appointment)


@router.delete("/{appointment_id}", response_model=APIResponse[None])
def delete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    AppointmentService(db).delete_appointment(appointment_id)
    return APIResponse(message="Appointment deleted successfully")
