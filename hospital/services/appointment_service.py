from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
import logging

from ..models.appointment import Appointment, AppointmentStatus
from ..models.patient import Patient
from ..models.doctor import Doctor
from ..models.department import Department
from ..core.config import settings
from ..core.database import commit_or_rollback
from ..core.exceptions import NotFound, SlotConflict, ValidationError, InvalidTransition
from ..schemas.appointment import (
    AppointmentCreate, AppointmentUpdate,
    AppointmentResponse, AppointmentDetailResponse
)
from .validation import require_fields, changed_fields

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "patient_id", "doctor_id", "department_id",
    "appointment_date", "appointment_time", "reason",
)

# Enforced only when STRICT_STATUS_TRANSITIONS is enabled
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.APPROVED, AppointmentStatus.CANCELLED},
    AppointmentStatus.APPROVED: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
}

STATUS_VALUES = [s.value for s in AppointmentStatus]


def parse_status(value: Optional[str]) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid status. Must be one of: " + ", ".join(STATUS_VALUES)
        )


class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor),
            joinedload(Appointment.department),
        )

    def _get(self, appointment_id: int) -> Appointment:
        appointment = self._query().filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    def _ensure_exists(self, model, record_id: int, label: str):
        if not self.db.query(model.id).filter(model.id == record_id).first():
            raise NotFound(f"{label} not found")

    def _slot_taken(self, doctor_id: int, appointment_date, appointment_time) -> bool:
        return self.db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date,
            Appointment.appointment_time == appointment_time,
            Appointment.status != AppointmentStatus.CANCELLED,
        ).first() is not None

    def list_appointments(
        self,
        status: Optional[str] = None,
        patient_id: Optional[int] = None
    ) -> List[AppointmentResponse]:
        """Appointments, latest slot first. Filters combine with AND."""
        query = self._query()
        if status:
            query = query.filter(Appointment.status == parse_status(status))
        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)

        query = query.order_by(
            Appointment.appointment_date.desc(),
            Appointment.appointment_time.desc(),
        )
        return [AppointmentResponse.from_appointment(a) for a in query.all()]

    def get_appointment(self, appointment_id: int) -> AppointmentDetailResponse:
        return AppointmentDetailResponse.from_appointment(self._get(appointment_id))

    def get_owner_id(self, appointment_id: int) -> int:
        """Internal id of the patient who owns the appointment."""
        owner = (
            self.db.query(Appointment.patient_id)
            .filter(Appointment.id == appointment_id)
            .first()
        )
        if not owner:
            raise NotFound("Appointment not found")
        return owner[0]

    def create_appointment(self, appointment_data: AppointmentCreate) -> AppointmentResponse:
        """Book a slot. New appointments start out pending."""
        require_fields(appointment_data, REQUIRED_FIELDS, "All fields are required")

        self._ensure_exists(Patient, appointment_data.patient_id, "Patient")
        self._ensure_exists(Doctor, appointment_data.doctor_id, "Doctor")
        self._ensure_exists(Department, appointment_data.department_id, "Department")

        if self._slot_taken(
            appointment_data.doctor_id,
            appointment_data.appointment_date,
            appointment_data.appointment_time,
        ):
            raise SlotConflict()

        appointment = Appointment(
            **appointment_data.model_dump(),
            status=AppointmentStatus.PENDING,
        )
        self.db.add(appointment)
        # The partial unique index catches a concurrent booking of the same slot
        commit_or_rollback(self.db, SlotConflict())

        logger.info(
            f"Appointment {appointment.id} booked: doctor {appointment.doctor_id} "
            f"on {appointment.appointment_date} at {appointment.appointment_time}"
        )
        return AppointmentResponse.from_appointment(self._get(appointment.id))

    def update_appointment(self, appointment_id: int, appointment_data: AppointmentUpdate) -> AppointmentResponse:
        """Coalesce update of the booking details. The slot is not re-checked here."""
        appointment = self._get(appointment_id)
        updates = changed_fields(appointment_data)

        if "reason" in updates and updates["reason"] == "":
            raise ValidationError("Reason cannot be empty")
        if "doctor_id" in updates:
            self._ensure_exists(Doctor, updates["doctor_id"], "Doctor")
        if "department_id" in updates:
            self._ensure_exists(Department, updates["department_id"], "Department")

        for name, value in updates.items():
            setattr(appointment, name, value)

        commit_or_rollback(self.db, SlotConflict())
        return AppointmentResponse.from_appointment(self._get(appointment_id))

    def set_status(self, appointment_id: int, status: Optional[str]) -> AppointmentResponse:
        target = parse_status(status)
        appointment = self._get(appointment_id)
        current = appointment.status

        if (
            settings.STRICT_STATUS_TRANSITIONS
            and target != current
            and target not in ALLOWED_TRANSITIONS[current]
        ):
            raise InvalidTransition(
                f"Cannot change appointment status from {current.value} to {target.value}"
            )

        appointment.status = target
        # Re-activating a cancelled appointment may collide with a newer booking
        commit_or_rollback(self.db, SlotConflict())

        logger.info(f"Appointment {appointment_id} status {current.value} -> {target.value}")
        return AppointmentResponse.from_appointment(self._get(appointment_id))

    def delete_appointment(self, appointment_id: int) -> None:
        appointment = self._get(appointment_id)
        self.db.delete(appointment)
        commit_or_rollback(self.db)
        logger.info(f"Appointment {appointment_id} deleted")
