from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime, time

from .common import RequestModel, ORMModel
from ..models.appointment import Appointment


class AppointmentCreate(RequestModel):
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    department_id: Optional[int] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[time] = None
    reason: Optional[str] = None


class AppointmentUpdate(RequestModel):
    """Reschedule or edit; omitted or null fields keep their stored value."""
    doctor_id: Optional[int] = None
    department_id: Optional[int] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[time] = None
    reason: Optional[str] = None


class AppointmentStatusUpdate(RequestModel):
    status: Optional[str] = None


class AppointmentResponse(ORMModel):
    id: int
    patient_id: int
    doctor_id: int
    department_id: int
    appointment_date: date
    appointment_time: time
    reason: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Denormalized display fields
    patient_name: str
    patient_code: str
    patient_phone: Optional[str] = None
    doctor_name: str
    specialization: Optional[str] = None
    department_name: str

    @classmethod
    def from_appointment(cls, appointment: Appointment):
        return cls(
            id=appointment.id,
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            department_id=appointment.department_id,
            appointment_date=appointment.appointment_date,
            appointment_time=appointment.appointment_time,
            reason=appointment.reason,
            status=appointment.status.value,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
            patient_name=appointment.patient.full_name,
            patient_code=appointment.patient.patient_id,
            patient_phone=appointment.patient.phone,
            doctor_name=appointment.doctor.full_name,
            specialization=appointment.doctor.specialization,
            department_name=appointment.department.name,
            **cls._detail_fields(appointment),
        )

    @staticmethod
    def _detail_fields(appointment: Appointment) -> dict:
        return {}


class AppointmentDetailResponse(AppointmentResponse):
    patient_email: str
    doctor_phone: Optional[str] = None

    @staticmethod
    def _detail_fields(appointment: Appointment) -> dict:
        return {
            "patient_email": appointment.patient.email,
            "doctor_phone": appointment.doctor.phone,
        }


class StatsSummary(BaseModel):
    total_appointments: int = 0
    pending: int = 0
    approved: int = 0
    completed: int = 0
    cancelled: int = 0
    today: int = 0
