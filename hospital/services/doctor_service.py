from sqlalchemy.orm import Session, joinedload
from typing import List
import logging

from ..models.doctor import Doctor
from ..models.department import Department
from ..models.appointment import Appointment
from ..core.database import commit_or_rollback
from ..core.exceptions import NotFound, DuplicateEmail, HasDependents, ValidationError
from ..schemas.doctor import DoctorCreate, DoctorUpdate
from .validation import require_fields, changed_fields

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "first_name", "last_name", "email", "phone",
    "specialization", "qualification", "experience",
)


class DoctorService:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Doctor).options(joinedload(Doctor.department))

    def list_doctors(self) -> List[Doctor]:
        return self._query().order_by(Doctor.created_at.desc(), Doctor.id.desc()).all()

    def list_by_department(self, department_id: int) -> List[Doctor]:
        return (
            self._query()
            .filter(Doctor.department_id == department_id)
            .order_by(Doctor.first_name)
            .all()
        )

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self._query().filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise NotFound("Doctor not found")
        return doctor

    def _email_taken(self, email: str) -> bool:
        return self.db.query(Doctor.id).filter(Doctor.email == email).first() is not None

    def _check_department(self, department_id):
        if department_id is None:
            return
        if not self.db.query(Department.id).filter(Department.id == department_id).first():
            raise NotFound("Department not found")

    def create_doctor(self, doctor_data: DoctorCreate) -> Doctor:
        require_fields(doctor_data, REQUIRED_FIELDS)
        if doctor_data.experience < 0:
            raise ValidationError("Experience cannot be negative")

        if self._email_taken(doctor_data.email):
            raise DuplicateEmail()
        self._check_department(doctor_data.department_id)

        doctor = Doctor(**doctor_data.model_dump())
        self.db.add(doctor)
        commit_or_rollback(self.db, DuplicateEmail())

        logger.info(f"Doctor {doctor.id} added")
        return self.get_doctor(doctor.id)

    def update_doctor(self, doctor_id: int, doctor_data: DoctorUpdate) -> Doctor:
        doctor = self.get_doctor(doctor_id)
        updates = changed_fields(doctor_data)

        new_email = updates.get("email")
        if new_email and new_email != doctor.email and self._email_taken(new_email):
            raise DuplicateEmail()
        if "department_id" in updates:
            self._check_department(updates["department_id"])

        for name, value in updates.items():
            setattr(doctor, name, value)

        commit_or_rollback(self.db, DuplicateEmail())
        return self.get_doctor(doctor_id)

    def delete_doctor(self, doctor_id: int) -> None:
        """Delete a doctor; refused while any appointment references them."""
        doctor = self.get_doctor(doctor_id)

        appointment_count = (
            self.db.query(Appointment.id).filter(Appointment.doctor_id == doctor_id).count()
        )
        if appointment_count > 0:
            raise HasDependents("Cannot delete doctor with existing appointments")

        self.db.delete(doctor)
        commit_or_rollback(self.db)
        logger.info(f"Doctor {doctor_id} deleted")
