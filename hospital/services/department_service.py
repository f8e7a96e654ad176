from sqlalchemy import func, select
from sqlalchemy.orm import Session
from typing import List
import logging

from ..models.department import Department
from ..models.doctor import Doctor
from ..models.appointment import Appointment
from ..core.database import commit_or_rollback
from ..core.exceptions import NotFound, DuplicateName, HasDependents, ValidationError
from ..schemas.department import DepartmentCreate, DepartmentUpdate, DepartmentResponse
from .validation import require_fields, changed_fields, is_blank

logger = logging.getLogger(__name__)


class DepartmentService:
    def __init__(self, db: Session):
        self.db = db

    def _with_counts(self):
        doctor_count = (
            select(func.count(Doctor.id))
            .where(Doctor.department_id == Department.id)
            .correlate(Department)
            .scalar_subquery()
        )
        appointment_count = (
            select(func.count(Appointment.id))
            .where(Appointment.department_id == Department.id)
            .correlate(Department)
            .scalar_subquery()
        )
        return self.db.query(
            Department,
            doctor_count.label("doctor_count"),
            appointment_count.label("appointment_count"),
        )

    @staticmethod
    def _to_response(row) -> DepartmentResponse:
        department, doctor_count, appointment_count = row
        response = DepartmentResponse.model_validate(department)
        response.doctor_count = doctor_count or 0
        response.appointment_count = appointment_count or 0
        return response

    def list_departments(self) -> List[DepartmentResponse]:
        rows = self._with_counts().order_by(Department.name).all()
        return [self._to_response(row) for row in rows]

    def get_department(self, department_id: int) -> DepartmentResponse:
        row = self._with_counts().filter(Department.id == department_id).first()
        if not row:
            raise NotFound("Department not found")
        return self._to_response(row)

    def _get(self, department_id: int) -> Department:
        department = self.db.query(Department).filter(Department.id == department_id).first()
        if not department:
            raise NotFound("Department not found")
        return department

    def _name_taken(self, name: str) -> bool:
        return self.db.query(Department.id).filter(Department.name == name).first() is not None

    def create_department(self, department_data: DepartmentCreate) -> DepartmentResponse:
        require_fields(department_data, ("name",), "Department name is required")

        if self._name_taken(department_data.name):
            raise DuplicateName()

        department = Department(**department_data.model_dump())
        self.db.add(department)
        commit_or_rollback(self.db, DuplicateName())

        logger.info(f"Department '{department.name}' added")
        return self.get_department(department.id)

    def update_department(self, department_id: int, department_data: DepartmentUpdate) -> DepartmentResponse:
        department = self._get(department_id)
        updates = changed_fields(department_data)

        if "name" in updates:
            if is_blank(updates["name"]):
                raise ValidationError("Department name is required")
            if updates["name"] != department.name and self._name_taken(updates["name"]):
                raise DuplicateName()

        for name, value in updates.items():
            setattr(department, name, value)

        commit_or_rollback(self.db, DuplicateName())
        return self.get_department(department_id)

    def delete_department(self, department_id: int) -> None:
        """Delete a department; refused while doctors or appointments reference it."""
        department = self._get(department_id)

        if self.db.query(Doctor.id).filter(Doctor.department_id == department_id).count() > 0:
            raise HasDependents("Cannot delete department with assigned doctors")
        if self.db.query(Appointment.id).filter(Appointment.department_id == department_id).count() > 0:
            raise HasDependents("Cannot delete department with existing appointments")

        self.db.delete(department)
        commit_or_rollback(self.db)
        logger.info(f"Department {department_id} deleted")
