from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
import logging
import math

from ..models.patient import Patient
from ..core.config import settings
from ..core.database import commit_or_rollback
from ..core.exceptions import NotFound, DuplicateEmail, ValidationError
from ..core.security import get_password_hash, password_meets_policy
from ..schemas.patient import PatientCreate, PatientUpdate
from .validation import require_fields, changed_fields, is_valid_email

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "email", "phone", "date_of_birth", "gender")

DAYS_PER_YEAR = 365.25

MAX_AGE = 150


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """Whole years elapsed since ``date_of_birth``."""
    today = today or date.today()
    return math.floor((today - date_of_birth).days / DAYS_PER_YEAR)


def checked_age(date_of_birth: date) -> int:
    """Age for a stored record; rejects births in the future or implausibly long ago."""
    age = calculate_age(date_of_birth)
    if age < 0 or age > MAX_AGE:
        raise ValidationError("Invalid date of birth")
    return age


def generate_patient_code(db: Session, year: Optional[int] = None) -> str:
    """Next display ID for the year, e.g. ``P-2025-0007``.

    The sequence is the number of codes already issued for the year plus one.
    If that code is taken (rows were deleted), it continues after the highest
    issued sequence instead.
    """
    year = year or date.today().year
    prefix = f"P-{year}-"
    year_codes = db.query(Patient.patient_id).filter(Patient.patient_id.like(f"{prefix}%"))

    count = year_codes.with_entities(func.count(Patient.id)).scalar() or 0
    code = f"{prefix}{count + 1:04d}"

    if db.query(Patient.id).filter(Patient.patient_id == code).first():
        highest = max(
            int(existing.rsplit("-", 1)[1]) for (existing,) in year_codes.all()
        )
        code = f"{prefix}{highest + 1:04d}"

    return code


class PatientService:
    def __init__(self, db: Session):
        self.db = db

    def list_patients(self) -> List[Patient]:
        """All patients, newest first."""
        return (
            self.db.query(Patient)
            .order_by(Patient.created_at.desc(), Patient.id.desc())
            .all()
        )

    def get_patient(self, patient_id: int) -> Patient:
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFound("Patient not found")
        return patient

    def get_by_email(self, email: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.email == email).first()

    def create_patient(self, patient_data: PatientCreate) -> Patient:
        """Add a patient from the admin directory."""
        require_fields(patient_data, REQUIRED_FIELDS)

        if not is_valid_email(patient_data.email):
            raise ValidationError("Invalid email format")

        if patient_data.password is not None and not password_meets_policy(patient_data.password):
            raise ValidationError(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
            )

        age = checked_age(patient_data.date_of_birth)

        if self.get_by_email(patient_data.email):
            raise DuplicateEmail()

        password = patient_data.password or settings.DEFAULT_PATIENT_PASSWORD
        fields = patient_data.model_dump(exclude={"password"})

        patient = Patient(
            **fields,
            patient_id=generate_patient_code(self.db),
            age=age,
            password_hash=get_password_hash(password),
        )
        self.db.add(patient)
        commit_or_rollback(self.db, DuplicateEmail("Email or patient ID already registered"))
        self.db.refresh(patient)

        logger.info(f"Patient {patient.patient_id} added")
        return patient

    def update_patient(self, patient_id: int, patient_data: PatientUpdate) -> Patient:
        patient = self.get_patient(patient_id)
        updates = changed_fields(patient_data)

        for name in REQUIRED_FIELDS:
            if name in updates and updates[name] == "":
                raise ValidationError(f"{name.replace('_', ' ').capitalize()} cannot be empty")

        new_email = updates.get("email")
        if new_email is not None and not is_valid_email(new_email):
            raise ValidationError("Invalid email format")
        if new_email and new_email != patient.email and self.get_by_email(new_email):
            raise DuplicateEmail()

        if "date_of_birth" in updates:
            updates["age"] = checked_age(updates["date_of_birth"])

        for name, value in updates.items():
            setattr(patient, name, value)

        commit_or_rollback(self.db, DuplicateEmail())
        self.db.refresh(patient)
        return patient

    def delete_patient(self, patient_id: int) -> None:
        """Remove a patient together with every appointment they own."""
        patient = self.get_patient(patient_id)
        code = patient.patient_id
        self.db.delete(patient)
        commit_or_rollback(self.db)
        logger.info(f"Patient {code} deleted with their appointments")
