from sqlalchemy.orm import Session
import logging

from ..models.admin import Admin
from ..models.patient import Patient
from ..core.config import settings
from ..core.database import commit_or_rollback
from ..core.exceptions import (
    ValidationError, InvalidCredentials, DuplicateEmail, NotFound
)
from ..core.security import (
    verify_password, get_password_hash, password_meets_policy,
    create_access_token, UserRole
)
from ..schemas.auth import (
    AdminLogin, PatientLogin, PatientRegister, ChangePassword,
    AdminSession, PatientSession, RegistrationResult
)
from ..schemas.patient import PatientResponse
from .patient_service import checked_age, generate_patient_code
from .validation import require_fields, is_valid_email

logger = logging.getLogger(__name__)

REGISTRATION_FIELDS = (
    "first_name", "last_name", "email", "phone",
    "date_of_birth", "gender", "password",
)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def admin_login(self, login_data: AdminLogin) -> AdminSession:
        """Check admin credentials and issue an admin access token."""
        require_fields(login_data, ("admin_id", "password"), "Admin ID and password are required")

        admin = self.db.query(Admin).filter(
            Admin.admin_id == login_data.admin_id
        ).first()

        if not admin or not verify_password(login_data.password, admin.password_hash):
            logger.warning(f"Failed admin login for '{login_data.admin_id}'")
            raise InvalidCredentials("Invalid admin credentials")

        token = create_access_token(admin.admin_id, UserRole.ADMIN)
        return AdminSession(admin_id=admin.admin_id, **token.model_dump())

    def patient_login(self, login_data: PatientLogin) -> PatientSession:
        """Check patient credentials.

        Unknown email and wrong password fail identically so the response
        does not reveal which accounts exist.
        """
        require_fields(login_data, ("email", "password"), "Email and password are required")

        patient = self.db.query(Patient).filter(
            Patient.email == login_data.email
        ).first()

        if not patient or not verify_password(login_data.password, patient.password_hash):
            logger.warning("Failed patient login attempt")
            raise InvalidCredentials("Invalid email or password")

        token = create_access_token(str(patient.id), UserRole.PATIENT)
        profile = PatientResponse.model_validate(patient).model_dump()
        return PatientSession(**profile, **token.model_dump())

    def register_patient(self, user_data: PatientRegister) -> RegistrationResult:
        """Register a new patient with their own credentials."""
        require_fields(user_data, REGISTRATION_FIELDS)

        if not is_valid_email(user_data.email):
            raise ValidationError("Invalid email format")

        if not password_meets_policy(user_data.password):
            raise ValidationError(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
            )

        age = checked_age(user_data.date_of_birth)

        # Check if patient already exists
        existing = self.db.query(Patient.id).filter(
            Patient.email == user_data.email
        ).first()
        if existing:
            raise DuplicateEmail()

        new_patient = Patient(
            **user_data.model_dump(exclude={"password"}),
            patient_id=generate_patient_code(self.db),
            age=age,
            password_hash=get_password_hash(user_data.password),
        )

        self.db.add(new_patient)
        commit_or_rollback(self.db, DuplicateEmail("Email or patient ID already registered"))

        logger.info(f"New patient registered: {new_patient.patient_id}")
        return RegistrationResult(
            patient_id=new_patient.patient_id,
            email=new_patient.email,
        )

    def change_password(self, password_data: ChangePassword) -> None:
        require_fields(
            password_data,
            ("email", "current_password", "new_password"),
            "Email, current password, and new password are required",
        )

        if not password_meets_policy(password_data.new_password):
            raise ValidationError(
                f"New password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
            )

        patient = self.db.query(Patient).filter(
            Patient.email == password_data.email
        ).first()
        if not patient:
            raise NotFound("Patient not found")

        if not verify_password(password_data.current_password, patient.password_hash):
            raise InvalidCredentials("Current password is incorrect")

        patient.password_hash = get_password_hash(password_data.new_password)
        commit_or_rollback(self.db)
        logger.info(f"Password changed for patient {patient.patient_id}")
