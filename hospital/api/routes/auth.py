from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import rate_limit_check
from ...services.auth_service import AuthService
from ...schemas.common import APIResponse
from ...schemas.auth import (
    AdminLogin, PatientLogin, PatientRegister, ChangePassword,
    AdminSession, PatientSession, RegistrationResult
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/admin/login", response_model=APIResponse[AdminSession])
def admin_login(
    login_data: AdminLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate the administrator and return an access token."""
    session = AuthService(db).admin_login(login_data)
    return APIResponse(message="Login successful", data=session)


@router.post("/patient/login", response_model=APIResponse[PatientSession])
def patient_login(
    login_data: PatientLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a patient and return their profile with an access token."""
    session = AuthService(db).patient_login(login_data)
    return APIResponse(message="Login successful", data=session)


@router.post(
    "/patient/register",
    response_model=APIResponse[RegistrationResult],
    status_code=status.HTTP_201_CREATED
)
def register(
    user_data: PatientRegister,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Register a new patient."""
    result = AuthService(db).register_patient(user_data)
    return APIResponse(
        message="Registration successful. Please login with your credentials.",
        data=result
    )


@router.post("/patient/change-password", response_model=APIResponse[None])
def change_password(
    password_data: ChangePassword,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Change a patient's password after checking the current one."""
    AuthService(db).change_password(password_data)
    return APIResponse(message="Password changed successfully")
