from pydantic import BaseModel
from typing import Optional
from datetime import date

from .common import RequestModel, Password
from .patient import PatientResponse


class AdminLogin(RequestModel):
    admin_id: Optional[str] = None
    password: Password = None


class PatientLogin(RequestModel):
    email: Optional[str] = None
    password: Password = None


class PatientRegister(RequestModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    password: Password = None
    blood_group: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None


class ChangePassword(RequestModel):
    email: Optional[str] = None
    current_password: Password = None
    new_password: Password = None


class TokenFields(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AdminSession(TokenFields):
    admin_id: str
    role: str = "admin"


class PatientSession(PatientResponse, TokenFields):
    role: str = "patient"


class RegistrationResult(BaseModel):
    patient_id: str
    email: str
