from typing import Optional
from datetime import date, datetime

from .common import RequestModel, ORMModel, Password


class PatientFields(RequestModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None


class PatientCreate(PatientFields):
    # Falls back to the configured default password when omitted
    password: Password = None


class PatientUpdate(PatientFields):
    """Every field optional; omitted or null fields keep their stored value."""


class PatientResponse(ORMModel):
    id: int
    patient_id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    date_of_birth: date
    age: int
    gender: str
    blood_group: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
