from pydantic import AliasChoices, Field
from typing import Optional
from datetime import datetime

from .common import RequestModel, ORMModel

# The booking pages send the department id as "department"
_DEPARTMENT_ALIASES = AliasChoices("department_id", "departmentId", "department")


class DoctorCreate(RequestModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    specialization: Optional[str] = None
    qualification: Optional[str] = None
    experience: Optional[int] = None
    department_id: Optional[int] = Field(default=None, validation_alias=_DEPARTMENT_ALIASES)


class DoctorUpdate(DoctorCreate):
    """Every field optional; omitted or null fields keep their stored value."""


class DoctorResponse(ORMModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    specialization: str
    qualification: str
    experience: int
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
