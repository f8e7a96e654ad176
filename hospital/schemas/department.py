from typing import Optional
from datetime import datetime

from .common import RequestModel, ORMModel


class DepartmentCreate(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None


class DepartmentUpdate(DepartmentCreate):
    pass


class DepartmentResponse(ORMModel):
    id: int
    name: str
    description: Optional[str] = None
    doctor_count: int = 0
    appointment_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
