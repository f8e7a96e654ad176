from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import Principal, get_admin
from ...services.department_service import DepartmentService
from ...schemas.common import APIResponse
from ...schemas.department import DepartmentCreate, DepartmentUpdate, DepartmentResponse

router = APIRouter(prefix="/departments", tags=["Departments"])


@router.get("", response_model=APIResponse[List[DepartmentResponse]])
def list_departments(db: Session = Depends(get_db)):
    return APIResponse(data=DepartmentService(db).list_departments())


@router.get("/{department_id}", response_model=APIResponse[DepartmentResponse])
def get_department(department_id: int, db: Session = Depends(get_db)):
    return APIResponse(data=DepartmentService(db).get_department(department_id))


@router.post(
    "",
    response_model=APIResponse[DepartmentResponse],
    status_code=status.HTTP_201_CREATED
)
def create_department(
    department_data: DepartmentCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    department = DepartmentService(db).create_department(department_data)
    return APIResponse(message="Department added successfully", data=department)


@router.put("/{department_id}", response_model=APIResponse[DepartmentResponse])
def update_department(
    department_id: int,
    department_data: DepartmentUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    department = DepartmentService(db).update_department(department_id, department_data)
    return APIResponse(message="Department updated successfully", data=department)


@router.delete("/{department_id}", response_model=APIResponse[None])
def delete_department(
    department_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    DepartmentService(db).delete_department(department_id)
    return APIResponse(message="Department deleted successfully")
