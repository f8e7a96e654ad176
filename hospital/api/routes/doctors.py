from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import Principal, get_admin
from ...services.doctor_service import DoctorService
from ...schemas.common import APIResponse
from ...schemas.doctor import DoctorCreate, DoctorUpdate, DoctorResponse

router = APIRouter(prefix="/doctors", tags=["Doctors"])


@router.get("", response_model=APIResponse[List[DoctorResponse]])
def list_doctors(db: Session = Depends(get_db)):
    doctors = DoctorService(db).list_doctors()
    return APIResponse(data=[DoctorResponse.model_validate(d) for d in doctors])


@router.get("/department/{department_id}", response_model=APIResponse[List[DoctorResponse]])
def list_doctors_by_department(department_id: int, db: Session = Depends(get_db)):
    """Doctors assigned to a department, used by the booking form."""
    doctors = DoctorService(db).list_by_department(department_id)
    return APIResponse(data=[DoctorResponse.model_validate(d) for d in doctors])


@router.get("/{doctor_id}", response_model=APIResponse[DoctorResponse])
def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    doctor = DoctorService(db).get_doctor(doctor_id)
    return APIResponse(data=DoctorResponse.model_validate(doctor))


@router.post(
    "",
    response_model=APIResponse[DoctorResponse],
    status_code=status.HTTP_201_CREATED
)
def create_doctor(
    doctor_data: DoctorCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    doctor = DoctorService(db).create_doctor(doctor_data)
    return APIResponse(
        message="Doctor added successfully",
        data=DoctorResponse.model_validate(doctor)
    )


@router.put("/{doctor_id}", response_model=APIResponse[DoctorResponse])
def update_doctor(
    doctor_id: int,
    doctor_data: DoctorUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    doctor = DoctorService(db).update_doctor(doctor_id, doctor_data)
    return APIResponse(
        message="Doctor updated successfully",
        data=DoctorResponse.model_validate(doctor)
    )


@router.delete("/{doctor_id}", response_model=APIResponse[None])
def delete_doctor(
    doctor_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    DoctorService(db).delete_doctor(doctor_id)
    return APIResponse(message="Doctor deleted successfully")
