from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import Principal, get_admin, get_current_principal, ensure_patient_access
from ...services.patient_service import PatientService
from ...schemas.common import APIResponse
from ...schemas.patient import PatientCreate, PatientUpdate, PatientResponse

router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("", response_model=APIResponse[List[PatientResponse]])
def list_patients(
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    patients = PatientService(db).list_patients()
    return APIResponse(data=[PatientResponse.model_validate(p) for p in patients])


@router.get("/{patient_id}", response_model=APIResponse[PatientResponse])
def get_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    ensure_patient_access(principal, patient_id)
    patient = PatientService(db).get_patient(patient_id)
    return APIResponse(data=PatientResponse.model_validate(patient))


@router.post(
    "",
    response_model=APIResponse[PatientResponse],
    status_code=status.HTTP_201_CREATED
)
def create_patient(
    patient_data: PatientCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    patient = PatientService(db).create_patient(patient_data)
    return APIResponse(
        message="Patient added successfully",
        data=PatientResponse.model_validate(patient)
    )


@router.put("/{patient_id}", response_model=APIResponse[PatientResponse])
def update_patient(
    patient_id: int,
    patient_data: PatientUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Partial update: omitted fields keep their stored values."""
    ensure_patient_access(principal, patient_id)
    patient = PatientService(db).update_patient(patient_id, patient_data)
    return APIResponse(
        message="Patient updated successfully",
        data=PatientResponse.model_validate(patient)
    )


@router.delete("/{patient_id}", response_model=APIResponse[None])
def delete_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin)
):
    PatientService(db).delete_patient(patient_id)
    return APIResponse(message="Patient deleted successfully")
