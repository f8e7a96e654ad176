from datetime import date, time

import pytest

from hospital.core.exceptions import (
    HasDependents, NotFound, SlotConflict, ValidationError, InvalidCredentials
)
from hospital.models.appointment import AppointmentStatus
from hospital.schemas.appointment import AppointmentCreate, AppointmentUpdate
from hospital.schemas.auth import PatientRegister, PatientLogin
from hospital.schemas.department import DepartmentCreate
from hospital.schemas.doctor import DoctorCreate, DoctorUpdate
from hospital.services.appointment_service import AppointmentService
from hospital.services.auth_service import AuthService
from hospital.services.department_service import DepartmentService
from hospital.services.doctor_service import DoctorService
from hospital.services.patient_service import PatientService, calculate_age, generate_patient_code
from hospital.services.report_service import ReportService


def make_patient(db, email="a@b.com"):
    AuthService(db).register_patient(PatientRegister(
        first_name="Ada", last_name="Lovelace", email=email, phone="5550100",
        date_of_birth=date(1990, 5, 1), gender="female", password="longpass1",
    ))
    return PatientService(db).get_by_email(email)


@pytest.fixture
def clinic(db_session):
    department = DepartmentService(db_session).create_department(DepartmentCreate(name="Cardiology"))
    doctor = DoctorService(db_session).create_doctor(DoctorCreate(
        first_name="Gregory", last_name="House", email="house@hospital.org", phone="5550199",
        specialization="Cardiologist", qualification="MD", experience=12,
        department_id=department.id,
    ))
    return department, doctor


def slot(patient, doctor, **overrides):
    fields = dict(
        patient_id=patient.id, doctor_id=doctor.id, department_id=doctor.department_id,
        appointment_date=date(2025, 6, 1), appointment_time=time(10, 0), reason="Checkup",
    )
    fields.update(overrides)
    return AppointmentCreate(**fields)


class TestAge:

    def test_whole_years(self):
        assert calculate_age(date(2000, 1, 1), today=date(2025, 1, 1)) == 25

    def test_day_before_birthday(self):
        assert calculate_age(date(2000, 6, 2), today=date(2025, 6, 1)) == 24

    def test_future_birth_is_negative(self):
        assert calculate_age(date(2030, 1, 1), today=date(2025, 1, 1)) < 0


class TestPatientCode:

    def test_first_code_of_year(self, db_session):
        assert generate_patient_code(db_session, year=2031) == "P-2031-0001"

    def test_counts_only_matching_year(self, db_session):
        make_patient(db_session)
        year = date.today().year
        assert generate_patient_code(db_session, year=year) == f"P-{year}-0002"
        assert generate_patient_code(db_session, year=year + 1) == f"P-{year + 1}-0001"

    def test_skips_past_deleted_codes(self, db_session):
        first = make_patient(db_session, "one@b.com")
        make_patient(db_session, "two@b.com")
        PatientService(db_session).delete_patient(first.id)

        year = date.today().year
        # One row left for the year, but 0002 is still issued
        assert generate_patient_code(db_session) == f"P-{year}-0003"


class TestAuthService:

    def test_login_failures_share_one_message(self, db_session):
        make_patient(db_session)
        service = AuthService(db_session)

        with pytest.raises(InvalidCredentials) as wrong_password:
            service.patient_login(PatientLogin(email="a@b.com", password="nope-nope"))
        with pytest.raises(InvalidCredentials) as unknown:
            service.patient_login(PatientLogin(email="x@b.com", password="longpass1"))

        assert wrong_password.value.message == unknown.value.message
        assert wrong_password.value.status_code == 401


class TestAppointmentService:

    def test_conflict_then_rebook_after_cancel(self, db_session, clinic):
        _, doctor = clinic
        patient = make_patient(db_session)
        service = AppointmentService(db_session)

        first = service.create_appointment(slot(patient, doctor))
        assert first.status == "pending"

        with pytest.raises(SlotConflict):
            service.create_appointment(slot(patient, doctor))

        service.set_status(first.id, "cancelled")
        second = service.create_appointment(slot(patient, doctor))
        assert second.id != first.id

    def test_reschedule_onto_taken_slot_hits_unique_index(self, db_session, clinic):
        _, doctor = clinic
        patient = make_patient(db_session)
        service = AppointmentService(db_session)

        service.create_appointment(slot(patient, doctor))
        later = service.create_appointment(slot(patient, doctor, appointment_time=time(11, 0)))

        with pytest.raises(SlotConflict):
            service.update_appointment(later.id, AppointmentUpdate(appointment_time=time(10, 0)))

    def test_missing_reason(self, db_session, clinic):
        _, doctor = clinic
        patient = make_patient(db_session)
        with pytest.raises(ValidationError):
            AppointmentService(db_session).create_appointment(slot(patient, doctor, reason=""))

    def test_unknown_department(self, db_session, clinic):
        _, doctor = clinic
        patient = make_patient(db_session)
        with pytest.raises(NotFound):
            AppointmentService(db_session).create_appointment(slot(patient, doctor, department_id=999))


class TestDependents:

    def test_doctor_with_appointment(self, db_session, clinic):
        _, doctor = clinic
        patient = make_patient(db_session)
        AppointmentService(db_session).create_appointment(slot(patient, doctor))

        with pytest.raises(HasDependents):
            DoctorService(db_session).delete_doctor(doctor.id)

    def test_department_with_doctor(self, db_session, clinic):
        department, _ = clinic
        with pytest.raises(HasDependents):
            DepartmentService(db_session).delete_department(department.id)

    def test_department_with_appointments_only(self, db_session, clinic):
        department, doctor = clinic
        patient = make_patient(db_session)
        AppointmentService(db_session).create_appointment(slot(patient, doctor))

        # Moving the doctor keeps the department referenced by the booking
        other = DepartmentService(db_session).create_department(DepartmentCreate(name="Neurology"))
        DoctorService(db_session).update_doctor(doctor.id, DoctorUpdate(department_id=other.id))

        with pytest.raises(HasDependents) as blocked:
            DepartmentService(db_session).delete_department(department.id)
        assert "appointments" in blocked.value.message


class TestReport:

    def test_today_uses_given_date(self, db_session, clinic):
        _, doctor = clinic
        patient = make_patient(db_session)
        AppointmentService(db_session).create_appointment(slot(patient, doctor))

        report = ReportService(db_session)
        assert report.stats_summary(today=date(2025, 6, 1)).today == 1
        assert report.stats_summary(today=date(2025, 6, 2)).today == 0
        assert report.stats_summary().pending == 1

    def test_counts_every_status(self, db_session, clinic):
        _, doctor = clinic
        patient = make_patient(db_session)
        service = AppointmentService(db_session)
        for hour, status in enumerate(AppointmentStatus, start=9):
            booked = service.create_appointment(slot(patient, doctor, appointment_time=time(hour, 0)))
            service.set_status(booked.id, status.value)

        summary = ReportService(db_session).stats_summary()
        assert summary.total_appointments == 4
        assert (summary.pending, summary.approved, summary.completed, summary.cancelled) == (1, 1, 1, 1)
