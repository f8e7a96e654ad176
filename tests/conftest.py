import os

# Must be set before the application modules read their settings
os.environ["TESTING"] = "1"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("AUTH_RATE_LIMIT", "1000")

import pytest
from fastapi.testclient import TestClient

import hospital.models  # noqa: F401
from hospital.main import app
from hospital.core.config import settings
from hospital.core.database import Base, SessionLocal, engine, redis_client


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    redis_client.flushdb()


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def db_session(client):
    """A session on the test database, with the admin account seeded."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Test data
patient_registration = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "a@b.com",
    "phone": "5550100",
    "dateOfBirth": "1990-05-01",
    "gender": "female",
    "password": "longpass1",
}

doctor_data = {
    "firstName": "Gregory",
    "lastName": "House",
    "email": "house@hospital.org",
    "phone": "5550199",
    "specialization": "Cardiologist",
    "qualification": "MD",
    "experience": 12,
}


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/auth/admin/login",
        json={"adminId": settings.ADMIN_ID, "password": settings.ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return auth_headers(response.json()["data"]["access_token"])


@pytest.fixture
def department(client, admin_headers):
    response = client.post(
        "/api/departments",
        json={"name": "Cardiology", "description": "Heart care"},
        headers=admin_headers
    )
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
def doctor(client, admin_headers, department):
    payload = dict(doctor_data, department=department["id"])
    response = client.post("/api/doctors", json=payload, headers=admin_headers)
    assert response.status_code == 201
    return response.json()["data"]


def register_and_login(client, **overrides) -> tuple:
    """Register a patient and return (profile, auth headers)."""
    payload = dict(patient_registration, **overrides)
    response = client.post("/api/auth/patient/register", json=payload)
    assert response.status_code == 201

    login = client.post(
        "/api/auth/patient/login",
        json={"email": payload["email"], "password": payload["password"]}
    )
    assert login.status_code == 200
    data = login.json()["data"]
    return data, auth_headers(data["access_token"])


@pytest.fixture
def patient(client):
    return register_and_login(client)


def book(client, headers, patient_id, doctor, date="2025-06-01", time="10:00", reason="Chest pain"):
    return client.post(
        "/api/appointments",
        json={
            "patientId": patient_id,
            "doctorId": doctor["id"],
            "departmentId": doctor["department_id"],
            "appointmentDate": date,
            "appointmentTime": time,
            "reason": reason,
        },
        headers=headers
    )
