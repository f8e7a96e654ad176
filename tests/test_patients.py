from datetime import date

from .conftest import patient_registration, register_and_login, book

directory_patient = {
    "firstName": "Grace",
    "lastName": "Hopper",
    "email": "grace@navy.mil",
    "phone": "5550111",
    "dateOfBirth": "1985-12-09",
    "gender": "female",
    "bloodGroup": "O+",
    "height": 168.0,
}


class TestPatientDirectory:

    def test_create_patient(self, client, admin_headers):
        response = client.post("/api/patients", json=directory_patient, headers=admin_headers)
        assert response.status_code == 201

        data = response.json()["data"]
        assert data["patient_id"] == f"P-{date.today().year}-0001"
        assert data["blood_group"] == "O+"
        assert data["weight"] is None
        assert "password_hash" not in data

    def test_create_patient_missing_fields(self, client, admin_headers):
        response = client.post(
            "/api/patients",
            json={"firstName": "Grace", "lastName": "Hopper"},
            headers=admin_headers
        )
        assert response.status_code == 400

    def test_create_patient_duplicate_email(self, client, admin_headers):
        client.post("/api/patients", json=directory_patient, headers=admin_headers)

        response = client.post("/api/patients", json=directory_patient, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Email already registered"

    def test_create_patient_short_password_rejected(self, client, admin_headers):
        response = client.post(
            "/api/patients",
            json=dict(directory_patient, password="abc"),
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Password must be at least 8 characters long"

        login = client.post("/api/auth/patient/login", json={"email": "grace@navy.mil", "password": "abc"})
        assert login.status_code == 401

    def test_create_patient_with_own_password(self, client, admin_headers):
        response = client.post(
            "/api/patients",
            json=dict(directory_patient, password="navy-secret"),
            headers=admin_headers
        )
        assert response.status_code == 201

        login = client.post(
            "/api/auth/patient/login",
            json={"email": "grace@navy.mil", "password": "navy-secret"}
        )
        assert login.status_code == 200

    def test_create_patient_future_date_of_birth(self, client, admin_headers):
        response = client.post(
            "/api/patients",
            json=dict(directory_patient, dateOfBirth=f"{date.today().year + 2}-01-01"),
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid date of birth"

    def test_create_patient_invalid_email(self, client, admin_headers):
        response = client.post(
            "/api/patients",
            json=dict(directory_patient, email="not-an-email"),
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid email format"

    def test_list_patients_newest_first(self, client, admin_headers):
        client.post("/api/patients", json=directory_patient, headers=admin_headers)
        client.post(
            "/api/patients",
            json=dict(directory_patient, email="second@navy.mil"),
            headers=admin_headers
        )

        response = client.get("/api/patients", headers=admin_headers)
        assert response.status_code == 200

        emails = [p["email"] for p in response.json()["data"]]
        assert emails == ["second@navy.mil", "grace@navy.mil"]

    def test_get_patient_not_found(self, client, admin_headers):
        response = client.get("/api/patients/999", headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Patient not found"}


class TestPatientUpdate:

    def test_partial_update_keeps_other_fields(self, client, admin_headers):
        created = client.post("/api/patients", json=directory_patient, headers=admin_headers).json()["data"]

        response = client.put(
            f"/api/patients/{created['id']}",
            json={"phone": "999"},
            headers=admin_headers
        )
        assert response.status_code == 200

        updated = response.json()["data"]
        assert updated["phone"] == "999"
        for field in ("first_name", "last_name", "email", "date_of_birth", "age", "gender", "blood_group", "patient_id"):
            assert updated[field] == created[field]

    def test_null_fields_are_ignored(self, client, admin_headers):
        created = client.post("/api/patients", json=directory_patient, headers=admin_headers).json()["data"]

        response = client.put(
            f"/api/patients/{created['id']}",
            json={"firstName": None, "address": "1 Main St"},
            headers=admin_headers
        )
        data = response.json()["data"]
        assert data["first_name"] == "Grace"
        assert data["address"] == "1 Main St"

    def test_date_of_birth_change_recomputes_age(self, client, admin_headers):
        created = client.post("/api/patients", json=directory_patient, headers=admin_headers).json()["data"]

        response = client.put(
            f"/api/patients/{created['id']}",
            json={"dateOfBirth": "2000-01-01"},
            headers=admin_headers
        )
        expected = int((date.today() - date(2000, 1, 1)).days // 365.25)
        assert response.json()["data"]["age"] == expected

    def test_update_to_taken_email_rejected(self, client, admin_headers):
        first = client.post("/api/patients", json=directory_patient, headers=admin_headers).json()["data"]
        client.post("/api/patients", json=dict(directory_patient, email="taken@navy.mil"), headers=admin_headers)

        response = client.put(
            f"/api/patients/{first['id']}",
            json={"email": "taken@navy.mil"},
            headers=admin_headers
        )
        assert response.status_code == 400

    def test_update_to_future_date_of_birth_rejected(self, client, admin_headers):
        created = client.post("/api/patients", json=directory_patient, headers=admin_headers).json()["data"]

        response = client.put(
            f"/api/patients/{created['id']}",
            json={"dateOfBirth": f"{date.today().year + 2}-01-01"},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid date of birth"

        stored = client.get(f"/api/patients/{created['id']}", headers=admin_headers).json()["data"]
        assert stored["age"] == created["age"]

    def test_update_to_malformed_email_rejected(self, client):
        profile, headers = register_and_login(client)

        response = client.put(
            f"/api/patients/{profile['id']}",
            json={"email": "nobody-at-nowhere"},
            headers=headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid email format"

    def test_update_missing_patient(self, client, admin_headers):
        response = client.put("/api/patients/999", json={"phone": "1"}, headers=admin_headers)
        assert response.status_code == 404


class TestPatientAccess:

    def test_patient_reads_and_updates_own_profile(self, client):
        profile, headers = register_and_login(client)

        assert client.get(f"/api/patients/{profile['id']}", headers=headers).status_code == 200

        response = client.put(
            f"/api/patients/{profile['id']}",
            json={"address": "221B Baker Street"},
            headers=headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["address"] == "221B Baker Street"

    def test_patient_cannot_read_another_profile(self, client):
        _, headers = register_and_login(client)
        other, _ = register_and_login(client, email="other@b.com")

        response = client.get(f"/api/patients/{other['id']}", headers=headers)
        assert response.status_code == 403


class TestPatientDelete:

    def test_delete_patient_removes_appointments(self, client, admin_headers, doctor):
        profile, headers = register_and_login(client)
        booked = book(client, headers, profile["id"], doctor)
        assert booked.status_code == 201
        appointment_id = booked.json()["data"]["id"]

        response = client.delete(f"/api/patients/{profile['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True

        assert client.get(f"/api/patients/{profile['id']}", headers=admin_headers).status_code == 404
        assert client.get(f"/api/appointments/{appointment_id}", headers=admin_headers).status_code == 404

    def test_delete_missing_patient(self, client, admin_headers):
        response = client.delete("/api/patients/999", headers=admin_headers)
        assert response.status_code == 404
