from datetime import date

import pytest

from app.core.config import ServerConfig
from app.core.database import seed_test_data

from conftest import OFFICE_LATITUDE, OFFICE_WIFI


@pytest.fixture
def seeded(db_path):
    seed_test_data()


def test_location_punch_success(client, sink, office_punch):
    response = client.post("/attendance/location-punch", json=office_punch)
    assert response.status_code == 200

    body = response.json()
    assert body["verified"] is True
    assert body["punch_action"] == "PUNCH_IN"
    assert body["distance_meters"] == 0
    assert body["allowed_radius"] == 100
    assert body["attendance"]["employee"] == "john.doe@company.com"
    assert body["attendance"]["status"] == "Present"
    assert body["attendance"]["location"]["address"] == "Desk 4"
    assert sink.names() == ["location-attendance-updated"]


def test_location_punch_rejected_with_diagnostics(client, sink, office_punch):
    office_punch["location"]["latitude"] = 18.5300
    office_punch["wifi_network"] = "Cafe"

    response = client.post("/attendance/location-punch", json=office_punch)
    assert response.status_code == 403

    body = response.json()
    assert body["verified"] is False
    assert body["verification_status"] == {"wifi": False, "location": False}
    assert len(body["failures"]) == 2
    assert body["distance_meters"] == pytest.approx(1067, abs=2)
    assert body["allowed_radius"] == 100
    assert sink.events == []

    history = client.get("/attendance/employee/john.doe@company.com")
    assert history.json() == []


@pytest.mark.parametrize("body", [
    {"location": {"latitude": OFFICE_LATITUDE, "longitude": 73.8567}, "wifi_network": OFFICE_WIFI},
    {"employee": "john.doe@company.com", "wifi_network": OFFICE_WIFI},
    {"employee": "john.doe@company.com", "location": {"latitude": 91, "longitude": 73.8567}, "wifi_network": OFFICE_WIFI},
    {"employee": "john.doe@company.com", "location": {"latitude": OFFICE_LATITUDE, "longitude": 73.8567}},
])
def test_location_punch_malformed_request(client, body):
    assert client.post("/attendance/location-punch", json=body).status_code == 422


def test_verification_log_lists_attempts(client, office_punch):
    client.post("/attendance/location-punch", json=office_punch)
    office_punch["wifi_network"] = "Cafe"
    client.post("/attendance/location-punch", json=office_punch)

    attempts = client.get("/attendance/verification-log", params={"employee": "john.doe@company.com"}).json()
    assert [a["success"] for a in attempts] == [False, True]


def test_wifi_disconnect_without_record_is_404(client):
    response = client.post("/attendance/wifi-disconnect", json={"employee": "john.doe@company.com"})
    assert response.status_code == 404


def test_wifi_disconnect_escalation_over_http(client, sink, office_punch):
    client.post("/attendance/location-punch", json=office_punch)
    responses = [
        client.post("/attendance/wifi-disconnect", json={"employee": "john.doe@company.com", "duration_minutes": 5})
        for _ in range(3)
    ]
    assert all(r.status_code == 200 for r in responses)

    last = responses[-1].json()
    assert last["escalated"] is True
    assert last["attendance"]["status"] == "Half-Day"
    assert last["regularization"]["status"] == "Pending"

    pending = client.get("/regularization/john.doe@company.com").json()
    assert len(pending) == 1
    assert sink.names().count("new-regularization-request") == 1


def test_manual_attendance_and_daily_listing(client, sink):
    response = client.post("/attendance", json={
        "employee": "jane.smith@company.com",
        "work_date": "2026-10-19",
        "status": "Absent",
    })
    assert response.status_code == 200
    assert response.json()["punch_type"] == "Manual"

    records = client.get("/attendance/2026-10-19").json()
    assert [(r["employee"], r["status"]) for r in records] == [("jane.smith@company.com", "Absent")]
    assert sink.names() == ["attendance-updated"]


def test_company_config_roundtrip(client, sink):
    config = client.get("/company/config").json()
    assert config["company_wifi"] == OFFICE_WIFI
    assert config["office_location"]["allowed_radius"] == 100

    response = client.put("/company/config", json={"office_location": {"allowed_radius": 500}})
    assert response.status_code == 200
    assert response.json()["company_wifi"] == OFFICE_WIFI
    assert response.json()["office_location"]["allowed_radius"] == 500
    assert sink.names() == ["company-config-updated"]


def test_company_config_rejects_bad_values(client):
    assert client.put("/company/config", json={"company_wifi": ""}).status_code == 422
    assert client.put("/company/config", json={"office_location": {"allowed_radius": 0}}).status_code == 422


def test_widened_radius_accepts_far_punch(client, office_punch):
    office_punch["location"]["latitude"] = 18.5300
    assert client.post("/attendance/location-punch", json=office_punch).status_code == 403

    client.put("/company/config", json={"office_location": {"allowed_radius": 1500}})
    assert client.post("/attendance/location-punch", json=office_punch).status_code == 200


def test_register_then_login(client, sink):
    response = client.post("/register", json={
        "email": "new.hire@company.com",
        "password": "s3cret",
        "name": "New Hire",
        "dob": "1995-01-02",
    })
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["username"] == "new.hire"
    assert user["employee_id"].startswith("EMP")
    assert "password" not in user
    assert "password_hash" not in user

    duplicate = client.post("/register", json={"email": "new.hire@company.com", "password": "x"})
    assert duplicate.status_code == 400

    login = client.post("/login", json={"email": "new.hire@company.com", "password": "s3cret", "usertype": "Employee"})
    assert login.status_code == 200
    assert login.json()["user"]["last_login"] is not None
    assert sink.names() == ["user-login"]


@pytest.mark.parametrize("credentials", [
    {"email": "john.doe@company.com", "password": "wrong", "usertype": "employee"},
    {"email": "john.doe@company.com", "password": "password123", "usertype": "hr"},
    {"email": "nobody@company.com", "password": "password123", "usertype": "employee"},
])
def test_login_rejects_bad_credentials(client, seeded, credentials):
    assert client.post("/login", json=credentials).status_code == 401


def test_profile_edit_and_password_reset(client, seeded, sink):
    edited = client.put("/edit-profile/john.doe@company.com", json={"name": "Johnny Doe", "phone": "555"})
    assert edited.status_code == 200
    assert edited.json()["user"]["name"] == "Johnny Doe"
    assert sink.names() == ["profile-updated"]

    assert client.post("/recovery/check-email", json={"email": "john.doe@company.com"}).json()["user_exists"] is True
    assert client.post("/recovery/check-email", json={"email": "ghost@company.com"}).status_code == 404

    client.post("/recovery/reset-password", json={"email": "john.doe@company.com", "new_password": "fresh"})
    login = client.post("/login", json={"email": "john.doe@company.com", "password": "fresh", "usertype": "employee"})
    assert login.status_code == 200


def test_partial_user_update_keeps_other_fields(client, seeded):
    response = client.put("/user/jane.smith@company.com", json={"position": "Recruiter"})
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["position"] == "Recruiter"
    assert user["department"] == "HR"

    assert client.put("/user/ghost@company.com", json={"position": "x"}).status_code == 404


def test_leave_lifecycle(client, sink):
    created = client.post("/leaves", json={
        "employee": "john.doe@company.com",
        "from_date": "2026-10-19",
        "to_date": "2026-10-21",
        "leave_type": "Vacation",
    })
    assert created.status_code == 200
    leave_id = created.json()["leave_id"]
    assert created.json()["status"] == "Pending"

    updated = client.put(f"/leaves/{leave_id}", json={"status": "Approved"})
    assert updated.json()["leave"]["status"] == "Approved"
    assert sink.names() == ["new-leave-request", "leave-status-changed"]

    assert client.put("/leaves/9999", json={"status": "Approved"}).status_code == 404
    assert client.delete(f"/leaves/{leave_id}").status_code == 200
    assert client.get("/leaves").json() == []


def test_leave_cannot_end_before_it_starts(client):
    response = client.post("/leaves", json={
        "employee": "john.doe@company.com",
        "from_date": "2026-10-21",
        "to_date": "2026-10-19",
    })
    assert response.status_code == 400


def test_regularization_review(client, sink):
    submitted = client.post("/regularization", json={
        "employee": "john.doe@company.com",
        "work_date": "2026-10-19",
        "reason": "Forgot to punch out",
    }).json()["regularization"]

    response = client.put(f"/regularization/{submitted['regularization_id']}", json={"status": "Approved"})
    assert response.status_code == 200
    assert response.json()["regularization"]["status"] == "Approved"
    assert response.json()["regularization"]["reason"] == "Forgot to punch out"
    assert sink.names() == ["regularization-status-changed"]

    assert client.put("/regularization/9999", json={"status": "Approved"}).status_code == 404
    assert client.put(f"/regularization/{submitted['regularization_id']}", json={"status": "Maybe"}).status_code == 422


def test_dashboard_stats(client, seeded, office_punch):
    client.post("/attendance/location-punch", json=office_punch)
    client.post("/leaves", json={"employee": "jane.smith@company.com", "from_date": "2026-11-01", "to_date": "2026-11-02"})

    stats = client.get("/dashboard/stats").json()
    assert stats["total_users"] == 3
    assert stats["total_employees"] == 3
    assert stats["pending_leaves"] == 1
    assert stats["active_today"] == 1
    assert client.get("/employees/count").json() == {"total": 3}


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["active_users"] == 0


def test_test_data_endpoint_is_gated(client, monkeypatch):
    assert client.post("/test-data").json()["users_created"] == 3
    assert client.post("/test-data").json()["users_created"] == 0

    monkeypatch.setattr(ServerConfig, "ENABLE_DEBUG_ENDPOINTS", False)
    assert client.post("/test-data").status_code == 404


def test_storage_failure_is_reported_as_unavailable(client, tmp_path, monkeypatch, office_punch):
    monkeypatch.setattr(ServerConfig, "DATABASE_PATH", str(tmp_path / "missing" / "hr.db"))

    assert client.post("/attendance/location-punch", json=office_punch).status_code == 503
    assert client.get(f"/attendance/{date(2026, 10, 19).isoformat()}").status_code == 503
    assert client.get("/health").status_code == 503


def test_employee_directory_crud(client):
    created = client.post("/employees", json={"name": "Asha Rao", "email": "asha@company.com", "department": "Finance"})
    employee_id = created.json()["employee_id"]

    updated = client.put(f"/employees/{employee_id}", json={"department": "Audit"}).json()["employee"]
    assert updated == {"employee_id": employee_id, "name": "Asha Rao", "email": "asha@company.com", "department": "Audit"}

    assert client.delete(f"/employees/{employee_id}").status_code == 200
    assert client.get(f"/employees/{employee_id}").status_code == 404


def test_hr_profile_requires_hr_user(client, seeded):
    users = {u["email"]: u["user_id"] for u in client.get("/users").json()}

    rejected = client.post("/hr-profile", json={
        "user_id": users["john.doe@company.com"], "hr_id": "HR001", "department": "HR",
    })
    assert rejected.status_code == 400

    hr_user = users["hr@company.com"]
    created = client.post("/hr-profile", json={"user_id": hr_user, "hr_id": "HR001", "department": "HR"})
    assert created.status_code == 200
    assert created.json()["permissions"]["can_approve_leaves"] is True
    assert created.json()["user"]["email"] == "hr@company.com"

    again = client.post("/hr-profile", json={"user_id": hr_user, "hr_id": "HR002", "department": "HR"})
    assert again.status_code == 400

    updated = client.put(f"/hr-profile/{hr_user}", json={"level": "HR Manager", "specialization": ["Payroll"]})
    assert updated.json()["level"] == "HR Manager"
    assert updated.json()["specialization"] == ["Payroll"]
    assert [p["hr_id"] for p in client.get("/hr-profiles").json()] == ["HR001"]


def test_wifi_only_punch_over_http(client, sink):
    accepted = client.post("/attendance/wifi-punch", json={
        "employee": "jane.smith@company.com", "wifi_network": OFFICE_WIFI, "punch_type": "Kiosk",
    })
    assert accepted.status_code == 200
    assert accepted.json()["attendance"]["punch_type"] == "Kiosk"
    assert accepted.json()["distance_meters"] is None

    rejected = client.post("/attendance/wifi-punch", json={"employee": "john.doe@company.com", "wifi_network": "Cafe"})
    assert rejected.status_code == 403
    assert rejected.json()["verification_status"] == {"wifi": False, "location": True}


def test_manual_punch_out_before_stored_punch_in_is_400(client, office_punch):
    punched = client.post("/attendance/location-punch", json=office_punch).json()["attendance"]

    response = client.post("/attendance", json={
        "employee": "john.doe@company.com",
        "work_date": punched["work_date"],
        "punch_out": f"{punched['work_date']}T00:00:01",
    })
    assert response.status_code == 400
