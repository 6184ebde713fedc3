import pytest
from fastapi.testclient import TestClient

from app.core.config import ServerConfig, AttendanceConfig
from app.core.database import init_database
from app.main import app
from app.services.notification_service import NotificationSink, get_notifier

OFFICE_LATITUDE = 18.5204
OFFICE_LONGITUDE = 73.8567
OFFICE_WIFI = "OfficeWiFi"


class CapturingSink(NotificationSink):
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)

    def names(self):
        return [event.event for event in self.events]


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "hr_test.db"
    monkeypatch.setattr(ServerConfig, "DATABASE_PATH", str(path))
    monkeypatch.setattr(ServerConfig, "SEED_TEST_DATA", False)
    monkeypatch.setattr(ServerConfig, "ENABLE_DEBUG_ENDPOINTS", True)
    monkeypatch.setattr(AttendanceConfig, "WIFI_VERIFICATION_ENABLED", True)
    monkeypatch.setattr(AttendanceConfig, "LOCATION_VERIFICATION_ENABLED", True)
    monkeypatch.setattr(AttendanceConfig, "DEFAULT_COMPANY_WIFI", OFFICE_WIFI)
    monkeypatch.setattr(AttendanceConfig, "DEFAULT_OFFICE_LATITUDE", OFFICE_LATITUDE)
    monkeypatch.setattr(AttendanceConfig, "DEFAULT_OFFICE_LONGITUDE", OFFICE_LONGITUDE)
    monkeypatch.setattr(AttendanceConfig, "DEFAULT_ALLOWED_RADIUS", 100.0)
    monkeypatch.setattr(AttendanceConfig, "DISCONNECTION_THRESHOLD", 2)
    monkeypatch.setattr(AttendanceConfig, "PUNCH_MAX_RETRIES", 5)
    init_database()
    return path


@pytest.fixture
def sink():
    return CapturingSink()


@pytest.fixture
def client(db_path, sink):
    app.dependency_overrides[get_notifier] = lambda: sink
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def office_punch():
    """Request body for a punch made from the office desk"""
    return {
        "employee": "john.doe@company.com",
        "location": {"latitude": OFFICE_LATITUDE, "longitude": OFFICE_LONGITUDE, "address": "Desk 4"},
        "wifi_network": OFFICE_WIFI,
    }
