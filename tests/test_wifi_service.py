import pytest

from app.core.config import AttendanceConfig
from app.services.wifi_service import clean_wifi_ssid, validate_workplace_network


@pytest.fixture(autouse=True)
def wifi_checks_enabled(monkeypatch):
    monkeypatch.setattr(AttendanceConfig, "WIFI_VERIFICATION_ENABLED", True)


@pytest.mark.parametrize("raw, expected", [
    ('"OfficeWiFi"', "OfficeWiFi"),
    ("'OfficeWiFi'", "OfficeWiFi"),
    ("  OfficeWiFi \n", "OfficeWiFi"),
    ('""', None),
    ("", None),
    (None, None),
])
def test_clean_wifi_ssid(raw, expected):
    assert clean_wifi_ssid(raw) == expected


@pytest.mark.parametrize("observed", ["OfficeWiFi", "OFFICEWIFI", "officewifi", '"OfficeWiFi"'])
def test_network_match_ignores_case_and_quotes(observed):
    is_valid, _, network = validate_workplace_network(observed, "OfficeWiFi")
    assert is_valid is True
    assert network.lower() == "officewifi"


def test_wrong_network_names_expected_and_observed():
    is_valid, message, network = validate_workplace_network("CoffeeShop", "OfficeWiFi")
    assert is_valid is False
    assert network is None
    assert "Expected: OfficeWiFi" in message
    assert "Got: CoffeeShop" in message


def test_missing_network_is_rejected():
    is_valid, message, _ = validate_workplace_network("   ", "OfficeWiFi")
    assert is_valid is False
    assert message == "Invalid WiFi network information"


def test_disabled_verification_allows_any_network(monkeypatch):
    monkeypatch.setattr(AttendanceConfig, "WIFI_VERIFICATION_ENABLED", False)
    is_valid, _, network = validate_workplace_network("CoffeeShop", "OfficeWiFi")
    assert is_valid is True
    assert network == "CoffeeShop"
