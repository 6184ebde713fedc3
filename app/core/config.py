import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

def parse_list_env(env_var: str, default: List[str] = None) -> List[str]:
    """Parse comma-separated environment variable into list"""
    if default is None:
        default = []

    value = os.getenv(env_var, "")
    if not value.strip():
        return default

    # Split by comma and strip whitespace
    return [item.strip() for item in value.split(",") if item.strip()]

def parse_bool_env(env_var: str, default: bool = False) -> bool:
    """Parse boolean environment variable"""
    return os.getenv(env_var, str(default)).lower() in ("true", "1", "yes", "on")

class AttendanceConfig:
    """Punch verification and escalation settings from Environment"""

    # Enable/disable the individual punch checks
    WIFI_VERIFICATION_ENABLED = parse_bool_env("WIFI_VERIFICATION_ENABLED", True)
    LOCATION_VERIFICATION_ENABLED = parse_bool_env("LOCATION_VERIFICATION_ENABLED", True)

    # Defaults used when the company configuration row is first created
    DEFAULT_COMPANY_WIFI = os.getenv("DEFAULT_COMPANY_WIFI", "Pratik")
    DEFAULT_OFFICE_LATITUDE = float(os.getenv("DEFAULT_OFFICE_LATITUDE", "18.5204"))
    DEFAULT_OFFICE_LONGITUDE = float(os.getenv("DEFAULT_OFFICE_LONGITUDE", "73.8567"))
    DEFAULT_ALLOWED_RADIUS = float(os.getenv("DEFAULT_ALLOWED_RADIUS", "100"))

    # More disconnections than this in one day turn it into a half-day
    DISCONNECTION_THRESHOLD = int(os.getenv("DISCONNECTION_THRESHOLD", "2"))

    # Optimistic concurrency: reload-and-retry attempts for a contended record
    PUNCH_MAX_RETRIES = int(os.getenv("PUNCH_MAX_RETRIES", "5"))

    # Logging settings
    LOG_ALL_PUNCH_ATTEMPTS = parse_bool_env("LOG_ALL_PUNCH_ATTEMPTS", True)

class ServerConfig:
    """Server Configuration from Environment"""

    # Server settings
    HOST = os.getenv("HRDASH_HOST", "0.0.0.0")
    PORT = int(os.getenv("HRDASH_PORT", "5000"))
    LOG_LEVEL = os.getenv("HRDASH_LOG_LEVEL", "info")

    # Security settings
    ADMIN_SECRET = os.getenv("HRDASH_ADMIN_SECRET", "your-secret-key-here")

    # Database settings
    DATABASE_PATH = os.getenv("DATABASE_PATH", "hr_dashboard.db")

    # Development settings
    SEED_TEST_DATA = parse_bool_env("SEED_TEST_DATA", True)
    ENABLE_DEBUG_ENDPOINTS = parse_bool_env("ENABLE_DEBUG_ENDPOINTS", True)
    ENABLE_API_DOCS = parse_bool_env("ENABLE_API_DOCS", True)

    # CORS settings
    CORS_ORIGINS = parse_list_env("CORS_ORIGINS", ["*"])
    CORS_ALLOW_CREDENTIALS = parse_bool_env("CORS_ALLOW_CREDENTIALS", True)

    # App metadata
    APP_NAME = os.getenv("APP_NAME", "HR Dashboard Server")
    APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
    APP_DESCRIPTION = os.getenv("APP_DESCRIPTION", "Attendance and leave management with Wi-Fi and location verification")
