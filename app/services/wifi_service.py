import logging
from typing import Optional, Tuple
from datetime import datetime
from app.core.config import AttendanceConfig # Import AttendanceConfig
from app.core.database import get_db # Import get_db

logger = logging.getLogger(__name__)

def validate_workplace_network(wifi_ssid: Optional[str], company_wifi: str) -> Tuple[bool, str, Optional[str]]:
    """Validate if WiFi SSID is the configured office network (case-insensitive)"""
    if not AttendanceConfig.WIFI_VERIFICATION_ENABLED:
        logger.info("WiFi verification disabled - allowing all networks")
        return True, "WiFi verification disabled", clean_wifi_ssid(wifi_ssid)

    if not wifi_ssid:
        return False, "WiFi network information required for attendance punches", None

    # Clean SSID
    clean_ssid = clean_wifi_ssid(wifi_ssid)

    if not clean_ssid:
        return False, "Invalid WiFi network information", None

    if clean_ssid.lower() == company_wifi.strip().lower():
        logger.info(f"WiFi validation success: '{clean_ssid}' matches office network")
        return True, "Connected to office network", clean_ssid

    error_msg = f"Wrong Wi-Fi network. Expected: {company_wifi}, Got: {clean_ssid}"
    logger.warning(f"WiFi validation failed: '{clean_ssid}' is not the office network")
    return False, error_msg, None

def clean_wifi_ssid(raw_ssid: Optional[str]) -> Optional[str]:
    """Clean SSID string (remove quotes, whitespace, etc.)"""
    if not raw_ssid:
        return None

    # Remove surrounding quotes and whitespace
    cleaned = raw_ssid.strip()

    # Remove double quotes
    if cleaned.startswith('"') and cleaned.endswith('"'):
        cleaned = cleaned[1:-1]

    # Remove single quotes
    if cleaned.startswith("'") and cleaned.endswith("'"):
        cleaned = cleaned[1:-1]

    # Remove any remaining whitespace
    cleaned = cleaned.strip()

    # Return None if empty after cleaning
    return cleaned if cleaned else None

def log_punch_attempt(employee: str, wifi_network: Optional[str], latitude: Optional[float],
                      longitude: Optional[float], distance_meters: Optional[float],
                      success: bool, message: str, ip_address: Optional[str] = None):
    """Log all punch verification attempts for audit purposes"""

    if AttendanceConfig.LOG_ALL_PUNCH_ATTEMPTS:
        if success:
            logger.info(f"Punch verification SUCCESS - Employee: {employee}, WiFi: '{wifi_network}', Distance: {distance_meters}, IP: {ip_address}")
        else:
            logger.warning(f"Punch verification FAILED - Employee: {employee}, WiFi: '{wifi_network}', Message: {message}, IP: {ip_address}")

    # Store in database for audit trail
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                INSERT INTO punch_verification_log
                (employee, wifi_network, latitude, longitude, distance_meters, success, message, ip_address, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (employee, wifi_network, latitude, longitude, distance_meters, success, message,
                  ip_address, datetime.now().isoformat()))
            conn.commit()
    except Exception as e:
        logger.error(f"Failed to log punch verification attempt: {e}")
