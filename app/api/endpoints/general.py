import logging

from fastapi import APIRouter, HTTPException, Depends
from app.core.config import ServerConfig, AttendanceConfig # Import configs
from app.core.database import get_db, seed_test_data # Import database helpers
from app.core.security import require_debug_endpoints # Import security dependency

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/")
async def root():
    return {
        "message": ServerConfig.APP_NAME,
        "version": ServerConfig.APP_VERSION,
        "description": ServerConfig.APP_DESCRIPTION,
        "status": "running",
        "wifi_verification_enabled": AttendanceConfig.WIFI_VERIFICATION_ENABLED,
        "location_verification_enabled": AttendanceConfig.LOCATION_VERIFICATION_ENABLED,
    }

@router.get("/health")
async def health_check():
    """Health check with storage connectivity"""
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.execute("SELECT COUNT(*) FROM users WHERE is_active = TRUE")
            user_count = cursor.fetchone()[0]

            return {
                "status": "healthy",
                "database": "connected",
                "active_users": user_count,
                "wifi_verification": AttendanceConfig.WIFI_VERIFICATION_ENABLED,
                "location_verification": AttendanceConfig.LOCATION_VERIFICATION_ENABLED,
            }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")

@router.post("/test-data", dependencies=[Depends(require_debug_endpoints)])
async def create_test_data():
    """Create test users and employees (for debugging)"""
    created = seed_test_data()
    return {"message": "Test data created successfully", "users_created": created}
