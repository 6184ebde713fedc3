import hashlib
import hmac
from fastapi import HTTPException
from app.core.config import ServerConfig # Import ServerConfig


def generate_salt(email: str) -> str:
    """Generate a consistent salt for an account"""
    return hashlib.sha256(f"{email.lower()}_{ServerConfig.ADMIN_SECRET}".encode()).hexdigest()[:16]

def hash_password(email: str, password: str) -> str:
    """Hash a password with salt using HMAC-SHA256"""
    return hmac.new(
        generate_salt(email).encode('utf-8'),
        password.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()

def verify_password(email: str, password: str, password_hash: str) -> bool:
    return hmac.compare_digest(password_hash, hash_password(email, password))

async def require_debug_endpoints():
    """Hide development-only endpoints unless explicitly enabled"""
    if not ServerConfig.ENABLE_DEBUG_ENDPOINTS:
        raise HTTPException(status_code=404, detail="Debug endpoints disabled")
    return True
