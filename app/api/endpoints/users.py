import logging
import secrets
import sqlite3
from datetime import datetime, date
from typing import List

from fastapi import APIRouter, HTTPException, Depends
from app.core.database import get_db # Import get_db
from app.core.exceptions import AuthenticationError
from app.core.security import hash_password, verify_password # Import password helpers
from app.models.common import (
    AuthResponse,
    LoginRequest,
    NotificationEvent,
    PasswordResetRequest,
    ProfileEdit,
    RecoveryEmailRequest,
    RegisterRequest,
    User,
    UserUpdate,
) # Import models
from app.services.notification_service import NotificationSink, get_notifier

router = APIRouter()
logger = logging.getLogger(__name__)

def _parse_datetime(value):
    return datetime.fromisoformat(value) if value else None

def row_to_user(row) -> User:
    return User(
        user_id=row['user_id'],
        username=row['username'],
        email=row['email'],
        usertype=row['usertype'],
        name=row['name'],
        department=row['department'] or "General",
        phone=row['phone'] or "",
        dob=date.fromisoformat(row['dob']) if row['dob'] else None,
        gender=row['gender'] or "",
        address=row['address'] or "",
        profile_pic=row['profile_pic'] or "",
        employee_id=row['employee_id'],
        position=row['position'] or "",
        salary=row['salary'] or 0,
        joining_date=_parse_datetime(row['joining_date']),
        is_active=bool(row['is_active']),
        last_login=_parse_datetime(row['last_login']),
        created_at=_parse_datetime(row['created_at']),
        updated_at=_parse_datetime(row['updated_at']),
    )

def _fetch_user(cursor, email: str):
    cursor.execute("SELECT * FROM users WHERE email = ?", (email,))
    return cursor.fetchone()

def _apply_user_updates(email: str, updates: dict) -> User:
    """Write the given columns for one account and return the fresh row"""
    updates["updated_at"] = datetime.now().isoformat()
    assignments = ", ".join(f"{column} = ?" for column in updates)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE users SET {assignments} WHERE email = ?",
            list(updates.values()) + [email]
        )
        if cursor.rowcount == 0:
            logger.warning(f"❌ User not found: {email}")
            raise HTTPException(status_code=404, detail="User not found")
        user = row_to_user(_fetch_user(cursor, email))
        conn.commit()
        return user

@router.post("/register", response_model=AuthResponse)
async def register(request: RegisterRequest):
    """Create a login account; the employee id is generated"""
    logger.info(f"📝 Registration attempt for: {request.email}")
    local_part = request.email.split('@')[0]
    now = datetime.now().isoformat()

    with get_db() as conn:
        cursor = conn.cursor()

        if _fetch_user(cursor, request.email):
            logger.warning(f"❌ User already exists: {request.email}")
            raise HTTPException(status_code=400, detail="User already exists")

        try:
            cursor.execute('''
                INSERT INTO users
                (username, email, password_hash, usertype, name, department, phone, dob, gender,
                 address, employee_id, joining_date, is_active, last_login, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, TRUE, ?, ?, ?)
            ''', (
                request.username or local_part,
                request.email,
                hash_password(request.email, request.password),
                request.usertype,
                request.name or request.username or local_part,
                request.department or "General",
                request.phone or "",
                request.dob.isoformat() if request.dob else None,
                request.gender,
                request.address or "",
                f"EMP{secrets.randbelow(1_000_000):06d}",
                now, now, now, now,
            ))
        except sqlite3.IntegrityError:
            # Lost a race on the email or generated employee id
            raise HTTPException(status_code=400, detail="User already exists")

        user = row_to_user(_fetch_user(cursor, request.email))
        conn.commit()

    logger.info(f"✅ User registered successfully: {request.email}")
    return AuthResponse(message="User registered successfully", user=user)

@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, sink: NotificationSink = Depends(get_notifier)):
    """Check credentials for the given account type"""
    with get_db() as conn:
        cursor = conn.cursor()
        row = _fetch_user(cursor, request.email)

        if (
            not row
            or row['usertype'].lower() != request.usertype.lower()
            or not verify_password(request.email, request.password, row['password_hash'])
        ):
            logger.warning(f"Login FAILED for {request.email}")
            raise AuthenticationError("Invalid credentials")

        if not row['is_active']:
            raise HTTPException(status_code=403, detail="User account is inactive")

        cursor.execute(
            "UPDATE users SET last_login = ? WHERE user_id = ?",
            (datetime.now().isoformat(), row['user_id'])
        )
        user = row_to_user(_fetch_user(cursor, request.email))
        conn.commit()

    logger.info(f"Login SUCCESS for {user.email} ({user.usertype})")
    sink.publish(NotificationEvent(event="user-login", data={"user": user.email, "usertype": user.usertype}))
    return AuthResponse(message="Login successful", user=user)

@router.get("/users", response_model=List[User])
async def list_users():
    """Employee directory (password material is never returned)"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users ORDER BY name")
        return [row_to_user(row) for row in cursor.fetchall()]

@router.get("/user/{email}", response_model=User)
async def get_user(email: str):
    with get_db() as conn:
        row = _fetch_user(conn.cursor(), email)
        if row is None:
            raise HTTPException(status_code=404, detail="User not found")
        return row_to_user(row)

@router.put("/user/{email}", response_model=AuthResponse)
async def update_user(email: str, update: UserUpdate, sink: NotificationSink = Depends(get_notifier)):
    """Partial update of an account"""
    updates = update.model_dump(exclude_unset=True)
    if "dob" in updates:
        updates["dob"] = updates["dob"].isoformat() if updates["dob"] else None

    logger.info(f"👤 Updating user: {email} ({', '.join(updates) or 'no fields'})")
    user = _apply_user_updates(email, updates)

    sink.publish(NotificationEvent(event="profile-updated", data={"user": user.email, "data": user.model_dump(mode="json")}))
    return AuthResponse(message="User updated successfully", user=user)

@router.put("/edit-profile/{email}", response_model=AuthResponse)
async def edit_profile(email: str, profile: ProfileEdit, sink: NotificationSink = Depends(get_notifier)):
    """Self-service profile edit"""
    user = _apply_user_updates(email, {
        "name": profile.name,
        "phone": profile.phone,
        "dob": profile.dob.isoformat() if profile.dob else None,
        "address": profile.address,
        "profile_pic": profile.profile_pic,
    })

    logger.info(f"✅ Profile updated for {user.email}")
    sink.publish(NotificationEvent(event="profile-updated", data={"user": user.email, "data": user.model_dump(mode="json")}))
    return AuthResponse(message="Profile updated successfully", user=user)

@router.post("/recovery/check-email")
async def check_recovery_email(request: RecoveryEmailRequest):
    """Confirm an account exists before a password reset"""
    with get_db() as conn:
        if _fetch_user(conn.cursor(), request.email) is None:
            raise HTTPException(status_code=404, detail="No account found with this email")

    # Mail delivery is not wired up; the client proceeds straight to the reset form
    return {
        "message": "Recovery link has been sent to your email",
        "email": request.email,
        "user_exists": True,
    }

@router.post("/recovery/reset-password")
async def reset_password(request: PasswordResetRequest):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            UPDATE users SET password_hash = ?, updated_at = ? WHERE email = ?
        ''', (hash_password(request.email, request.new_password), datetime.now().isoformat(), request.email))

        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="User not found")
        conn.commit()

    logger.info(f"Password reset for {request.email}")
    return {"message": "Password updated successfully"}
