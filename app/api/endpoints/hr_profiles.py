import json
import logging
import sqlite3
from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException
from app.core.database import get_db # Import get_db
from app.models.common import HRPermissions, HRProfile, HRProfileCreate, HRProfileUpdate # Import models
from app.api.endpoints.users import row_to_user

router = APIRouter()
logger = logging.getLogger(__name__)

def _load_profile(cursor, user_id: int) -> HRProfile:
    cursor.execute("SELECT * FROM hr_profiles WHERE user_id = ?", (user_id,))
    profile = cursor.fetchone()
    if profile is None:
        raise HTTPException(status_code=404, detail="HR profile not found")

    cursor.execute("SELECT * FROM users WHERE user_id = ?", (user_id,))
    user = cursor.fetchone()

    return HRProfile(
        profile_id=profile['profile_id'],
        user_id=profile['user_id'],
        hr_id=profile['hr_id'],
        department=profile['department'],
        level=profile['level'],
        permissions=HRPermissions(**json.loads(profile['permissions'])),
        specialization=json.loads(profile['specialization'] or "[]"),
        certifications=json.loads(profile['certifications'] or "[]"),
        user=row_to_user(user) if user else None,
        created_at=datetime.fromisoformat(profile['created_at']) if profile['created_at'] else None,
        updated_at=datetime.fromisoformat(profile['updated_at']) if profile['updated_at'] else None,
    )

@router.post("/hr-profile", response_model=HRProfile)
async def create_hr_profile(request: HRProfileCreate):
    with get_db() as conn:
        cursor = conn.cursor()

        cursor.execute("SELECT usertype FROM users WHERE user_id = ?", (request.user_id,))
        user = cursor.fetchone()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        if user['usertype'].lower() != "hr":
            raise HTTPException(status_code=400, detail="User is not an HR employee")

        now = datetime.now().isoformat()
        try:
            cursor.execute('''
                INSERT INTO hr_profiles
                (user_id, hr_id, department, level, permissions, specialization, certifications, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                request.user_id,
                request.hr_id,
                request.department,
                request.level,
                json.dumps(HRPermissions().model_dump()),
                json.dumps(request.specialization),
                json.dumps(request.certifications),
                now,
                now,
            ))
        except sqlite3.IntegrityError:
            raise HTTPException(status_code=400, detail="HR profile already exists for this user")

        profile = _load_profile(cursor, request.user_id)
        conn.commit()

    logger.info(f"HR profile {request.hr_id} created for user {request.user_id}")
    return profile

@router.get("/hr-profile/{user_id}", response_model=HRProfile)
async def get_hr_profile(user_id: int):
    with get_db() as conn:
        return _load_profile(conn.cursor(), user_id)

@router.put("/hr-profile/{user_id}", response_model=HRProfile)
async def update_hr_profile(user_id: int, update: HRProfileUpdate):
    updates = update.model_dump(exclude_unset=True)
    for column in ("permissions", "specialization", "certifications"):
        if column in updates:
            updates[column] = json.dumps(updates[column])
    updates["updated_at"] = datetime.now().isoformat()
    assignments = ", ".join(f"{column} = ?" for column in updates)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE hr_profiles SET {assignments} WHERE user_id = ?",
            list(updates.values()) + [user_id]
        )
        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="HR profile not found")
        profile = _load_profile(cursor, user_id)
        conn.commit()

    return profile

@router.get("/hr-profiles", response_model=List[HRProfile])
async def list_hr_profiles():
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT user_id FROM hr_profiles ORDER BY profile_id")
        user_ids = [row['user_id'] for row in cursor.fetchall()]
        return [_load_profile(cursor, user_id) for user_id in user_ids]
