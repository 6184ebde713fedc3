import logging
from datetime import datetime, date
from typing import List

from fastapi import APIRouter, HTTPException, Depends
from app.core.database import get_db # Import get_db
from app.models.common import NotificationEvent
from app.models.requests import Leave, LeaveCreate, LeaveUpdate # Import models
from app.services.notification_service import NotificationSink, get_notifier

router = APIRouter()
logger = logging.getLogger(__name__)

def row_to_leave(row) -> Leave:
    return Leave(
        leave_id=row['leave_id'],
        employee=row['employee'],
        from_date=date.fromisoformat(row['from_date']) if row['from_date'] else None,
        to_date=date.fromisoformat(row['to_date']) if row['to_date'] else None,
        status=row['status'],
        reason=row['reason'] or "",
        leave_type=row['leave_type'] or "",
        applied_date=datetime.fromisoformat(row['applied_date']) if row['applied_date'] else None,
    )

@router.get("/leaves", response_model=List[Leave])
async def list_leaves():
    """All leave requests, newest first"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM leaves ORDER BY applied_date DESC, leave_id DESC")
        return [row_to_leave(row) for row in cursor.fetchall()]

@router.get("/leaves/employee/{email}", response_model=List[Leave])
async def list_employee_leaves(email: str):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT * FROM leaves WHERE employee = ? ORDER BY applied_date DESC, leave_id DESC",
            (email,)
        )
        return [row_to_leave(row) for row in cursor.fetchall()]

@router.post("/leaves", response_model=Leave)
async def create_leave(request: LeaveCreate, sink: NotificationSink = Depends(get_notifier)):
    if request.to_date < request.from_date:
        raise HTTPException(status_code=400, detail="Leave cannot end before it starts")

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO leaves (employee, from_date, to_date, status, reason, leave_type, applied_date)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (request.employee, request.from_date.isoformat(), request.to_date.isoformat(),
              request.status, request.reason, request.leave_type, datetime.now().isoformat()))
        cursor.execute("SELECT * FROM leaves WHERE leave_id = ?", (cursor.lastrowid,))
        leave = row_to_leave(cursor.fetchone())
        conn.commit()

    logger.info(f"Leave request {leave.leave_id} submitted by {leave.employee} ({leave.from_date} to {leave.to_date})")
    sink.publish(NotificationEvent(event="new-leave-request", data={
        "leave": leave.model_dump(mode="json"),
        "employee": leave.employee,
    }))
    return leave

@router.put("/leaves/{leave_id}")
async def update_leave(leave_id: int, update: LeaveUpdate, sink: NotificationSink = Depends(get_notifier)):
    """Edit a leave request, typically to approve or reject it"""
    updates = update.model_dump(exclude_unset=True)
    for column in ("from_date", "to_date"):
        if updates.get(column):
            updates[column] = updates[column].isoformat()

    with get_db() as conn:
        cursor = conn.cursor()
        if updates:
            assignments = ", ".join(f"{column} = ?" for column in updates)
            cursor.execute(
                f"UPDATE leaves SET {assignments} WHERE leave_id = ?",
                list(updates.values()) + [leave_id]
            )

        cursor.execute("SELECT * FROM leaves WHERE leave_id = ?", (leave_id,))
        row = cursor.fetchone()
        if row is None:
            raise HTTPException(status_code=404, detail="Leave request not found")
        conn.commit()

    leave = row_to_leave(row)
    logger.info(f"Leave request {leave_id} for {leave.employee} is now {leave.status}")
    sink.publish(NotificationEvent(event="leave-status-changed", data={
        "leave_id": leave_id,
        "status": leave.status,
        "employee": leave.employee,
    }))
    return {"message": "Leave request updated successfully", "leave": leave}

@router.delete("/leaves/{leave_id}")
async def delete_leave(leave_id: int):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM leaves WHERE leave_id = ?", (leave_id,))

        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="Leave request not found")
        conn.commit()

    return {"message": "Leave request deleted successfully"}
