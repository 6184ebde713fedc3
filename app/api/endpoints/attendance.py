import logging
from datetime import datetime, date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from app.core.database import get_db # Import get_db
from app.models.attendance import (
    AttendanceRecord,
    ManualAttendance,
    PunchAttempt,
    PunchRequest,
    PunchResponse,
    WifiDisconnectRequest,
    WifiDisconnectResponse,
    WifiPunchRequest,
) # Import models
from app.services import attendance_service # Import services
from app.services.notification_service import NotificationSink, get_notifier

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/attendance/location-punch", response_model=PunchResponse)
async def location_punch(punch: PunchRequest, request: Request, sink: NotificationSink = Depends(get_notifier)):
    """Punch in/out after verifying office Wi-Fi and GPS proximity"""
    client_ip = request.client.host if request.client else None
    logger.info(f"📍 Location punch attempt for: {punch.employee}")
    return attendance_service.process_punch(punch, sink, ip_address=client_ip)

@router.post("/attendance/wifi-punch", response_model=PunchResponse)
async def wifi_punch(punch: WifiPunchRequest, request: Request, sink: NotificationSink = Depends(get_notifier)):
    """Punch in/out verified by the office Wi-Fi network only"""
    client_ip = request.client.host if request.client else None
    logger.info(f"📶 Wi-Fi punch attempt for: {punch.employee}")
    return attendance_service.process_wifi_punch(punch, sink, ip_address=client_ip)

@router.post("/attendance/wifi-disconnect", response_model=WifiDisconnectResponse)
async def wifi_disconnect(signal: WifiDisconnectRequest, sink: NotificationSink = Depends(get_notifier)):
    """Report that the employee's device dropped off the office Wi-Fi"""
    return attendance_service.record_wifi_disconnection(signal, sink)

@router.post("/attendance", response_model=AttendanceRecord)
async def mark_attendance(entry: ManualAttendance, sink: NotificationSink = Depends(get_notifier)):
    """Mark attendance by hand (HR fallback)"""
    return attendance_service.mark_attendance(entry, sink)

@router.get("/attendance/verification-log", response_model=List[PunchAttempt])
async def get_verification_log(days: int = 7, employee: Optional[str] = None, limit: int = 1000):
    """Get punch verification attempts for monitoring"""
    since = (datetime.now() - timedelta(days=days)).isoformat()
    with get_db() as conn:
        cursor = conn.cursor()

        query = "SELECT * FROM punch_verification_log WHERE timestamp >= ?"
        params = [since]
        if employee:
            query += " AND employee = ?"
            params.append(employee)
        query += " ORDER BY timestamp DESC, log_id DESC LIMIT ?"
        params.append(limit)

        cursor.execute(query, params)
        attempts = cursor.fetchall()

        return [
            PunchAttempt(
                log_id=attempt['log_id'],
                employee=attempt['employee'],
                wifi_network=attempt['wifi_network'],
                latitude=attempt['latitude'],
                longitude=attempt['longitude'],
                distance_meters=attempt['distance_meters'],
                success=bool(attempt['success']),
                message=attempt['message'],
                ip_address=attempt['ip_address'],
                timestamp=datetime.fromisoformat(attempt['timestamp']),
            )
            for attempt in attempts
        ]

@router.get("/attendance/employee/{email}", response_model=List[AttendanceRecord])
async def get_employee_attendance(email: str):
    """Get an employee's attendance history, newest first"""
    return attendance_service.list_attendance_for_employee(email)

@router.get("/attendance/{work_date}", response_model=List[AttendanceRecord])
async def get_attendance_for_date(work_date: date):
    """Get every attendance record for a day (YYYY-MM-DD)"""
    return attendance_service.list_attendance_for_date(work_date)
