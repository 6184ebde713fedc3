import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Callable, List, Optional, Tuple

from app.core.config import AttendanceConfig # Import AttendanceConfig
from app.core.database import get_db # Import get_db
from app.core.exceptions import (
    ConcurrencyConflictError,
    NotFoundError,
    PunchVerificationError,
    ValidationError,
)
from app.models.attendance import (
    AttendanceRecord,
    DisconnectionEvent,
    Location,
    ManualAttendance,
    PunchRequest,
    PunchResponse,
    WifiPunchRequest,
    WifiDisconnectRequest,
    WifiDisconnectResponse,
)
from app.models.common import NotificationEvent
from app.models.company import CompanyConfig
from app.models.requests import Regularization
from app.services.company_service import get_company_config
from app.services.geo_service import validate_office_proximity
from app.services.notification_service import NotificationSink
from app.services.regularization_service import insert_regularization
from app.services.wifi_service import validate_workplace_network, log_punch_attempt

logger = logging.getLogger(__name__)

STATUS_PRESENT = "Present"
STATUS_ABSENT = "Absent"
STATUS_HALF_DAY = "Half-Day"

PUNCH_TYPE_LOCATION_WIFI = "Location-WiFi"

PUNCH_IN = "PUNCH_IN"
PUNCH_OUT = "PUNCH_OUT"
NO_CHANGE = "NONE"

@dataclass(frozen=True)
class VerificationResult:
    wifi_valid: bool
    location_valid: bool
    distance_meters: Optional[float]
    allowed_radius: float
    failures: List[str] = field(default_factory=list)
    verified_network: Optional[str] = None

    @property
    def verified(self) -> bool:
        return self.wifi_valid and self.location_valid

@dataclass
class Transition:
    record: AttendanceRecord
    changed: bool
    action: str = NO_CHANGE
    new_disconnections: List[DisconnectionEvent] = field(default_factory=list)
    escalated: bool = False
    regularization: Optional[Regularization] = None

def verify_punch(request: PunchRequest, config: CompanyConfig) -> VerificationResult:
    """Run the Wi-Fi and office-radius checks, collecting a message for every failed check"""
    office = config.office_location
    failures = []

    wifi_valid, wifi_message, verified_network = validate_workplace_network(
        request.wifi_network, config.company_wifi
    )
    if not wifi_valid:
        failures.append(wifi_message)

    location_valid, distance = validate_office_proximity(
        request.location.latitude,
        request.location.longitude,
        office.latitude,
        office.longitude,
        office.allowed_radius,
    )
    if not AttendanceConfig.LOCATION_VERIFICATION_ENABLED:
        location_valid = True
    if not location_valid:
        failures.append(
            f"Outside office premises. Distance: {round(distance)}m (Max: {office.allowed_radius:g}m)"
        )

    return VerificationResult(
        wifi_valid=wifi_valid,
        location_valid=location_valid,
        distance_meters=round(distance, 1),
        allowed_radius=office.allowed_radius,
        failures=failures,
        verified_network=verified_network,
    )

def apply_punch(record: Optional[AttendanceRecord], employee: str, location: Optional[Location],
                now: datetime, punch_type: str = PUNCH_TYPE_LOCATION_WIFI) -> Tuple[AttendanceRecord, str]:
    """Next state of the employee-day for a verified punch"""
    if record is None:
        return AttendanceRecord(
            employee=employee,
            work_date=now.date(),
            status=STATUS_PRESENT,
            punch_type=punch_type,
            punch_in=now,
            location=Location(
                latitude=location.latitude,
                longitude=location.longitude,
                address=location.address or "Office Location",
            ) if location else None,
        ), PUNCH_IN

    updated = record.model_copy(deep=True)
    if updated.punch_in is None:
        # Row was marked by hand before the employee arrived
        updated.punch_in = now
        updated.punch_type = punch_type
        if location:
            updated.location = location.model_copy()
        if updated.punch_out is not None and updated.punch_out < now:
            updated.punch_out = None
        if updated.status == STATUS_ABSENT:
            updated.status = STATUS_PRESENT
        return updated, PUNCH_IN

    if updated.punch_out is None:
        updated.punch_out = max(now, updated.punch_in)
        return updated, PUNCH_OUT

    return updated, NO_CHANGE

def apply_disconnection(record: AttendanceRecord, now: datetime, duration_minutes: int = 0,
                        threshold: Optional[int] = None) -> Tuple[AttendanceRecord, DisconnectionEvent, bool]:
    """Append a disconnection and escalate to a half-day past the threshold.

    Returns the new record, the appended event, and whether this call crossed
    the threshold (True at most once per record).
    """
    if threshold is None:
        threshold = AttendanceConfig.DISCONNECTION_THRESHOLD

    updated = record.model_copy(deep=True)
    event = DisconnectionEvent(timestamp=now, duration_minutes=duration_minutes)
    updated.wifi_disconnections.append(event)
    updated.total_disconnections = len(updated.wifi_disconnections)

    # Status is only forced on the crossing, so an HR override of a flagged day sticks
    escalated = updated.total_disconnections > threshold and not updated.is_half_day
    if escalated:
        updated.status = STATUS_HALF_DAY
        updated.is_half_day = True

    return updated, event, escalated

def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None

def _row_to_record(row, disconnections) -> AttendanceRecord:
    location = None
    if row['latitude'] is not None and row['longitude'] is not None:
        location = Location(latitude=row['latitude'], longitude=row['longitude'], address=row['address'])

    return AttendanceRecord(
        attendance_id=row['attendance_id'],
        employee=row['employee'],
        work_date=date.fromisoformat(row['work_date']),
        status=row['status'],
        punch_type=row['punch_type'],
        punch_in=_parse_datetime(row['punch_in']),
        punch_out=_parse_datetime(row['punch_out']),
        location=location,
        wifi_disconnections=[
            DisconnectionEvent(
                timestamp=datetime.fromisoformat(d['timestamp']),
                duration_minutes=d['duration_minutes'],
            )
            for d in disconnections
        ],
        total_disconnections=row['total_disconnections'],
        is_half_day=bool(row['is_half_day']),
        version=row['version'],
    )

def _load_disconnections(conn, attendance_id: int):
    return conn.execute('''
        SELECT timestamp, duration_minutes FROM wifi_disconnections
        WHERE attendance_id = ?
        ORDER BY timestamp ASC, disconnection_id ASC
    ''', (attendance_id,)).fetchall()

def load_record(conn, employee: str, work_date: date) -> Optional[AttendanceRecord]:
    row = conn.execute(
        "SELECT * FROM attendance WHERE employee = ? AND work_date = ?",
        (employee, work_date.isoformat())
    ).fetchone()
    if row is None:
        return None
    return _row_to_record(row, _load_disconnections(conn, row['attendance_id']))

def _record_values(record: AttendanceRecord) -> tuple:
    location = record.location
    return (
        record.status,
        record.punch_type,
        record.punch_in.isoformat() if record.punch_in else None,
        record.punch_out.isoformat() if record.punch_out else None,
        location.latitude if location else None,
        location.longitude if location else None,
        location.address if location else None,
        record.total_disconnections,
        record.is_half_day,
    )

def _insert_record(conn, record: AttendanceRecord) -> AttendanceRecord:
    cursor = conn.execute('''
        INSERT INTO attendance
        (employee, work_date, status, punch_type, punch_in, punch_out, latitude, longitude,
         address, total_disconnections, is_half_day, version)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1)
    ''', (record.employee, record.work_date.isoformat()) + _record_values(record))
    return record.model_copy(update={"attendance_id": cursor.lastrowid, "version": 1})

def _update_record(conn, record: AttendanceRecord) -> Optional[AttendanceRecord]:
    """Write the record only if nobody changed it since it was read"""
    cursor = conn.execute('''
        UPDATE attendance
        SET status = ?, punch_type = ?, punch_in = ?, punch_out = ?, latitude = ?, longitude = ?,
            address = ?, total_disconnections = ?, is_half_day = ?, version = version + 1
        WHERE attendance_id = ? AND version = ?
    ''', _record_values(record) + (record.attendance_id, record.version))
    if cursor.rowcount != 1:
        return None
    return record.model_copy(update={"version": record.version + 1})

def _save_transition(employee: str, work_date: date,
                     transition_fn: Callable[[Optional[AttendanceRecord]], Transition]) -> Transition:
    """Load, transition and conditionally save one employee-day, reloading on lost races"""
    for attempt in range(1, AttendanceConfig.PUNCH_MAX_RETRIES + 1):
        with get_db() as conn:
            current = load_record(conn, employee, work_date)
            transition = transition_fn(current)
            if not transition.changed:
                return transition

            try:
                if current is None:
                    saved = _insert_record(conn, transition.record)
                else:
                    saved = _update_record(conn, transition.record)
            except sqlite3.IntegrityError:
                if current is not None:
                    raise
                saved = None  # another request created the day's record first

            if saved is None:
                conn.rollback()
                logger.info(f"Attendance for {employee} on {work_date} changed concurrently, retrying ({attempt})")
                continue

            for event in transition.new_disconnections:
                conn.execute('''
                    INSERT INTO wifi_disconnections (attendance_id, timestamp, duration_minutes)
                    VALUES (?, ?, ?)
                ''', (saved.attendance_id, event.timestamp.isoformat(), event.duration_minutes))

            if transition.escalated:
                transition.regularization = insert_regularization(
                    conn,
                    employee,
                    work_date,
                    f"Auto-generated: {saved.total_disconnections} Wi-Fi disconnections on "
                    f"{work_date.isoformat()} converted the day to Half-Day",
                    datetime.now(),
                )

            conn.commit()
            transition.record = saved
            return transition

    logger.error(f"Giving up on attendance update for {employee} on {work_date} after {AttendanceConfig.PUNCH_MAX_RETRIES} attempts")
    raise ConcurrencyConflictError("Attendance record is being updated concurrently, please retry")

def _record_verified_punch(employee: str, location: Optional[Location], punch_type: str,
                           result: VerificationResult, event: str, sink: NotificationSink,
                           now: datetime) -> PunchResponse:
    def punch(current: Optional[AttendanceRecord]) -> Transition:
        record, action = apply_punch(current, employee, location, now, punch_type)
        return Transition(record=record, changed=action != NO_CHANGE, action=action)

    transition = _save_transition(employee, now.date(), punch)
    record = transition.record

    if transition.changed:
        logger.info(f"{transition.action} recorded for {employee} at {now.strftime('%H:%M:%S')} via {punch_type}")
        sink.publish(NotificationEvent(event=event, data={
            "employee": record.employee,
            "status": record.status,
            "punch_type": record.punch_type,
            "verified": True,
        }))
        message = "Punched in" if transition.action == PUNCH_IN else "Punched out"
        message += " successfully"
    else:
        logger.info(f"Ignoring punch for {employee}: already punched out today")
        message = "Already punched out for today"

    return PunchResponse(
        verified=True,
        message=message,
        distance_meters=result.distance_meters,
        allowed_radius=result.allowed_radius,
        punch_action=transition.action,
        attendance=record,
    )

def _reject(result: VerificationResult):
    raise PunchVerificationError(
        failures=result.failures,
        distance_meters=result.distance_meters,
        allowed_radius=result.allowed_radius,
        wifi_valid=result.wifi_valid,
        location_valid=result.location_valid,
    )

def process_punch(request: PunchRequest, sink: NotificationSink, now: Optional[datetime] = None,
                  ip_address: Optional[str] = None) -> PunchResponse:
    """Verify a location/Wi-Fi punch and record it as punch-in or punch-out for today"""
    now = now or datetime.now()
    result = verify_punch(request, get_company_config())

    log_punch_attempt(
        employee=request.employee,
        wifi_network=request.wifi_network,
        latitude=request.location.latitude,
        longitude=request.location.longitude,
        distance_meters=result.distance_meters,
        success=result.verified,
        message="; ".join(result.failures) or "Verified",
        ip_address=ip_address,
    )
    if not result.verified:
        _reject(result)

    return _record_verified_punch(
        request.employee, request.location, request.punch_type, result,
        "location-attendance-updated", sink, now,
    )

def process_wifi_punch(request: WifiPunchRequest, sink: NotificationSink, now: Optional[datetime] = None,
                       ip_address: Optional[str] = None) -> PunchResponse:
    """Record a punch verified by the reported office Wi-Fi alone (no GPS fix)"""
    now = now or datetime.now()
    config = get_company_config()

    wifi_valid, wifi_message, verified_network = validate_workplace_network(
        request.wifi_network, config.company_wifi
    )
    result = VerificationResult(
        wifi_valid=wifi_valid,
        location_valid=True,
        distance_meters=None,
        allowed_radius=config.office_location.allowed_radius,
        failures=[] if wifi_valid else [wifi_message],
        verified_network=verified_network,
    )

    log_punch_attempt(
        employee=request.employee,
        wifi_network=request.wifi_network,
        latitude=request.location.latitude if request.location else None,
        longitude=request.location.longitude if request.location else None,
        distance_meters=None,
        success=result.verified,
        message=wifi_message if not wifi_valid else "Verified (Wi-Fi only)",
        ip_address=ip_address,
    )
    if not result.verified:
        _reject(result)

    return _record_verified_punch(
        request.employee, request.location, request.punch_type, result,
        "attendance-updated", sink, now,
    )

def record_wifi_disconnection(request: WifiDisconnectRequest, sink: NotificationSink,
                              now: Optional[datetime] = None) -> WifiDisconnectResponse:
    """Count a Wi-Fi drop against today's record, escalating to a half-day past the threshold"""
    now = now or datetime.now()
    work_date = now.date()

    def disconnect(current: Optional[AttendanceRecord]) -> Transition:
        if current is None:
            raise NotFoundError(f"No attendance record for {request.employee} on {work_date.isoformat()}")
        record, event, escalated = apply_disconnection(current, now, request.duration_minutes)
        return Transition(record=record, changed=True, new_disconnections=[event], escalated=escalated)

    transition = _save_transition(request.employee, work_date, disconnect)
    record = transition.record

    logger.warning(f"Wi-Fi disconnection #{record.total_disconnections} for {record.employee} on {work_date}")
    sink.publish(NotificationEvent(event="attendance-updated", data={
        "employee": record.employee,
        "status": record.status,
        "punch_type": record.punch_type,
        "total_disconnections": record.total_disconnections,
        "is_half_day": record.is_half_day,
    }))

    if transition.escalated:
        regularization = transition.regularization
        logger.warning(f"{record.employee} escalated to Half-Day, regularization {regularization.regularization_id} filed")
        sink.publish(NotificationEvent(event="new-regularization-request", data={
            "regularization_id": regularization.regularization_id,
            "employee": regularization.employee,
            "reason": regularization.reason,
        }))
        message = "Disconnection recorded; attendance converted to Half-Day and regularization request filed"
    else:
        message = "Disconnection recorded"

    return WifiDisconnectResponse(
        message=message,
        escalated=transition.escalated,
        attendance=record,
        regularization=transition.regularization,
    )

def mark_attendance(entry: ManualAttendance, sink: NotificationSink) -> AttendanceRecord:
    """HR override: create or overwrite the status of an employee-day.

    Times left out of the request keep their stored values, and the merged
    pair must still have punch-in first. A day already escalated by Wi-Fi
    drops keeps its half-day flag so later drops do not file a second request.
    """
    with get_db() as conn:
        # Take the write lock before reading so the merge sees the final stored times
        conn.execute("BEGIN IMMEDIATE")
        current = load_record(conn, entry.employee, entry.work_date)

        punch_in = entry.punch_in or (current.punch_in if current else None)
        punch_out = entry.punch_out or (current.punch_out if current else None)
        if punch_out and not punch_in:
            raise ValidationError("Punch-out cannot be recorded without a punch-in")
        if punch_in and punch_out and punch_out < punch_in:
            raise ValidationError("Punch-out cannot be earlier than punch-in")

        escalated_before = bool(
            current and current.total_disconnections > AttendanceConfig.DISCONNECTION_THRESHOLD
        )
        conn.execute('''
            INSERT INTO attendance (employee, work_date, status, punch_type, punch_in, punch_out, is_half_day, version)
            VALUES (?, ?, ?, ?, ?, ?, ?, 1)
            ON CONFLICT(employee, work_date) DO UPDATE SET
                status = excluded.status,
                punch_type = excluded.punch_type,
                punch_in = excluded.punch_in,
                punch_out = excluded.punch_out,
                is_half_day = excluded.is_half_day,
                version = attendance.version + 1
        ''', (
            entry.employee,
            entry.work_date.isoformat(),
            entry.status,
            entry.punch_type,
            punch_in.isoformat() if punch_in else None,
            punch_out.isoformat() if punch_out else None,
            entry.status == STATUS_HALF_DAY or escalated_before,
        ))
        record = load_record(conn, entry.employee, entry.work_date)
        conn.commit()

    logger.info(f"Attendance marked manually for {entry.employee} on {entry.work_date}: {entry.status}")
    sink.publish(NotificationEvent(event="attendance-updated", data={
        "employee": record.employee,
        "status": record.status,
        "punch_type": record.punch_type,
    }))
    return record

def _load_many(conn, rows) -> List[AttendanceRecord]:
    return [_row_to_record(row, _load_disconnections(conn, row['attendance_id'])) for row in rows]

def list_attendance_for_date(work_date: date) -> List[AttendanceRecord]:
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM attendance WHERE work_date = ? ORDER BY employee",
            (work_date.isoformat(),)
        ).fetchall()
        return _load_many(conn, rows)

def list_attendance_for_employee(employee: str) -> List[AttendanceRecord]:
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM attendance WHERE employee = ? ORDER BY work_date DESC",
            (employee,)
        ).fetchall()
        return _load_many(conn, rows)
