import logging
from datetime import datetime, date
from typing import List, Optional

from app.core.database import get_db # Import get_db
from app.core.exceptions import NotFoundError # Import exceptions
from app.models.requests import Regularization, RegularizationCreate, RegularizationUpdate # Import models

logger = logging.getLogger(__name__)

def row_to_regularization(row) -> Regularization:
    return Regularization(
        regularization_id=row['regularization_id'],
        employee=row['employee'],
        work_date=date.fromisoformat(row['work_date']) if row['work_date'] else None,
        reason=row['reason'] or "",
        status=row['status'],
        applied_date=datetime.fromisoformat(row['applied_date']) if row['applied_date'] else None,
    )

def insert_regularization(conn, employee: str, work_date: date, reason: str,
                          applied_date: datetime, status: str = "Pending") -> Regularization:
    """Insert a request on an open connection; the caller owns the transaction"""
    cursor = conn.execute('''
        INSERT INTO regularizations (employee, work_date, reason, status, applied_date)
        VALUES (?, ?, ?, ?, ?)
    ''', (employee, work_date.isoformat(), reason, status, applied_date.isoformat()))
    return Regularization(
        regularization_id=cursor.lastrowid,
        employee=employee,
        work_date=work_date,
        reason=reason,
        status=status,
        applied_date=applied_date,
    )

def create_regularization(request: RegularizationCreate) -> Regularization:
    with get_db() as conn:
        regularization = insert_regularization(
            conn, request.employee, request.work_date, request.reason, datetime.now()
        )
        conn.commit()
    logger.info(f"Regularization request submitted by {request.employee} for {request.work_date}")
    return regularization

def list_regularizations(employee: Optional[str] = None) -> List[Regularization]:
    """List requests newest first, optionally for one employee"""
    with get_db() as conn:
        if employee:
            rows = conn.execute('''
                SELECT * FROM regularizations WHERE employee = ?
                ORDER BY applied_date DESC, regularization_id DESC
            ''', (employee,)).fetchall()
        else:
            rows = conn.execute('''
                SELECT * FROM regularizations
                ORDER BY applied_date DESC, regularization_id DESC
            ''').fetchall()
    return [row_to_regularization(row) for row in rows]

def update_regularization(regularization_id: int, update: RegularizationUpdate) -> Regularization:
    with get_db() as conn:
        conn.execute('''
            UPDATE regularizations
            SET status = COALESCE(?, status), reason = COALESCE(?, reason)
            WHERE regularization_id = ?
        ''', (update.status, update.reason, regularization_id))
        row = conn.execute(
            "SELECT * FROM regularizations WHERE regularization_id = ?", (regularization_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError("Regularization not found")
        conn.commit()

    logger.info(f"Regularization {regularization_id} for {row['employee']} is now {row['status']}")
    return row_to_regularization(row)
