import logging
from datetime import date
from typing import List, Optional

from app.core.database import get_db # Import get_db
from app.models.common import Birthday, DashboardStats # Import models

logger = logging.getLogger(__name__)

def get_dashboard_stats(today: Optional[date] = None) -> DashboardStats:
    """Counts shown on the HR dashboard cards"""
    today = (today or date.today()).isoformat()

    with get_db() as conn:
        cursor = conn.cursor()

        def count(query: str, params: tuple = ()) -> int:
            cursor.execute(query, params)
            return cursor.fetchone()[0]

        return DashboardStats(
            total_employees=count("SELECT COUNT(*) FROM employees"),
            total_users=count("SELECT COUNT(*) FROM users"),
            pending_leaves=count("SELECT COUNT(*) FROM leaves WHERE status = 'Pending'"),
            pending_regularizations=count("SELECT COUNT(*) FROM regularizations WHERE status = 'Pending'"),
            active_today=count(
                "SELECT COUNT(*) FROM attendance WHERE work_date = ? AND status IN ('Present', 'Half-Day')",
                (today,)
            ),
            leaves_today=count(
                "SELECT COUNT(*) FROM leaves WHERE from_date <= ? AND to_date >= ? AND status = 'Approved'",
                (today, today)
            ),
        )

def next_birthday(dob: date, today: date) -> date:
    """Next occurrence of a birthday on or after today"""
    for year in (today.year, today.year + 1):
        try:
            candidate = dob.replace(year=year)
        except ValueError:
            # Feb 29 outside a leap year
            candidate = date(year, 3, 1)
        if candidate >= today:
            return candidate
    return candidate

def get_upcoming_birthdays(today: Optional[date] = None, within_days: int = 30, limit: int = 5) -> List[Birthday]:
    today = today or date.today()

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT name, email, username, dob FROM users WHERE dob IS NOT NULL AND dob != ''")
        users = cursor.fetchall()

    upcoming = []
    for user in users:
        dob = date.fromisoformat(user['dob'])
        days_until = (next_birthday(dob, today) - today).days
        if days_until <= within_days:
            upcoming.append(Birthday(
                name=user['name'],
                email=user['email'],
                username=user['username'],
                dob=dob,
                days_until=days_until,
            ))

    upcoming.sort(key=lambda b: b.days_until)
    return upcoming[:limit]
