from datetime import date

import pytest

from app.core.database import get_db, seed_test_data
from app.services.dashboard_service import get_upcoming_birthdays, next_birthday


@pytest.mark.parametrize("dob, today, expected", [
    (date(1990, 5, 15), date(2026, 5, 1), date(2026, 5, 15)),
    (date(1990, 5, 15), date(2026, 5, 15), date(2026, 5, 15)),
    (date(1990, 1, 3), date(2026, 12, 20), date(2027, 1, 3)),
    (date(1992, 2, 29), date(2026, 2, 1), date(2026, 3, 1)),
    (date(1992, 2, 29), date(2027, 12, 1), date(2028, 2, 29)),
])
def test_next_birthday(dob, today, expected):
    assert next_birthday(dob, today) == expected


def test_upcoming_birthdays_sorted_within_window(db_path):
    seed_test_data()
    with get_db() as conn:
        conn.execute("UPDATE users SET dob = '1991-01-05' WHERE email = 'hr@company.com'")
        conn.commit()

    upcoming = get_upcoming_birthdays(today=date(2026, 12, 28))
    assert [(b.email, b.days_until) for b in upcoming] == [("hr@company.com", 8)]

    upcoming = get_upcoming_birthdays(today=date(2026, 5, 1), within_days=200)
    assert [b.email for b in upcoming] == ["john.doe@company.com", "jane.smith@company.com"]
