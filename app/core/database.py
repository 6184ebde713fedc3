import sqlite3
from contextlib import contextmanager
import logging
from datetime import datetime
from app.core.config import ServerConfig, AttendanceConfig # Import configs

logger = logging.getLogger(__name__)

@contextmanager
def get_db():
    conn = sqlite3.connect(ServerConfig.DATABASE_PATH, timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

def init_database():
    with get_db() as conn:
        cursor = conn.cursor()

        # Create users table (login accounts for employees and HR)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS users (
                user_id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT NOT NULL,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                usertype TEXT NOT NULL CHECK(usertype IN ('Employee', 'HR', 'employee', 'hr')),
                name TEXT NOT NULL,
                department TEXT DEFAULT 'General',
                phone TEXT DEFAULT '',
                dob DATE,
                gender TEXT DEFAULT '' CHECK(gender IN ('Male', 'Female', 'Other', '')),
                address TEXT DEFAULT '',
                profile_pic TEXT DEFAULT '',
                employee_id TEXT UNIQUE,
                position TEXT DEFAULT '',
                salary REAL DEFAULT 0,
                joining_date TIMESTAMP,
                is_active BOOLEAN DEFAULT TRUE,
                last_login TIMESTAMP,
                created_at TIMESTAMP,
                updated_at TIMESTAMP
            )
        ''')

        # Create HR profiles table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS hr_profiles (
                profile_id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER UNIQUE NOT NULL,
                hr_id TEXT UNIQUE NOT NULL,
                department TEXT NOT NULL,
                level TEXT DEFAULT 'Junior HR',
                permissions TEXT NOT NULL,
                specialization TEXT DEFAULT '[]',
                certifications TEXT DEFAULT '[]',
                created_at TIMESTAMP,
                updated_at TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users (user_id) ON DELETE CASCADE
            )
        ''')

        # Create employees table (directory entries managed by HR)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS employees (
                employee_id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT,
                email TEXT,
                department TEXT
            )
        ''')

        # Create leaves table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS leaves (
                leave_id INTEGER PRIMARY KEY AUTOINCREMENT,
                employee TEXT NOT NULL,
                from_date DATE,
                to_date DATE,
                status TEXT DEFAULT 'Pending',
                reason TEXT DEFAULT '',
                leave_type TEXT DEFAULT '',
                applied_date TIMESTAMP
            )
        ''')

        # Create attendance table, one row per employee per day
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS attendance (
                attendance_id INTEGER PRIMARY KEY AUTOINCREMENT,
                employee TEXT NOT NULL,
                work_date DATE NOT NULL,
                status TEXT NOT NULL CHECK(status IN ('Present', 'Absent', 'Half-Day')),
                punch_type TEXT,
                punch_in TIMESTAMP,
                punch_out TIMESTAMP,
                latitude REAL,
                longitude REAL,
                address TEXT,
                total_disconnections INTEGER NOT NULL DEFAULT 0,
                is_half_day BOOLEAN NOT NULL DEFAULT FALSE,
                version INTEGER NOT NULL DEFAULT 1
            )
        ''')

        cursor.execute('''
            CREATE UNIQUE INDEX IF NOT EXISTS idx_attendance_employee_day
            ON attendance (employee, work_date)
        ''')

        # Create wifi disconnections table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS wifi_disconnections (
                disconnection_id INTEGER PRIMARY KEY AUTOINCREMENT,
                attendance_id INTEGER NOT NULL,
                timestamp TIMESTAMP NOT NULL,
                duration_minutes INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY (attendance_id) REFERENCES attendance (attendance_id) ON DELETE CASCADE
            )
        ''')

        # Create regularizations table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS regularizations (
                regularization_id INTEGER PRIMARY KEY AUTOINCREMENT,
                employee TEXT NOT NULL,
                work_date DATE,
                reason TEXT DEFAULT '',
                status TEXT NOT NULL DEFAULT 'Pending' CHECK(status IN ('Pending', 'Approved', 'Rejected')),
                applied_date TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_regularization_lookup
            ON regularizations (employee, work_date, status)
        ''')

        # Create company config table, the CHECK keeps it to a single row
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS company_config (
                config_id INTEGER PRIMARY KEY CHECK(config_id = 1),
                company_wifi TEXT NOT NULL,
                office_latitude REAL NOT NULL,
                office_longitude REAL NOT NULL,
                allowed_radius REAL NOT NULL,
                created_at TIMESTAMP,
                updated_at TIMESTAMP
            )
        ''')

        # Create punch verification log table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS punch_verification_log (
                log_id INTEGER PRIMARY KEY AUTOINCREMENT,
                employee TEXT NOT NULL,
                wifi_network TEXT,
                latitude REAL,
                longitude REAL,
                distance_meters REAL,
                success BOOLEAN NOT NULL,
                message TEXT NOT NULL,
                ip_address TEXT,
                timestamp TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_punch_log_lookup
            ON punch_verification_log (employee, timestamp, success)
        ''')

        conn.commit()
        logger.info("Database initialized successfully")

def ensure_company_config(conn) -> None:
    """Create the company configuration row with defaults if it is missing"""
    now = datetime.now().isoformat()
    conn.execute('''
        INSERT OR IGNORE INTO company_config
        (config_id, company_wifi, office_latitude, office_longitude, allowed_radius, created_at, updated_at)
        VALUES (1, ?, ?, ?, ?, ?, ?)
    ''', (
        AttendanceConfig.DEFAULT_COMPANY_WIFI,
        AttendanceConfig.DEFAULT_OFFICE_LATITUDE,
        AttendanceConfig.DEFAULT_OFFICE_LONGITUDE,
        AttendanceConfig.DEFAULT_ALLOWED_RADIUS,
        now,
        now,
    ))

def seed_test_data() -> int:
    """Add test users and directory employees for development/testing"""
    from app.core.security import hash_password  # Import here to avoid circular imports

    test_users = [
        ("john_doe", "john.doe@company.com", "employee", "John Doe", "IT",
         "123-456-7890", "1990-05-15", "Male", "123 Main St, City"),
        ("jane_smith", "jane.smith@company.com", "employee", "Jane Smith", "HR",
         "123-456-7891", "1988-09-22", "Female", "456 Oak Ave, City"),
        ("hr_admin", "hr@company.com", "hr", "HR Admin", "HR",
         "123-456-7892", "1985-03-10", "Female", "789 Pine St, City"),
    ]

    created = 0
    with get_db() as conn:
        cursor = conn.cursor()
        now = datetime.now().isoformat()

        for index, (username, email, usertype, name, department, phone, dob, gender, address) in enumerate(test_users, start=1):
            cursor.execute('''
                INSERT OR IGNORE INTO users
                (username, email, password_hash, usertype, name, department, phone, dob, gender,
                 address, employee_id, joining_date, is_active, last_login, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, TRUE, ?, ?, ?)
            ''', (username, email, hash_password(email, "password123"), usertype, name, department,
                  phone, dob, gender, address, f"EMP{index:06d}", now, now, now, now))
            if cursor.rowcount:
                created += 1
                logger.info(f"Created test user: {name}")

        cursor.execute("SELECT COUNT(*) FROM employees")
        if cursor.fetchone()[0] == 0:
            cursor.executemany('''
                INSERT INTO employees (name, email, department) VALUES (?, ?, ?)
            ''', [(u[3], u[1], u[4]) for u in test_users])
            logger.info(f"Added {len(test_users)} test employees to directory")

        ensure_company_config(conn)
        conn.commit()

    return created
