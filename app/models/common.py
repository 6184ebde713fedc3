from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, List, Literal, Dict, Any

UserType = Literal["Employee", "HR", "employee", "hr"]
Gender = Literal["Male", "Female", "Other", ""]

class User(BaseModel):
    """Account as returned by the API (never carries password material)"""
    user_id: int
    username: str
    email: str
    usertype: str
    name: str
    department: str = "General"
    phone: str = ""
    dob: Optional[date] = None
    gender: str = ""
    address: str = ""
    profile_pic: str = ""
    employee_id: Optional[str] = None
    position: str = ""
    salary: float = 0
    joining_date: Optional[datetime] = None
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class RegisterRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    username: Optional[str] = None
    usertype: UserType = "Employee"
    name: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[date] = None
    gender: Gender = ""
    address: Optional[str] = None

class LoginRequest(BaseModel):
    email: str
    password: str
    usertype: UserType

class UserUpdate(BaseModel):
    username: Optional[str] = None
    name: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[str] = None
    profile_pic: Optional[str] = None
    position: Optional[str] = None
    salary: Optional[float] = None
    is_active: Optional[bool] = None

class ProfileEdit(BaseModel):
    """Self-service profile edit, every field is overwritten"""
    name: str
    phone: str = ""
    dob: Optional[date] = None
    address: str = ""
    profile_pic: str = ""

class RecoveryEmailRequest(BaseModel):
    email: str

class PasswordResetRequest(BaseModel):
    email: str
    new_password: str = Field(min_length=1)

class AuthResponse(BaseModel):
    message: str
    user: User

class HRPermissions(BaseModel):
    can_approve_leaves: bool = True
    can_manage_employees: bool = True
    can_view_reports: bool = True
    can_manage_attendance: bool = True

HRLevel = Literal["Junior HR", "Senior HR", "HR Manager", "HR Director"]

class HRProfileCreate(BaseModel):
    user_id: int
    hr_id: str = Field(min_length=1)
    department: str = Field(min_length=1)
    level: HRLevel = "Junior HR"
    specialization: List[str] = []
    certifications: List[str] = []

class HRProfileUpdate(BaseModel):
    department: Optional[str] = None
    level: Optional[HRLevel] = None
    permissions: Optional[HRPermissions] = None
    specialization: Optional[List[str]] = None
    certifications: Optional[List[str]] = None

class HRProfile(BaseModel):
    profile_id: int
    user_id: int
    hr_id: str
    department: str
    level: str
    permissions: HRPermissions
    specialization: List[str] = []
    certifications: List[str] = []
    user: Optional[User] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class EmployeeCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None

class Employee(BaseModel):
    employee_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None

class DashboardStats(BaseModel):
    total_employees: int
    total_users: int
    pending_leaves: int
    pending_regularizations: int
    active_today: int
    leaves_today: int

class Birthday(BaseModel):
    name: str
    email: str
    username: str
    dob: date
    days_until: int

class NotificationEvent(BaseModel):
    """Message pushed to every connected real-time client"""
    event: str
    data: Dict[str, Any] = {}
