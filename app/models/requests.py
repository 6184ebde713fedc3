from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, Literal

RequestStatus = Literal["Pending", "Approved", "Rejected"]

class LeaveCreate(BaseModel):
    employee: str = Field(min_length=1)  # employee email
    from_date: date
    to_date: date
    reason: str = ""
    leave_type: str = ""  # "Sick", "Personal", "Vacation", "Half-Day"
    status: RequestStatus = "Pending"

class LeaveUpdate(BaseModel):
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    reason: Optional[str] = None
    leave_type: Optional[str] = None
    status: Optional[RequestStatus] = None

class Leave(BaseModel):
    leave_id: int
    employee: str
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    status: str
    reason: str = ""
    leave_type: str = ""
    applied_date: Optional[datetime] = None

class RegularizationCreate(BaseModel):
    employee: str = Field(min_length=1)
    work_date: date
    reason: str = ""

class RegularizationUpdate(BaseModel):
    status: Optional[RequestStatus] = None
    reason: Optional[str] = None

class Regularization(BaseModel):
    regularization_id: int
    employee: str
    work_date: Optional[date] = None
    reason: str = ""
    status: RequestStatus = "Pending"
    applied_date: Optional[datetime] = None
