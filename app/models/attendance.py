from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, List, Literal
from app.models.requests import Regularization

AttendanceStatus = Literal["Present", "Absent", "Half-Day"]

class Location(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: Optional[str] = None

class DisconnectionEvent(BaseModel):
    timestamp: datetime
    duration_minutes: int = 0  # placeholder until reconnect time is reported

class AttendanceRecord(BaseModel):
    """One attendance document per employee per calendar day"""
    attendance_id: Optional[int] = None
    employee: str
    work_date: date
    status: AttendanceStatus
    punch_type: Optional[str] = None  # "Location-WiFi", "Manual", ...
    punch_in: Optional[datetime] = None
    punch_out: Optional[datetime] = None
    location: Optional[Location] = None
    wifi_disconnections: List[DisconnectionEvent] = []
    total_disconnections: int = 0
    is_half_day: bool = False
    version: int = 0  # 0 until first persisted

class PunchRequest(BaseModel):
    employee: str = Field(min_length=1)
    location: Location
    wifi_network: str = Field(min_length=1)
    punch_type: str = Field(default="Location-WiFi", min_length=1)

class WifiPunchRequest(BaseModel):
    """Punch from a device that reports its Wi-Fi network but has no GPS fix"""
    employee: str = Field(min_length=1)
    wifi_network: str = Field(min_length=1)
    punch_type: str = Field(default="WiFi", min_length=1)
    location: Optional[Location] = None

class WifiDisconnectRequest(BaseModel):
    employee: str = Field(min_length=1)
    duration_minutes: int = Field(default=0, ge=0)

class ManualAttendance(BaseModel):
    """HR marks attendance by hand (fallback when punching is impossible)"""
    employee: str = Field(min_length=1)
    work_date: date
    status: AttendanceStatus = "Present"
    punch_type: str = "Manual"
    punch_in: Optional[datetime] = None
    punch_out: Optional[datetime] = None

class PunchResponse(BaseModel):
    verified: bool = True
    message: str
    distance_meters: Optional[float] = None
    allowed_radius: float
    punch_action: Literal["PUNCH_IN", "PUNCH_OUT", "NONE"]
    attendance: AttendanceRecord

class WifiDisconnectResponse(BaseModel):
    message: str
    escalated: bool = False
    attendance: AttendanceRecord
    regularization: Optional[Regularization] = None

class PunchAttempt(BaseModel):
    log_id: int
    employee: str
    wifi_network: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_meters: Optional[float] = None
    success: bool
    message: str
    ip_address: Optional[str] = None
    timestamp: datetime
