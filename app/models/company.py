from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class OfficeLocation(BaseModel):
    latitude: float
    longitude: float
    allowed_radius: float  # meters

class CompanyConfig(BaseModel):
    company_wifi: str
    office_location: OfficeLocation
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class OfficeLocationUpdate(BaseModel):
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    allowed_radius: Optional[float] = Field(default=None, gt=0)

class CompanyConfigUpdate(BaseModel):
    """Partial update, omitted fields keep their stored values"""
    company_wifi: Optional[str] = Field(default=None, min_length=1)
    office_location: Optional[OfficeLocationUpdate] = None
