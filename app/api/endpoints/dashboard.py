from typing import List

from fastapi import APIRouter
from app.models.common import Birthday, DashboardStats # Import models
from app.services.dashboard_service import get_dashboard_stats, get_upcoming_birthdays # Import services

router = APIRouter()

@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats():
    return get_dashboard_stats()

@router.get("/birthdays", response_model=List[Birthday])
async def upcoming_birthdays():
    """Next five birthdays within 30 days"""
    return get_upcoming_birthdays()
