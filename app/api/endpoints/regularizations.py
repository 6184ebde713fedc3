import logging
from typing import List

from fastapi import APIRouter, Depends
from app.models.common import NotificationEvent
from app.models.requests import Regularization, RegularizationCreate, RegularizationUpdate # Import models
from app.services import regularization_service # Import services
from app.services.notification_service import NotificationSink, get_notifier

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/regularization")
async def submit_regularization(request: RegularizationCreate):
    regularization = regularization_service.create_regularization(request)
    return {"message": "Regularization request submitted successfully", "regularization": regularization}

@router.get("/regularization", response_model=List[Regularization])
async def list_regularizations():
    """All regularization requests (for HR dashboard)"""
    return regularization_service.list_regularizations()

@router.get("/regularization/{email}", response_model=List[Regularization])
async def list_employee_regularizations(email: str):
    return regularization_service.list_regularizations(employee=email)

@router.put("/regularization/{regularization_id}")
async def update_regularization(regularization_id: int, update: RegularizationUpdate,
                                sink: NotificationSink = Depends(get_notifier)):
    """Approve or reject a regularization request"""
    regularization = regularization_service.update_regularization(regularization_id, update)
    sink.publish(NotificationEvent(event="regularization-status-changed", data={
        "regularization_id": regularization_id,
        "status": regularization.status,
        "employee": regularization.employee,
    }))
    return {"message": "Regularization updated successfully", "regularization": regularization}
