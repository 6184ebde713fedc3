import logging

from fastapi import APIRouter, Depends
from app.models.common import NotificationEvent
from app.models.company import CompanyConfig, CompanyConfigUpdate # Import models
from app.services.company_service import get_company_config, update_company_config # Import services
from app.services.notification_service import NotificationSink, get_notifier

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/company/config", response_model=CompanyConfig)
async def read_company_config():
    """Get the office Wi-Fi and location used for punch verification"""
    return get_company_config()

@router.put("/company/config", response_model=CompanyConfig)
async def replace_company_config(update: CompanyConfigUpdate, sink: NotificationSink = Depends(get_notifier)):
    """Update the office Wi-Fi and/or location; omitted fields keep their values"""
    config = update_company_config(update)
    sink.publish(NotificationEvent(event="company-config-updated", data=config.model_dump(mode="json")))
    return config
