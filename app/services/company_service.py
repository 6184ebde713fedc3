import logging
from datetime import datetime
from typing import Optional

from app.core.database import get_db, ensure_company_config # Import database helpers
from app.models.company import CompanyConfig, CompanyConfigUpdate, OfficeLocation # Import models

logger = logging.getLogger(__name__)

def _row_to_config(row) -> CompanyConfig:
    return CompanyConfig(
        company_wifi=row['company_wifi'],
        office_location=OfficeLocation(
            latitude=row['office_latitude'],
            longitude=row['office_longitude'],
            allowed_radius=row['allowed_radius'],
        ),
        created_at=datetime.fromisoformat(row['created_at']) if row['created_at'] else None,
        updated_at=datetime.fromisoformat(row['updated_at']) if row['updated_at'] else None,
    )

def load_company_config(conn) -> CompanyConfig:
    """Read the singleton configuration on an open connection, creating it with defaults if absent"""
    ensure_company_config(conn)
    row = conn.execute("SELECT * FROM company_config WHERE config_id = 1").fetchone()
    return _row_to_config(row)

def get_company_config() -> CompanyConfig:
    with get_db() as conn:
        config = load_company_config(conn)
        conn.commit()
        return config

def update_company_config(update: CompanyConfigUpdate) -> CompanyConfig:
    """Merge the supplied fields into the singleton configuration"""
    location = update.office_location
    latitude: Optional[float] = location.latitude if location else None
    longitude: Optional[float] = location.longitude if location else None
    allowed_radius: Optional[float] = location.allowed_radius if location else None

    with get_db() as conn:
        ensure_company_config(conn)
        conn.execute('''
            UPDATE company_config
            SET company_wifi = COALESCE(?, company_wifi),
                office_latitude = COALESCE(?, office_latitude),
                office_longitude = COALESCE(?, office_longitude),
                allowed_radius = COALESCE(?, allowed_radius),
                updated_at = ?
            WHERE config_id = 1
        ''', (update.company_wifi, latitude, longitude, allowed_radius, datetime.now().isoformat()))
        row = conn.execute("SELECT * FROM company_config WHERE config_id = 1").fetchone()
        conn.commit()

    config = _row_to_config(row)
    logger.info(
        f"Company configuration updated: WiFi '{config.company_wifi}', office "
        f"({config.office_location.latitude}, {config.office_location.longitude}) "
        f"radius {config.office_location.allowed_radius}m"
    )
    return config
