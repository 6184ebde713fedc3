import math
import logging
from typing import Tuple

logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6371e3

def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points given in degrees (haversine)"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2
         + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c

def validate_office_proximity(latitude: float, longitude: float, office_latitude: float,
                              office_longitude: float, allowed_radius: float) -> Tuple[bool, float]:
    """Check a reported position against the office radius, returns (is_valid, distance)"""
    distance = calculate_distance(latitude, longitude, office_latitude, office_longitude)
    is_valid = distance <= allowed_radius

    if is_valid:
        logger.debug(f"Location within office radius: {distance:.1f}m <= {allowed_radius}m")
    else:
        logger.debug(f"Location outside office radius: {distance:.1f}m > {allowed_radius}m")
    return is_valid, distance
