"""Great-circle distance between coordinates (haversine)."""

import math

from pydantic import BaseModel, Field

from panikkar.core.config import constants


class Coordinates(BaseModel):
    """A latitude/longitude pair in degrees."""

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance in kilometers between two points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    # Float error can push a slightly above 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return constants.EARTH_RADIUS_KM * c


def distance_km(origin: Coordinates | None, destination: Coordinates | None) -> float | None:
    """Distance between two optional points.

    Returns None ("unknown") when either point is missing. Callers must treat
    None as a missing distance, never as zero.
    """
    if origin is None or destination is None:
        return None
    return haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def round_km(value: float | None) -> float | None:
    """Round a distance for storage, passing None through."""
    if value is None:
        return None
    return round(value, constants.DISTANCE_DECIMALS)
