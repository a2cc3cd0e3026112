"""
Geofence validation.
Uses the Haversine formula to calculate distance between points.
"""
from __future__ import annotations

import math
from typing import Optional

from ..core.constants import EARTH_RADIUS_M
from .model import GeofenceVerdict, SiteLocation


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in meters
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2 +
        math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def _format_radius(radius: float) -> str:
    return str(int(radius)) if float(radius).is_integer() else str(radius)


def validate_location(site: Optional[SiteLocation], worker_lat: float, worker_lng: float) -> GeofenceVerdict:
    """
    Check whether a worker position is inside the site's allowed radius.

    Sites without a location, or marked inactive, are not geofenced.
    The boundary is inclusive.
    """
    if site is None or not site.is_active:
        return GeofenceVerdict(
            is_valid=True,
            distance=None,
            allowed_radius=None,
            message="No location validation required",
        )

    distance = haversine_distance(site.latitude, site.longitude, worker_lat, worker_lng)
    is_valid = distance <= site.allowed_radius

    if is_valid:
        message = "Location is valid for attendance"
    else:
        message = (
            f"Worker is {distance:.1f}m away from job location "
            f"(max allowed: {_format_radius(site.allowed_radius)}m)"
        )

    return GeofenceVerdict(
        is_valid=is_valid,
        distance=distance,
        allowed_radius=site.allowed_radius,
        message=message,
    )
