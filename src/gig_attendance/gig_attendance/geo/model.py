from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..core.constants import DEFAULT_ALLOWED_RADIUS_M


@dataclass(frozen=True)
class SiteLocation:
    """Canonical location used for geofencing and display."""

    latitude: float
    longitude: float
    formatted_address: str
    allowed_radius: float = DEFAULT_ALLOWED_RADIUS_M
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "formattedAddress": self.formatted_address,
            "allowedRadius": self.allowed_radius,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class CoordinatePair:
    latitude: Optional[float]
    longitude: Optional[float]
    formatted_address: Optional[str] = None
    allowed_radius: Optional[float] = None
    is_active: bool = True


@dataclass(frozen=True)
class StructuredAddress:
    formatted_address: Optional[str] = None
    line1: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    allowed_radius: Optional[float] = None
    is_active: bool = True


@dataclass(frozen=True)
class FreeTextLabel:
    text: str


LocationInput = Union[CoordinatePair, StructuredAddress, FreeTextLabel]


@dataclass(frozen=True)
class GeofenceVerdict:
    is_valid: bool
    distance: Optional[float]
    allowed_radius: Optional[float]
    message: str
