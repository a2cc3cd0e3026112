"""Location normalization.

Heterogeneous location payloads (free text, structured addresses, coordinate
pairs) are parsed into explicit input variants first, then converted to a
canonical :class:`SiteLocation` or a display label.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.validators import to_finite_float
from ..core.constants import DEFAULT_ALLOWED_RADIUS_M
from ..core.exceptions import ValidationError
from .model import CoordinatePair, FreeTextLabel, LocationInput, SiteLocation, StructuredAddress

_ADDRESS_KEYS = ("line1", "address", "city", "state", "postalCode", "postal_code", "name", "description")


def _pick(source: Mapping[str, Any], *keys: str):
    for key in keys:
        value = source.get(key)
        if value is not None:
            return value
    return None


def _text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _is_active(source: Mapping[str, Any]) -> bool:
    value = _pick(source, "isActive", "is_active")
    return True if value is None else bool(value)


def parse_location_input(raw) -> Optional[LocationInput]:
    """Classify a loosely shaped payload into one of the explicit variants."""

    if raw is None:
        return None
    if isinstance(raw, (CoordinatePair, StructuredAddress, FreeTextLabel)):
        return raw
    if isinstance(raw, SiteLocation):
        return CoordinatePair(
            latitude=raw.latitude,
            longitude=raw.longitude,
            formatted_address=raw.formatted_address,
            allowed_radius=raw.allowed_radius,
            is_active=raw.is_active,
        )
    if isinstance(raw, str):
        return FreeTextLabel(text=raw)
    if not isinstance(raw, Mapping):
        raise ValidationError("Unsupported location payload")

    latitude = to_finite_float(raw.get("latitude"))
    longitude = to_finite_float(raw.get("longitude"))
    allowed_radius = to_finite_float(_pick(raw, "allowedRadius", "allowed_radius", "radius"))
    formatted_address = _text(_pick(raw, "formattedAddress", "formatted_address"))

    if any(raw.get(key) for key in _ADDRESS_KEYS):
        return StructuredAddress(
            formatted_address=formatted_address,
            line1=_text(raw.get("line1")),
            address=_text(raw.get("address")),
            city=_text(raw.get("city")),
            state=_text(raw.get("state")),
            postal_code=_text(_pick(raw, "postalCode", "postal_code")),
            name=_text(raw.get("name")),
            description=_text(raw.get("description")),
            latitude=latitude,
            longitude=longitude,
            allowed_radius=allowed_radius,
            is_active=_is_active(raw),
        )

    return CoordinatePair(
        latitude=latitude,
        longitude=longitude,
        formatted_address=formatted_address,
        allowed_radius=allowed_radius,
        is_active=_is_active(raw),
    )


def _coordinates_label(latitude, longitude) -> Optional[str]:
    if latitude is None or longitude is None:
        return None
    return f"{latitude}, {longitude}"


def label_from_free_text(value: FreeTextLabel, fallback_label: Optional[str] = None) -> Optional[str]:
    return _text(value.text) or fallback_label


def label_from_coordinates(value: CoordinatePair, fallback_label: Optional[str] = None) -> Optional[str]:
    return value.formatted_address or _coordinates_label(value.latitude, value.longitude) or fallback_label


def label_from_address(value: StructuredAddress, fallback_label: Optional[str] = None) -> Optional[str]:
    if value.formatted_address:
        return value.formatted_address

    parts: list[str] = []
    if value.line1:
        parts.append(value.line1)
    if value.address and value.address != value.line1:
        parts.append(value.address)
    city_state = ", ".join(p for p in (value.city, value.state) if p)
    if city_state:
        parts.append(city_state)
    if value.postal_code:
        parts.append(value.postal_code)
    if parts:
        return ", ".join(parts)

    return (
        value.name
        or _coordinates_label(value.latitude, value.longitude)
        or value.description
        or fallback_label
    )


def format_location_label(raw, fallback_label: Optional[str] = None) -> Optional[str]:
    """Human readable label for any location-like input."""

    value = parse_location_input(raw)
    if value is None:
        return fallback_label
    if isinstance(value, FreeTextLabel):
        return label_from_free_text(value, fallback_label)
    if isinstance(value, CoordinatePair):
        return label_from_coordinates(value, fallback_label)
    return label_from_address(value, fallback_label)


def normalize_location(
    raw,
    *,
    formatted_address: Optional[str] = None,
    fallback_label: Optional[str] = None,
    allowed_radius: Optional[float] = None,
) -> Optional[SiteLocation]:
    """Convert to a SiteLocation; None when coordinates or an address label are missing.

    Address precedence: the payload's own address, then `formatted_address`,
    then the label derived from the payload (falling back to `fallback_label`).
    """

    value = parse_location_input(raw)
    if value is None or isinstance(value, FreeTextLabel):
        return None
    if value.latitude is None or value.longitude is None:
        return None

    radius = value.allowed_radius
    if radius is None:
        radius = to_finite_float(allowed_radius)
    if radius is None:
        radius = DEFAULT_ALLOWED_RADIUS_M

    address = value.formatted_address or _text(formatted_address) or format_location_label(value, fallback_label)
    if not address:
        return None

    return SiteLocation(
        latitude=value.latitude,
        longitude=value.longitude,
        formatted_address=address,
        allowed_radius=radius,
        is_active=value.is_active,
    )


def require_location(
    raw,
    field_name: str,
    *,
    formatted_address: Optional[str] = None,
    fallback_label: Optional[str] = None,
    allowed_radius: Optional[float] = None,
) -> SiteLocation:
    """Like :func:`normalize_location` but a supplied payload must be well formed."""

    location = normalize_location(
        raw,
        formatted_address=formatted_address,
        fallback_label=fallback_label,
        allowed_radius=allowed_radius,
    )
    if location is None:
        raise ValidationError(f"{field_name} must include latitude and longitude")
    return location
