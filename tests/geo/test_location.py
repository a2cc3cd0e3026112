import pytest

from src.gig_attendance.gig_attendance.core.exceptions import ValidationError
from src.gig_attendance.gig_attendance.geo.location import (
    format_location_label,
    normalize_location,
    parse_location_input,
    require_location,
)
from src.gig_attendance.gig_attendance.geo.model import CoordinatePair, FreeTextLabel, StructuredAddress


def test_parse_location_input_variants():
    assert parse_location_input(None) is None
    assert parse_location_input("Dock 4") == FreeTextLabel(text="Dock 4")
    assert isinstance(parse_location_input({"latitude": 1, "longitude": 2}), CoordinatePair)
    assert isinstance(parse_location_input({"line1": "1 Main St", "city": "Austin"}), StructuredAddress)


def test_parse_location_input_rejects_unsupported_payload():
    with pytest.raises(ValidationError):
        parse_location_input(42)


def test_format_label_prefers_formatted_address():
    raw = {"formattedAddress": "Pier 9", "line1": "1 Main St", "city": "Austin"}

    assert format_location_label(raw) == "Pier 9"


def test_format_label_joins_address_parts():
    raw = {"line1": "1 Main St", "address": "1 Main St", "city": "Austin", "state": "TX", "postalCode": "78701"}

    assert format_location_label(raw) == "1 Main St, Austin, TX, 78701"


def test_format_label_falls_back_to_name_then_coordinates_then_description():
    assert format_location_label({"name": "Warehouse", "description": "Back door"}) == "Warehouse"
    assert format_location_label({"description": "Back door", "latitude": 1.5, "longitude": 2.5}) == "1.5, 2.5"
    assert format_location_label({"description": "Back door"}) == "Back door"


def test_format_label_free_text_and_fallback():
    assert format_location_label("  Gate B  ") == "Gate B"
    assert format_location_label("   ", "Cafe Location") == "Cafe Location"
    assert format_location_label(None, "Cafe Location") == "Cafe Location"
    assert format_location_label({}) is None


def test_normalize_location_requires_coordinates():
    assert normalize_location({"formattedAddress": "Pier 9"}) is None
    assert normalize_location("Pier 9") is None
    assert normalize_location({"latitude": "abc", "longitude": 1}) is None


def test_normalize_location_address_precedence():
    own = normalize_location({"latitude": 1, "longitude": 2, "formattedAddress": "Own"}, formatted_address="Given")
    given = normalize_location({"latitude": 1, "longitude": 2}, formatted_address="Given", fallback_label="Fallback")
    derived = normalize_location({"latitude": 1, "longitude": 2}, fallback_label="Fallback")

    assert own.formatted_address == "Own"
    assert given.formatted_address == "Given"
    assert derived.formatted_address == "1.0, 2.0"


def test_normalize_location_radius_fallbacks():
    assert normalize_location({"latitude": 1, "longitude": 2, "allowedRadius": 80}).allowed_radius == 80
    assert normalize_location({"latitude": 1, "longitude": 2}, allowed_radius=300).allowed_radius == 300
    assert normalize_location({"latitude": 1, "longitude": 2}).allowed_radius == 150


def test_normalize_location_keeps_inactive_flag():
    site = normalize_location({"latitude": 1, "longitude": 2, "isActive": False})

    assert site.is_active is False


def test_require_location_raises_for_malformed_payload():
    with pytest.raises(ValidationError, match="clockInLocation must include latitude and longitude"):
        require_location({"formattedAddress": "Somewhere"}, "clockInLocation")


def test_require_location_returns_site():
    site = require_location({"latitude": "40.7", "longitude": "-74.0"}, "clockInLocation", formatted_address="Cafe")

    assert site.latitude == 40.7
    assert site.longitude == -74.0
    assert site.formatted_address == "Cafe"
