"""
Input validation and numeric coercion utilities.

The heat-loss engine never raises for malformed numbers: dimensions, flows and
U-values pass through the coercion helpers here before any arithmetic. The
strict validators (coordinates, postcodes) raise ValidationError and are used
at the climate and CLI boundaries.

Usage:
    from heatloss.utils.validation import (
        to_non_negative,
        validate_coordinates,
        ValidationError,
    )

    width = to_non_negative("3.2")        # 3.2
    width = to_non_negative("n/a")        # 0.0
    lat, lon = validate_coordinates(51.5, -0.12)
"""

import math
import re
from typing import Any, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "", suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field = field
        self.suggestions = suggestions or []


# UK coordinate bounds (mainland GB, NI, islands)
UK_BOUNDS = {
    "min_lat": 49.8,
    "max_lat": 60.9,
    "min_lon": -8.7,
    "max_lon": 1.8,
}

# Outward code + inward code, spaces already stripped
UK_POSTCODE_PATTERN = re.compile(r"^([A-Z]{1,2}\d[A-Z\d]?)(\d[A-Z]{2})$")

_UNICODE_MINUS = re.compile(r"[−‒-―]")


def to_optional_float(value: Any) -> Optional[float]:
    """
    Coerce a loosely-typed value to a finite float.

    Empty strings, None, booleans, non-numeric text and NaN/inf all give None.
    Unicode minus signs and thousands separators are tolerated.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = _UNICODE_MINUS.sub("-", str(value).strip()).replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    if not math.isfinite(number):
        return None
    return number


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float, falling back to ``default``."""
    number = to_optional_float(value)
    return default if number is None else number


def to_non_negative(value: Any) -> float:
    """Coerce to a finite float clamped at zero (dimensions, areas, flows)."""
    return max(to_float(value), 0.0)


def validate_coordinates(
    latitude: float,
    longitude: float,
    require_uk: bool = False,
    warn_outside_uk: bool = True,
) -> Tuple[float, float]:
    """
    Validate geographic coordinates.

    Args:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        require_uk: If True, coordinates must be within the UK
        warn_outside_uk: If True, log a warning for non-UK coordinates

    Returns:
        Tuple of (latitude, longitude)

    Raises:
        ValidationError: If coordinates are invalid
    """
    lat = to_optional_float(latitude)
    lon = to_optional_float(longitude)

    if lat is None or not (-90 <= lat <= 90):
        raise ValidationError(
            f"Invalid latitude {latitude}: must be between -90 and 90",
            field="latitude",
        )

    if lon is None or not (-180 <= lon <= 180):
        raise ValidationError(
            f"Invalid longitude {longitude}: must be between -180 and 180",
            field="longitude",
        )

    in_uk = (
        UK_BOUNDS["min_lat"] <= lat <= UK_BOUNDS["max_lat"]
        and UK_BOUNDS["min_lon"] <= lon <= UK_BOUNDS["max_lon"]
    )

    if require_uk and not in_uk:
        raise ValidationError(
            f"Coordinates ({lat}, {lon}) are outside the UK",
            field="coordinates",
            suggestions=[
                "UK coordinates should be roughly lat 50-61, lon -8.7 to 1.8",
                "Use 'lat,lon' order, e.g. '51.5,-0.12' for London",
            ],
        )

    if warn_outside_uk and not in_uk:
        logger.warning(
            f"Coordinates ({lat}, {lon}) are outside the UK - "
            "climate normals may not match the design tables"
        )

    return (lat, lon)


def validate_postcode(postcode: str) -> str:
    """
    Validate a UK postcode and return it in canonical "OUT IN" form.

    Raises:
        ValidationError: If the postcode does not look like a full UK postcode
    """
    if not postcode or not str(postcode).strip():
        raise ValidationError(
            "Postcode cannot be empty",
            field="postcode",
            suggestions=["Enter a full UK postcode like 'SS8 9HB'"],
        )

    compact = re.sub(r"\s+", "", str(postcode).upper())
    match = UK_POSTCODE_PATTERN.match(compact)
    if not match:
        raise ValidationError(
            f"Not a full UK postcode: '{postcode}'",
            field="postcode",
            suggestions=["Include both outward and inward parts, e.g. 'SW1A 1AA'"],
        )

    return f"{match.group(1)} {match.group(2)}"
