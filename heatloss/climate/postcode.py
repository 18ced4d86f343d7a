"""
UK postcode helpers.

Reference tables are keyed at several granularities. For "SS8 9HB":

    full     SS89HB
    outcode  SS8
    sector   SS89
    area     SS
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from ..utils.validation import UK_POSTCODE_PATTERN, ValidationError, validate_coordinates, validate_postcode

_OUTCODE = re.compile(r"^([A-Z]{1,2}\d[A-Z\d]?)")
_LAT_LON = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


def normalise_postcode(postcode: Optional[str]) -> str:
    """Uppercase with all whitespace removed."""
    return re.sub(r"\s+", "", str(postcode or "")).upper()


def postcode_keys(postcode: Optional[str]) -> list[str]:
    """Lookup keys, most specific first: full, outcode, sector, area."""
    clean = normalise_postcode(postcode)
    if not clean:
        return []

    full = UK_POSTCODE_PATTERN.match(clean)
    if full:
        outcode, inward = full.groups()
        candidates = [outcode, outcode + inward[0]]
    else:
        partial = _OUTCODE.match(clean)
        if not partial:
            return [clean]
        outcode = partial.group(1)
        candidates = [outcode]
    candidates.append(re.sub(r"\d.*", "", outcode))

    keys = [clean]
    for key in candidates:
        if key and key not in keys:
            keys.append(key)
    return keys


def format_postcode(postcode: Optional[str]) -> Optional[str]:
    """Canonical "OUT IN" form of a full postcode, or None if it isn't one."""
    try:
        return validate_postcode(postcode or "")
    except ValidationError:
        return None


def parse_lat_lon(text: Optional[str]) -> Optional[Tuple[float, float]]:
    """
    Parse a "lat,lon" override such as "51.5,-0.12".

    Returns None for anything that isn't two numbers within valid
    latitude/longitude ranges.
    """
    match = _LAT_LON.match(str(text or ""))
    if not match:
        return None
    try:
        return validate_coordinates(float(match.group(1)), float(match.group(2)), warn_outside_uk=False)
    except ValidationError:
        return None
