"""
Ventilation rates and the flow combination policy.

The base rate comes from a ventilation tier (derived from the property age
band) and a room type. Device override flows are summed separately, then the
two are combined with a user-selectable policy:

    max  effective = max(base, devices)   (default)
    sum  effective = base + devices

Per-device default flows exist for display only; a device without an explicit
override contributes nothing to the device total.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..climate.derive import round_half_up
from ..core.models import VentDevice, VentDeviceType
from ..fabric.u_value_tables import PROPERTY_AGE_BANDS
from ..utils.validation import to_non_negative

logger = logging.getLogger(__name__)


class VentilationTier(str, Enum):
    PRE_2003 = "pre_2003"
    Y2003_2010 = "y2003_2010"
    Y2010_2021 = "y2010_2021"
    Y2021_PLUS = "y2021_plus"


class RoomType(str, Enum):
    KITCHEN = "kitchen"
    UTILITY = "utility"
    BATHROOM = "bathroom"
    WC = "wc"
    HABITABLE = "habitable"
    BEDROOM = "bedroom"
    LIVING = "living"


class CombinationPolicy(str, Enum):
    MAX = "max"
    SUM = "sum"

    @classmethod
    def coerce(cls, value: Any) -> "CombinationPolicy":
        """Map any unrecognised value (including None) to MAX."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.SUM.value:
            return cls.SUM
        if value is not None and not (isinstance(value, str) and value.strip().lower() == cls.MAX.value):
            logger.warning(f"Unrecognised ventilation policy {value!r}, using 'max'")
        return cls.MAX


def _rates(kitchen: float, utility: float, bathroom: float, wc: float,
           habitable: float, bedroom: float, living: float) -> Mapping[RoomType, float]:
    return MappingProxyType({
        RoomType.KITCHEN: kitchen,
        RoomType.UTILITY: utility,
        RoomType.BATHROOM: bathroom,
        RoomType.WC: wc,
        RoomType.HABITABLE: habitable,
        RoomType.BEDROOM: bedroom,
        RoomType.LIVING: living,
    })


# tier -> room type -> L/s
BASE_RATES_LPS: Mapping[VentilationTier, Mapping[RoomType, float]] = MappingProxyType({
    VentilationTier.PRE_2003: _rates(30, 15, 15, 6, 10, 8, 10),
    VentilationTier.Y2003_2010: _rates(30, 15, 15, 6, 10, 8, 10),
    VentilationTier.Y2010_2021: _rates(30, 15, 15, 6, 10, 8, 10),
    VentilationTier.Y2021_PLUS: _rates(36, 18, 15, 8, 12, 10, 12),
})

FALLBACK_TIER = VentilationTier.Y2021_PLUS
FALLBACK_RATE_LPS = 10.0

# Shown next to each device in the editor; never fed into the loss calculation
DEFAULT_DEVICE_FLOWS_LPS: Mapping[VentDeviceType, float] = MappingProxyType({
    VentDeviceType.TRICKLE_VENT: 5,
    VentDeviceType.MVHR_SUPPLY: 8,
    VentDeviceType.MVHR_EXTRACT: 13,
    VentDeviceType.MECHANICAL_EXTRACT: 8,
    VentDeviceType.PASSIVE_VENT: 5,
})

AGE_BAND_TO_TIER: Mapping[str, VentilationTier] = MappingProxyType({
    **{band: VentilationTier.PRE_2003 for band in PROPERTY_AGE_BANDS[:9]},
    "2003-2006": VentilationTier.Y2003_2010,
    "2007-2011": VentilationTier.Y2010_2021,
    "2012-present": VentilationTier.Y2010_2021,
})

_YEAR = re.compile(r"\d{4}")
_YEAR_RANGE = re.compile(r"(\d{4})\s*(?:-|to)\s*(\d{4})", re.IGNORECASE)
_EPC_BAND_LABEL = re.compile(r"Construction age band\s*[:\-]?\s*([^\n]{4,40})", re.IGNORECASE)
_EPC_BUILT = re.compile(
    r"Built (?:in|between)\s*(\d{4}\s*(?:-|to)\s*\d{4}|before\s*1900|after\s*2012)",
    re.IGNORECASE,
)

# Upper year bound of each labelled band, oldest first
_BAND_UPPER_YEARS = (
    (1899, "pre-1900"),
    (1929, "1900-1929"),
    (1949, "1930-1949"),
    (1966, "1950-1966"),
    (1975, "1967-1975"),
    (1982, "1976-1982"),
    (1990, "1983-1990"),
    (1995, "1991-1995"),
    (2002, "1996-2002"),
    (2006, "2003-2006"),
    (2011, "2007-2011"),
)


def _enum_or_none(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return None


def age_band_for_year(year: int) -> str:
    for upper, label in _BAND_UPPER_YEARS:
        if year <= upper:
            return label
    return "2012-present"


def _band_from_years(text: str) -> Optional[str]:
    """A year range decides by its midpoint, a lone year by itself."""
    span = _YEAR_RANGE.search(text)
    if span:
        return age_band_for_year(round_half_up((int(span.group(1)) + int(span.group(2))) / 2))
    match = _YEAR.search(text)
    return age_band_for_year(int(match.group())) if match else None


def extract_age_band(epc_text: str) -> Optional[str]:
    """
    Age band from pasted EPC certificate text.

    Looks for the "Construction age band" field first, then a "Built in" or
    "Built between" phrase. None when neither is present.
    """
    text = re.sub(r"[ \t]+", " ", str(epc_text or ""))

    label = _EPC_BAND_LABEL.search(text)
    if label:
        field = label.group(1).lower()
        for band in PROPERTY_AGE_BANDS:
            if band in field:
                return band
        if re.search(r"before\s*1900|pre\s*1900", field):
            return "pre-1900"
        if re.search(r"2012|present|after\s*2012|2013", field):
            return "2012-present"

    built = _EPC_BUILT.search(text)
    if built:
        phrase = built.group(1).lower()
        if "before" in phrase:
            return "pre-1900"
        if "after" in phrase:
            return "2012-present"
        return _band_from_years(phrase)
    return None


def infer_age_band(value: Any) -> Optional[str]:
    """Exact label, EPC text, then any year or year range; None if nothing matches."""
    text = str(value if value is not None else "").strip()
    if text in PROPERTY_AGE_BANDS:
        return text
    return extract_age_band(text) or _band_from_years(text)


def coerce_property_age_band(value: Any) -> str:
    """
    Coerce a stored or free-form value to one of the twelve age band labels.

    Anything that names no band or year falls back to "2012-present".
    """
    return infer_age_band(value) or "2012-present"


def tier_for_age_band(value: Any) -> VentilationTier:
    """
    Map a property age band label (or a tier name) to its ventilation tier.

    Values that name no tier, band or year get the newest tier.
    """
    tier = _enum_or_none(VentilationTier, value)
    if tier is not None:
        return tier
    band = infer_age_band(value)
    if band is None:
        return FALLBACK_TIER
    return AGE_BAND_TO_TIER[band]


def base_rate_lps(tier: Any, room_type: Any) -> float:
    """
    Base ventilation rate for a tier and room type.

    Unknown tiers use the newest tier's row; unknown room types get 10 L/s.
    """
    tier_key = _enum_or_none(VentilationTier, tier) or FALLBACK_TIER
    room_key = _enum_or_none(RoomType, room_type)
    if room_key is None:
        return FALLBACK_RATE_LPS
    return float(BASE_RATES_LPS[tier_key][room_key])


def device_flow_lps(devices: Iterable[VentDevice]) -> float:
    """Sum of device override flows; devices without an override add 0."""
    return sum(to_non_negative(d.override_flow) for d in devices)


def default_device_flow_lps(device_type: Any) -> float:
    """Display default for a device type, 0 for unknown types."""
    key = _enum_or_none(VentDeviceType, device_type)
    return float(DEFAULT_DEVICE_FLOWS_LPS.get(key, 0)) if key else 0.0


def combine(base_lps: float, device_lps: float, policy: Any = CombinationPolicy.MAX) -> float:
    """Combine base and device flows under the given policy."""
    base = to_non_negative(base_lps)
    device = to_non_negative(device_lps)
    if CombinationPolicy.coerce(policy) is CombinationPolicy.SUM:
        return base + device
    return max(base, device)
