"""
Climate figures derived from monthly temperature normals.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..utils.validation import to_float, to_optional_float

DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

HDD_BASE_TEMP_C = 15.5
DESIGN_SAFETY_MARGIN_C = 2.0
LAPSE_RATE_C_PER_M = 0.0065

# December, January, February
WINTER_MONTHS = (11, 0, 1)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def hdd_from_means(monthly_means: Sequence[float]) -> Optional[int]:
    """
    Heating degree days from twelve monthly mean temperatures.

    Σ max(0, 15.5 - T_month) × days, rounded. Non-numeric months are skipped;
    None if there are no usable months.
    """
    total = 0.0
    used = 0
    for month, days in enumerate(DAYS_IN_MONTH):
        mean = to_optional_float(monthly_means[month]) if month < len(monthly_means) else None
        if mean is None:
            continue
        total += max(0.0, HDD_BASE_TEMP_C - mean) * days
        used += 1
    return round_half_up(total) if used else None


def design_temp_from_winter_minima(
    monthly_minima: Sequence[float],
    altitude_m: Optional[float] = 0.0,
) -> Optional[int]:
    """
    External design temperature from December-February monthly minima.

    Coldest winter minimum, less a 2 °C margin, less 0.0065 °C per metre of
    altitude, rounded to the nearest degree.
    """
    winter = [
        to_optional_float(monthly_minima[i])
        for i in WINTER_MONTHS
        if i < len(monthly_minima)
    ]
    winter = [t for t in winter if t is not None]
    if not winter:
        return None

    design = min(winter) - DESIGN_SAFETY_MARGIN_C - LAPSE_RATE_C_PER_M * to_float(altitude_m)
    return round_half_up(design)
