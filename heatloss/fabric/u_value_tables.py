"""
Default U-value reference data (RdSAP-style).

Walls are looked up directly by property age band and construction. Floors
and ceilings use insulation-thickness curves evaluated with piecewise-linear
interpolation. Windows combine a glazing baseline with a frame multiplier.

All tables are module-level constants and are never mutated at runtime.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Sequence


def round2(value: float) -> float:
    """Round half up to 2 dp on the scaled value, so 3.1 x 1.15 gives 3.57."""
    return math.floor(value * 100 + 0.5) / 100


@dataclass(frozen=True)
class UPoint:
    """Control point on an insulation curve: thickness (mm) -> U (W/m²K)."""

    t: float
    u: float


def lerp(points: Sequence[UPoint], t: float) -> Optional[float]:
    """
    Piecewise-linear interpolation over ordered control points.

    Thickness at or below the first point returns the first U, at or above
    the last point the last U; there is no extrapolation. Interior values are
    rounded to 2 dp. An empty curve gives None.
    """
    if not points:
        return None
    if t <= points[0].t:
        return points[0].u
    last = points[-1]
    if t >= last.t:
        return last.u

    for a, b in zip(points, points[1:]):
        if a.t <= t <= b.t:
            x = (t - a.t) / (b.t - a.t)
            return round2(a.u + x * (b.u - a.u))
    return None


def _curve(*pairs: tuple[float, float]) -> tuple[UPoint, ...]:
    return tuple(UPoint(t, u) for t, u in pairs)


# =============================================================================
# WALLS
# =============================================================================


class WallConstruction(str, Enum):
    SOLID_BRICK_OR_STONE = "Solid Brick or Stone"
    CAVITY_UNFILLED = "Cavity (Unfilled)"
    CAVITY_FILLED = "Cavity (Filled)"
    TIMBER_FRAME = "Timber Frame"


PROPERTY_AGE_BANDS: tuple[str, ...] = (
    "pre-1900",
    "1900-1929",
    "1930-1949",
    "1950-1966",
    "1967-1975",
    "1976-1982",
    "1983-1990",
    "1991-1995",
    "1996-2002",
    "2003-2006",
    "2007-2011",
    "2012-present",
)


def _wall_row(solid: float, unfilled: float, filled: float, timber: float) -> Mapping[str, float]:
    return MappingProxyType({
        WallConstruction.SOLID_BRICK_OR_STONE.value: solid,
        WallConstruction.CAVITY_UNFILLED.value: unfilled,
        WallConstruction.CAVITY_FILLED.value: filled,
        WallConstruction.TIMBER_FRAME.value: timber,
    })


# age band -> construction -> U (W/m²K)
WALL_U_BY_AGE: Mapping[str, Mapping[str, float]] = MappingProxyType({
    "pre-1900": _wall_row(2.1, 1.6, 1.2, 1.7),
    "1900-1929": _wall_row(2.1, 1.6, 1.2, 1.7),
    "1930-1949": _wall_row(2.0, 1.6, 1.2, 1.6),
    "1950-1966": _wall_row(1.9, 1.5, 0.9, 1.5),
    "1967-1975": _wall_row(1.7, 1.4, 0.8, 1.3),
    "1976-1982": _wall_row(1.5, 1.1, 0.6, 0.8),
    "1983-1990": _wall_row(1.3, 0.9, 0.55, 0.6),
    "1991-1995": _wall_row(0.8, 0.7, 0.45, 0.45),
    "1996-2002": _wall_row(0.6, 0.5, 0.35, 0.35),
    "2003-2006": _wall_row(0.45, 0.4, 0.3, 0.3),
    "2007-2011": _wall_row(0.35, 0.3, 0.27, 0.27),
    "2012-present": _wall_row(0.3, 0.28, 0.25, 0.22),
})

# Thermal conductivity of add-on insulation layers (W/mK)
INSULATION_LAMBDA: Mapping[str, float] = MappingProxyType({
    "EPS (white)": 0.038,
    "EPS (graphite)": 0.031,
    "XPS": 0.034,
    "Mineral Wool": 0.036,
    "Wood Fibre": 0.043,
})


def wall_base_u(age_band: str, construction: str) -> Optional[float]:
    """Direct era x construction lookup; None when either key is unknown."""
    return WALL_U_BY_AGE.get(age_band, {}).get(construction)


def wall_lookup_rows() -> list[tuple[str, str, float]]:
    """Flatten the wall table to (age band, construction, U) rows."""
    return [
        (age_band, construction, u)
        for age_band in PROPERTY_AGE_BANDS
        for construction, u in WALL_U_BY_AGE[age_band].items()
    ]


# =============================================================================
# FLOORS
# =============================================================================


class FloorExposure(str, Enum):
    GROUND = "ground"
    EXPOSED = "exposed"
    INTERNAL = "internal"


class FloorConstruction(str, Enum):
    SOLID = "solid"
    SUSPENDED = "suspended"


FLOOR_U_CURVES: Mapping[FloorExposure, Mapping[FloorConstruction, tuple[UPoint, ...]]] = MappingProxyType({
    FloorExposure.GROUND: MappingProxyType({
        FloorConstruction.SOLID: _curve((0, 1.3), (50, 0.45), (100, 0.25)),
        FloorConstruction.SUSPENDED: _curve((0, 1.6), (50, 0.55), (100, 0.3)),
    }),
    FloorExposure.EXPOSED: MappingProxyType({
        FloorConstruction.SOLID: _curve((0, 1.8), (50, 0.6), (100, 0.35)),
        FloorConstruction.SUSPENDED: _curve((0, 2.0), (50, 0.7), (100, 0.4)),
    }),
    FloorExposure.INTERNAL: MappingProxyType({
        FloorConstruction.SOLID: _curve((0, 0.0)),
        FloorConstruction.SUSPENDED: _curve((0, 0.0)),
    }),
})


# =============================================================================
# CEILINGS / ROOFS
# =============================================================================

# Joist-level loft insulation, RdSAP10 Table 16 column 1
CEILING_U_CURVE: tuple[UPoint, ...] = _curve(
    (0, 2.3),
    (12, 1.5),
    (25, 1.0),
    (50, 0.68),
    (75, 0.5),
    (100, 0.4),
    (125, 0.35),
    (150, 0.3),
    (175, 0.25),
    (200, 0.21),
    (225, 0.19),
    (250, 0.17),
    (270, 0.16),
    (300, 0.14),
    (350, 0.12),
    (400, 0.11),
)


# =============================================================================
# WINDOWS / OPENINGS
# =============================================================================


class GlazingType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"


class FrameType(str, Enum):
    UPVC = "uPVC"
    TIMBER = "timber"
    ALUMINIUM = "aluminium"


# Whole-window baseline, RdSAP10 Table 25
WINDOW_U_DEFAULTS: Mapping[GlazingType, float] = MappingProxyType({
    GlazingType.SINGLE: 4.8,
    GlazingType.DOUBLE: 3.1,   # 6 mm gap
    GlazingType.TRIPLE: 2.4,   # 6 mm gaps
})

WINDOW_FRAME_MULTIPLIER: Mapping[FrameType, float] = MappingProxyType({
    FrameType.UPVC: 1.0,
    FrameType.TIMBER: 1.05,
    FrameType.ALUMINIUM: 1.15,
})

# Used by the aggregator when an opening has no declared U
DEFAULT_OPENING_U: Mapping[str, float] = MappingProxyType({
    "window": 1.3,
    "roof_window": 1.4,
    "door": 1.8,
})


# =============================================================================
# GROUND CONTACT
# =============================================================================

GROUND_CONTACT_UPLIFT: Mapping[str, float] = MappingProxyType({
    "wall": 0.15,   # basement wall
    "floor": 0.10,  # solid ground floor
})
