"""
Room-by-room steady-state design heat loss.

Q_fabric = Σ U × A_net × ΔT × f_adj      (walls, floors, ceilings, openings)
Q_vent   = 0.33 × V̇(m³/h) × ΔT

0.33 Wh/m³K is the volumetric heat capacity of air. Openings take the
adjacency of the wall or ceiling they sit in. The calculation is a pure
function of its inputs: no I/O, no caching, no shared state.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..core.models import (
    Adjacent,
    CeilingElement,
    FloorElement,
    Opening,
    RoomModel,
    Wall,
)
from ..fabric.u_value_resolver import UValueResolver, default_resolver
from ..fabric.u_value_tables import DEFAULT_OPENING_U
from ..utils.validation import to_float
from .ventilation import (
    CombinationPolicy,
    RoomType,
    VentilationTier,
    base_rate_lps,
    combine,
    device_flow_lps,
    tier_for_age_band,
)

logger = logging.getLogger(__name__)

AIR_HEAT_CAPACITY_WH_M3K = 0.33
LPS_TO_M3H = 3.6

ADJACENCY_FACTORS: Mapping[Adjacent, float] = MappingProxyType({
    Adjacent.EXTERIOR: 1.0,
    Adjacent.GROUND: 1.0,
    Adjacent.INTERIOR_HEATED: 0.0,
    # Unheated space assumed to sit midway between indoor and outdoor
    Adjacent.INTERIOR_UNHEATED: 0.5,
})


@dataclass(frozen=True)
class RoomLossBreakdown:
    """Heat loss of one room. Watts unless the name says otherwise."""

    q_transmission_w: float
    q_vent_w: float
    q_total_w: float
    q_walls_w: float
    q_floors_w: float
    q_ceilings_w: float
    q_openings_w: float
    ach: float
    flow_m3h: float
    flow_base_lps: float
    flow_devices_lps: float

    def to_dict(self) -> dict[str, float]:
        """Editor-facing keys (camelCase with unit suffixes)."""
        return {
            "qTransmission_W": self.q_transmission_w,
            "qVent_W": self.q_vent_w,
            "qTotal_W": self.q_total_w,
            "qWalls_W": self.q_walls_w,
            "qFloors_W": self.q_floors_w,
            "qCeilings_W": self.q_ceilings_w,
            "qOpenings_W": self.q_openings_w,
            "ach": self.ach,
            "flow_m3h": self.flow_m3h,
            "flowBase_lps": self.flow_base_lps,
            "flowDevices_lps": self.flow_devices_lps,
        }


def delta_t(indoor_c: Any, outdoor_c: Any) -> float:
    """Indoor minus outdoor design temperature; non-numbers count as 0."""
    return to_float(indoor_c) - to_float(outdoor_c)


def adj_factor(adjacent: Any) -> float:
    return ADJACENCY_FACTORS[Adjacent.coerce(adjacent)]


def element_u(
    element: Wall | FloorElement | CeilingElement,
    resolver: UValueResolver = default_resolver,
) -> Optional[float]:
    """Declared U wins; otherwise resolve from the element's fabric description."""
    if element.u_value is not None:
        return element.u_value
    return resolver.resolve(element.fabric)


def opening_u(opening: Opening, resolver: UValueResolver = default_resolver) -> float:
    """Declared U, then the resolved fabric U, then the default for its kind."""
    if opening.u_value is not None:
        return opening.u_value
    resolved = resolver.resolve(opening.fabric)
    if resolved is not None:
        return resolved
    return DEFAULT_OPENING_U[opening.kind.value]


def _openings_loss(
    openings: Iterable[Opening],
    delta: float,
    factor: float,
    resolver: UValueResolver,
) -> float:
    return sum(opening_u(o, resolver) * o.area * delta * factor for o in openings)


def compute_room_loss(
    room: RoomModel,
    indoor_c: Any,
    outdoor_c: Any,
    volume_m3: Any = None,
    age_band: Any = VentilationTier.Y2021_PLUS,
    room_type: Any = RoomType.HABITABLE,
    policy: Any = CombinationPolicy.MAX,
    resolver: UValueResolver = default_resolver,
) -> RoomLossBreakdown:
    """
    Compute the fabric and ventilation loss of one room.

    Args:
        room: Room geometry, fabric and ventilation devices
        indoor_c: Indoor design temperature (°C)
        outdoor_c: External design temperature (°C)
        volume_m3: Volume used when the room has no override of its own
        age_band: Ventilation tier or property age band label
        room_type: Room type for the base ventilation rate
        policy: "max" or "sum"; anything else behaves as "max"
        resolver: U-value resolver for elements without a declared U

    Returns:
        RoomLossBreakdown with totals, per-category subtotals and flows
    """
    delta = delta_t(indoor_c, outdoor_c)
    # Fabric loss is a design-day quantity; a warmer outside gives no fabric term
    fabric_delta = max(delta, 0.0)

    q_walls = q_floors = q_ceilings = q_openings = 0.0

    for wall in room.walls:
        factor = adj_factor(wall.adjacent)
        u = element_u(wall, resolver)
        if u is not None:
            q_walls += u * wall.net_area * fabric_delta * factor
        q_openings += _openings_loss(wall.openings, fabric_delta, factor, resolver)

    for floor in room.floors:
        u = element_u(floor, resolver)
        if u is not None:
            q_floors += u * floor.gross_area * fabric_delta * adj_factor(floor.adjacent)

    for ceiling in room.ceilings:
        factor = adj_factor(ceiling.adjacent)
        u = element_u(ceiling, resolver)
        if u is not None:
            q_ceilings += u * ceiling.net_area * fabric_delta * factor
        q_openings += _openings_loss(ceiling.openings, fabric_delta, factor, resolver)

    q_transmission = q_walls + q_floors + q_ceilings + q_openings

    base_lps = base_rate_lps(tier_for_age_band(age_band), room_type)
    devices_lps = device_flow_lps(room.ventilation)
    effective_lps = combine(base_lps, devices_lps, policy)

    flow_m3h = effective_lps * LPS_TO_M3H
    q_vent = AIR_HEAT_CAPACITY_WH_M3K * flow_m3h * delta
    volume = room.volume(volume_m3)
    ach = flow_m3h / volume if volume > 0 else 0.0

    logger.debug(
        f"{room.name}: fabric={q_transmission:.1f} W, vent={q_vent:.1f} W, "
        f"flow={effective_lps:.1f} L/s"
    )

    return RoomLossBreakdown(
        q_transmission_w=q_transmission,
        q_vent_w=q_vent,
        q_total_w=q_transmission + q_vent,
        q_walls_w=q_walls,
        q_floors_w=q_floors,
        q_ceilings_w=q_ceilings,
        q_openings_w=q_openings,
        ach=ach,
        flow_m3h=flow_m3h,
        flow_base_lps=base_lps,
        flow_devices_lps=devices_lps,
    )


# =============================================================================
# WHOLE DWELLING
# =============================================================================


@dataclass(frozen=True)
class RoomInput:
    """One room plus the per-room parameters of the loss calculation."""

    room: RoomModel
    indoor_c: float
    room_type: Any = RoomType.HABITABLE
    volume_m3: Optional[float] = None


@dataclass(frozen=True)
class BuildingLossSummary:
    rooms: dict[str, RoomLossBreakdown] = field(default_factory=dict)
    q_transmission_w: float = 0.0
    q_vent_w: float = 0.0
    q_total_w: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["rooms"] = {name: b.to_dict() for name, b in self.rooms.items()}
        return data


def compute_building_loss(
    rooms: Iterable[RoomInput],
    outdoor_c: Any,
    age_band: Any = VentilationTier.Y2021_PLUS,
    policy: Any = CombinationPolicy.MAX,
    resolver: UValueResolver = default_resolver,
) -> BuildingLossSummary:
    """
    Sum room losses for a whole dwelling.

    Rooms are keyed by name; a repeated name gets a numeric suffix.
    """
    breakdowns: dict[str, RoomLossBreakdown] = {}
    for item in rooms:
        breakdown = compute_room_loss(
            item.room,
            item.indoor_c,
            outdoor_c,
            volume_m3=item.volume_m3,
            age_band=age_band,
            room_type=item.room_type,
            policy=policy,
            resolver=resolver,
        )
        key = item.room.name
        suffix = 2
        while key in breakdowns:
            key = f"{item.room.name} ({suffix})"
            suffix += 1
        breakdowns[key] = breakdown

    q_transmission = sum(b.q_transmission_w for b in breakdowns.values())
    q_vent = sum(b.q_vent_w for b in breakdowns.values())
    return BuildingLossSummary(
        rooms=breakdowns,
        q_transmission_w=q_transmission,
        q_vent_w=q_vent,
        q_total_w=q_transmission + q_vent,
    )
