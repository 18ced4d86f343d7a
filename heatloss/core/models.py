"""
Pydantic models for room geometry and fabric.

A room is described by its dimensions plus ordered lists of envelope elements
(walls, floors, ceilings) and ventilation devices. All dimensions are coerced
to finite non-negative floats on construction, so downstream area and loss
arithmetic never sees NaN, strings or negative widths.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from ..fabric.specs import CeilingSpec, DoorSpec, FloorSpec, WallSpec, WindowSpec
from ..utils.validation import to_non_negative, to_optional_float


# =============================================================================
# ENUMS
# =============================================================================


class Adjacent(str, Enum):
    """What lies on the far side of an envelope element."""

    EXTERIOR = "Exterior"
    INTERIOR_HEATED = "Interior (Heated)"
    INTERIOR_UNHEATED = "Interior (Unheated)"
    GROUND = "Ground"

    @classmethod
    def coerce(cls, value: Any) -> "Adjacent":
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).strip().lower() == member.value.lower():
                return member
        return cls.EXTERIOR


class Orientation(str, Enum):
    N = "N"
    NE = "NE"
    E = "E"
    SE = "SE"
    S = "S"
    SW = "SW"
    W = "W"
    NW = "NW"


class OpeningKind(str, Enum):
    WINDOW = "window"
    DOOR = "door"
    ROOF_WINDOW = "roof_window"


class CeilingType(str, Enum):
    CEILING = "Ceiling"
    ROOF = "Roof"


class VentDeviceType(str, Enum):
    TRICKLE_VENT = "trickle_vent"
    MVHR_SUPPLY = "mvhr_supply"
    MVHR_EXTRACT = "mvhr_extract"
    MECHANICAL_EXTRACT = "mechanical_extract"
    PASSIVE_VENT = "passive_vent"


# =============================================================================
# COERCED FIELD TYPES
# =============================================================================


def _optional_non_negative(value: Any) -> Optional[float]:
    number = to_optional_float(value)
    return None if number is None else max(number, 0.0)


def _ceiling_adjacent(value: Any) -> Adjacent:
    adjacent = Adjacent.coerce(value)
    return Adjacent.EXTERIOR if adjacent is Adjacent.GROUND else adjacent


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


Dimension = Annotated[float, BeforeValidator(to_non_negative)]
UValue = Annotated[Optional[float], BeforeValidator(_optional_non_negative)]
Flow = Annotated[Optional[float], BeforeValidator(_optional_non_negative)]
OptionalNumber = Annotated[Optional[float], BeforeValidator(to_optional_float)]
AdjacentField = Annotated[Adjacent, BeforeValidator(Adjacent.coerce)]
CeilingAdjacentField = Annotated[Adjacent, BeforeValidator(_ceiling_adjacent)]


class _ElementBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=_new_id)
    width: Dimension = 0.0
    height: Dimension = 0.0
    u_value: UValue = Field(default=None, alias="uValue", description="Declared U-value (W/m²K)")

    @property
    def gross_area(self) -> float:
        return max(self.width * self.height, 0.0)


# =============================================================================
# ENVELOPE
# =============================================================================


class Opening(_ElementBase):
    """Window, door or roof window set into a wall or ceiling."""

    kind: OpeningKind = OpeningKind.WINDOW
    fabric: Optional[WindowSpec | DoorSpec] = None

    @model_validator(mode="before")
    @classmethod
    def _fabric_for_kind(cls, data: Any) -> Any:
        # Door and window specs share field names; pick by opening kind
        if isinstance(data, dict) and isinstance(data.get("fabric"), dict):
            spec_cls = DoorSpec if data.get("kind") == OpeningKind.DOOR else WindowSpec
            data = {**data, "fabric": spec_cls.model_validate(data["fabric"])}
        return data

    @property
    def area(self) -> float:
        return self.gross_area


class _OpeningHost(_ElementBase):
    openings: list[Opening] = Field(default_factory=list)

    @property
    def openings_area(self) -> float:
        return sum(o.area for o in self.openings)

    @property
    def net_area(self) -> float:
        """Gross area less openings, never negative."""
        return max(self.gross_area - self.openings_area, 0.0)


class Wall(_OpeningHost):
    name: str = "Wall"
    orientation: Optional[Orientation] = None
    adjacent: AdjacentField = Adjacent.EXTERIOR
    fabric: Optional[WallSpec] = None


class FloorElement(_ElementBase):
    name: str = "Floor"
    adjacent: AdjacentField = Adjacent.GROUND
    fabric: Optional[FloorSpec] = None

    @property
    def net_area(self) -> float:
        return self.gross_area


class CeilingElement(_OpeningHost):
    name: str = "Ceiling"
    type: CeilingType = CeilingType.CEILING
    adjacent: CeilingAdjacentField = Adjacent.EXTERIOR
    fabric: Optional[CeilingSpec] = None


# =============================================================================
# VENTILATION
# =============================================================================


class VentDevice(BaseModel):
    """Ventilation device; only an explicit override flow feeds the loss calc."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=_new_id)
    type: VentDeviceType = VentDeviceType.TRICKLE_VENT
    override_flow: Flow = Field(
        default=None, alias="overrideFlow", description="Override flow (L/s)"
    )
    notes: str = ""


# =============================================================================
# ROOM
# =============================================================================


class RoomModel(BaseModel):
    """One heated room."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Optional[str] = None
    zone_id: Optional[str] = Field(default=None, alias="zoneId")
    name: str = "Room"
    length: Dimension = 0.0
    width: Dimension = 0.0
    height: Dimension = 0.0
    volume_override: OptionalNumber = Field(default=None, alias="volumeOverride")
    walls: list[Wall] = Field(default_factory=list)
    floors: list[FloorElement] = Field(default_factory=list)
    ceilings: list[CeilingElement] = Field(default_factory=list)
    ventilation: list[VentDevice] = Field(default_factory=list)

    @property
    def geometric_volume(self) -> float:
        return self.length * self.width * self.height

    def volume(self, fallback: Any = None) -> float:
        """
        Volume used for air-change maths.

        The room's own override wins, then a caller-supplied volume, then
        length x width x height. Only finite numbers count.
        """
        if self.volume_override is not None:
            return self.volume_override
        supplied = to_optional_float(fallback)
        if supplied is not None:
            return supplied
        return self.geometric_volume
