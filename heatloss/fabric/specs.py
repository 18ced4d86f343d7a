"""
Fabric descriptions used to resolve a default U-value.

Each element family has its own category vocabulary, mirroring the choices
offered by the building-elements editor. Unknown category strings are kept as
None so the resolver reports "not yet resolvable" rather than guessing.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Optional, Type, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from ..utils.validation import to_non_negative, to_optional_float
from .u_value_tables import FloorConstruction, FrameType, GlazingType

E = TypeVar("E", bound=Enum)


def _lenient(enum_cls: Type[E]):
    """Before-validator turning unknown strings into None instead of an error."""

    def coerce(value: Any) -> Optional[E]:
        if value is None or value == "":
            return None
        if isinstance(value, enum_cls):
            return value
        for member in enum_cls:
            if str(value).strip().lower() == str(member.value).lower():
                return member
        return None

    return BeforeValidator(coerce)


def _optional_non_negative(value: Any) -> Optional[float]:
    number = to_optional_float(value)
    return None if number is None else max(number, 0.0)


OptionalU = Annotated[Optional[float], BeforeValidator(_optional_non_negative)]
Thickness = Annotated[float, BeforeValidator(to_non_negative)]


class WallCategory(str, Enum):
    EXTERNAL = "External"
    INTERNAL = "Internal"
    PARTY = "Party"
    KNOWN_U = "Known U-Value"


class FloorCategory(str, Enum):
    GROUND_UNKNOWN = "ground-unknown"
    GROUND_KNOWN = "ground-known"
    EXPOSED = "exposed"
    INTERNAL = "internal"
    PARTY = "party"
    KNOWN_U = "known-u"


class CeilingCategory(str, Enum):
    EXTERNAL_ROOF = "external-roof"
    INTERNAL = "internal"
    PARTY = "party"
    KNOWN_U = "known-u"


class DoorCategory(str, Enum):
    EXTERNAL = "external"
    INTERNAL = "internal"
    KNOWN_U = "known-u"


class WindowCategory(str, Enum):
    EXTERNAL = "external"
    INTERNAL = "internal"
    KNOWN_U = "known-u"


class _Spec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class InsulationLayer(_Spec):
    """Add-on insulation applied in series with the base construction."""

    thickness_mm: Thickness = 0.0
    material: str = ""


class WallSpec(_Spec):
    category: Annotated[Optional[WallCategory], _lenient(WallCategory)] = WallCategory.EXTERNAL
    age_band: str = Field(default="", alias="ageBand")
    construction: str = ""
    u_value: OptionalU = Field(default=None, alias="uValue")
    insulation: Optional[InsulationLayer] = None
    basement: bool = False
    includes_ground_contact: bool = Field(default=False, alias="knownUGroundContact")


class FloorSpec(_Spec):
    category: Annotated[Optional[FloorCategory], _lenient(FloorCategory)] = FloorCategory.GROUND_KNOWN
    construction: Annotated[Optional[FloorConstruction], _lenient(FloorConstruction)] = (
        FloorConstruction.SUSPENDED
    )
    insulation_thickness_mm: Thickness = Field(default=0.0, alias="insulThk")
    u_value: OptionalU = Field(default=None, alias="uValue")
    includes_ground_contact: bool = Field(default=False, alias="groundContactAdjust")


class CeilingSpec(_Spec):
    category: Annotated[Optional[CeilingCategory], _lenient(CeilingCategory)] = (
        CeilingCategory.EXTERNAL_ROOF
    )
    roof_type: str = Field(default="pitched", alias="roofType")
    insulation_thickness_mm: Thickness = Field(default=0.0, alias="insulThk")
    u_value: OptionalU = Field(default=None, alias="uValue")


class DoorSpec(_Spec):
    category: Annotated[Optional[DoorCategory], _lenient(DoorCategory)] = DoorCategory.EXTERNAL
    age_band: str = Field(default="", alias="ageBand")
    u_value: OptionalU = Field(default=None, alias="uValue")


class WindowSpec(_Spec):
    category: Annotated[Optional[WindowCategory], _lenient(WindowCategory)] = WindowCategory.EXTERNAL
    glazing_type: Annotated[Optional[GlazingType], _lenient(GlazingType)] = Field(
        default=None, alias="glazingType"
    )
    frame_type: Annotated[Optional[FrameType], _lenient(FrameType)] = Field(
        default=None, alias="frameType"
    )
    u_value: OptionalU = Field(default=None, alias="uValue")


FabricSpec = WallSpec | FloorSpec | CeilingSpec | DoorSpec | WindowSpec
