"""Fabric U-value tables and resolution."""

from .specs import (
    CeilingCategory,
    CeilingSpec,
    DoorCategory,
    DoorSpec,
    FloorCategory,
    FloorSpec,
    InsulationLayer,
    WallCategory,
    WallSpec,
    WindowCategory,
    WindowSpec,
)
from .u_value_resolver import (
    GroundCorrection,
    UValueResolver,
    add_insulation_layer,
    default_resolver,
    equivalent_u_without_geometry,
)
from .u_value_tables import (
    DEFAULT_OPENING_U,
    FloorConstruction,
    FloorExposure,
    FrameType,
    GlazingType,
    UPoint,
    WallConstruction,
    lerp,
    wall_lookup_rows,
)

__all__ = [
    "CeilingCategory",
    "CeilingSpec",
    "DoorCategory",
    "DoorSpec",
    "FloorCategory",
    "FloorSpec",
    "InsulationLayer",
    "WallCategory",
    "WallSpec",
    "WindowCategory",
    "WindowSpec",
    "GroundCorrection",
    "UValueResolver",
    "add_insulation_layer",
    "default_resolver",
    "equivalent_u_without_geometry",
    "DEFAULT_OPENING_U",
    "FloorConstruction",
    "FloorExposure",
    "FrameType",
    "GlazingType",
    "UPoint",
    "WallConstruction",
    "lerp",
    "wall_lookup_rows",
]
