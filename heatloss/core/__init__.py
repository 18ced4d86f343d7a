"""Core models and configuration."""

from .config import Settings, settings
from .models import (
    Adjacent,
    CeilingElement,
    CeilingType,
    FloorElement,
    Opening,
    OpeningKind,
    Orientation,
    RoomModel,
    VentDevice,
    VentDeviceType,
    Wall,
)

__all__ = [
    "Settings",
    "settings",
    "Adjacent",
    "CeilingElement",
    "CeilingType",
    "FloorElement",
    "Opening",
    "OpeningKind",
    "Orientation",
    "RoomModel",
    "VentDevice",
    "VentDeviceType",
    "Wall",
]
