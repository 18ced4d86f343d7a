"""
Recommended internal design temperatures and air-change rates per room.

Values follow the CIBSE Domestic Heating Design Guide tables. Design
temperatures have two columns (age bands A-J and K onwards); air-change rates
have three (A-I, J, K onwards).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class DefaultsBand(str, Enum):
    A_I = "A_I"
    J = "J"
    K_ONWARDS = "K_ONWARDS"


@dataclass(frozen=True)
class RoomDefaults:
    design_temp_a_j: float
    design_temp_k_onwards: float
    ach_a_i: float
    ach_j: float
    ach_k_onwards: float


ROOM_DEFAULTS: Mapping[str, RoomDefaults] = MappingProxyType({
    "Bathroom": RoomDefaults(22, 22, 3.0, 1.5, 0.5),
    "Bedroom": RoomDefaults(18, 21, 1.0, 1.0, 0.5),
    "Bedroom with en-suite": RoomDefaults(21, 21, 2.0, 1.5, 1.0),
    "Bedroom/study": RoomDefaults(21, 21, 1.5, 1.5, 0.5),
    "Breakfast room": RoomDefaults(21, 21, 1.5, 1.0, 0.5),
    "Cloakroom/WC": RoomDefaults(18, 21, 2.0, 1.5, 1.5),
    "Dining room": RoomDefaults(21, 21, 1.5, 1.0, 0.5),
    "Dressing room": RoomDefaults(18, 21, 1.5, 1.0, 0.5),
    "Family/breakfast room": RoomDefaults(21, 21, 2.0, 1.5, 0.5),
    "Games room": RoomDefaults(21, 21, 1.5, 1.0, 0.5),
    "Hall": RoomDefaults(18, 21, 2.0, 1.0, 0.5),
    "Internal room/corridor": RoomDefaults(18, 21, 0.0, 0.0, 0.0),
    "Kitchen": RoomDefaults(18, 21, 2.0, 1.5, 0.5),
    "Landing": RoomDefaults(18, 21, 2.0, 1.0, 0.5),
    "Lounge/sitting room": RoomDefaults(21, 21, 1.5, 1.0, 0.5),
    "Living room": RoomDefaults(21, 21, 1.5, 1.0, 0.5),
    "Shower room": RoomDefaults(22, 22, 3.0, 1.5, 0.5),
    "Store room": RoomDefaults(18, 21, 1.0, 0.5, 0.5),
    "Study": RoomDefaults(21, 21, 1.5, 1.5, 0.5),
    "Toilet": RoomDefaults(18, 21, 3.0, 1.5, 1.5),
    "Utility room": RoomDefaults(18, 21, 3.0, 2.0, 0.5),
})

# Shown in the room picker without defaults
EXTRA_ROOM_TYPES = ("Garage", "Porch", "Other")


def _lookup(room_label: str) -> Optional[RoomDefaults]:
    label = (room_label or "").strip()
    if label in ROOM_DEFAULTS:
        return ROOM_DEFAULTS[label]
    lowered = label.lower()
    for name, defaults in ROOM_DEFAULTS.items():
        if name.lower() == lowered:
            return defaults
    return None


def default_design_temp(room_label: str, band: DefaultsBand | str = DefaultsBand.A_I) -> Optional[float]:
    """Recommended indoor design temperature (°C), None for unlisted rooms."""
    defaults = _lookup(room_label)
    if defaults is None:
        return None
    if DefaultsBand(band) is DefaultsBand.K_ONWARDS:
        return defaults.design_temp_k_onwards
    return defaults.design_temp_a_j


def default_ach(room_label: str, band: DefaultsBand | str = DefaultsBand.A_I) -> Optional[float]:
    """Recommended air changes per hour, None for unlisted rooms."""
    defaults = _lookup(room_label)
    if defaults is None:
        return None
    band = DefaultsBand(band)
    if band is DefaultsBand.K_ONWARDS:
        return defaults.ach_k_onwards
    if band is DefaultsBand.J:
        return defaults.ach_j
    return defaults.ach_a_i


def room_type_options() -> list[str]:
    return [*ROOM_DEFAULTS, *EXTRA_ROOM_TYPES]
