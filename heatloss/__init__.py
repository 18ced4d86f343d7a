"""
heatloss - room-by-room design heat loss for UK dwellings.

Fabric U-values from RdSAP-style defaults, adjacency-weighted transmission
loss, ventilation loss from Part F style flow rates, and a best-effort
postcode climate resolver.
"""

__version__ = "0.1.0"

from .core.config import Settings, settings
from .core.models import RoomModel
from .fabric.u_value_resolver import UValueResolver
from .heat.aggregator import (
    BuildingLossSummary,
    RoomInput,
    RoomLossBreakdown,
    compute_building_loss,
    compute_room_loss,
)
from .heat.ventilation import CombinationPolicy
from .climate.resolver import ClimateResolver, ClimateResult

__all__ = [
    "__version__",
    "Settings",
    "settings",
    "RoomModel",
    "UValueResolver",
    "BuildingLossSummary",
    "RoomInput",
    "RoomLossBreakdown",
    "compute_building_loss",
    "compute_room_loss",
    "CombinationPolicy",
    "ClimateResolver",
    "ClimateResult",
]
