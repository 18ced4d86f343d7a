"""Heat-loss aggregation and ventilation."""

from .aggregator import (
    ADJACENCY_FACTORS,
    BuildingLossSummary,
    RoomInput,
    RoomLossBreakdown,
    adj_factor,
    compute_building_loss,
    compute_room_loss,
    delta_t,
    element_u,
    opening_u,
)
from .room_defaults import DefaultsBand, default_ach, default_design_temp, room_type_options
from .ventilation import (
    BASE_RATES_LPS,
    DEFAULT_DEVICE_FLOWS_LPS,
    CombinationPolicy,
    RoomType,
    VentilationTier,
    age_band_for_year,
    base_rate_lps,
    coerce_property_age_band,
    combine,
    default_device_flow_lps,
    device_flow_lps,
    extract_age_band,
    infer_age_band,
    tier_for_age_band,
)

__all__ = [
    "ADJACENCY_FACTORS",
    "BuildingLossSummary",
    "RoomInput",
    "RoomLossBreakdown",
    "adj_factor",
    "compute_building_loss",
    "compute_room_loss",
    "delta_t",
    "element_u",
    "opening_u",
    "DefaultsBand",
    "default_ach",
    "default_design_temp",
    "room_type_options",
    "BASE_RATES_LPS",
    "DEFAULT_DEVICE_FLOWS_LPS",
    "CombinationPolicy",
    "RoomType",
    "VentilationTier",
    "age_band_for_year",
    "base_rate_lps",
    "coerce_property_age_band",
    "combine",
    "default_device_flow_lps",
    "device_flow_lps",
    "extract_age_band",
    "infer_age_band",
    "tier_for_age_band",
]
