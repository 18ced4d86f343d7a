"""Postcode -> design temperature and heating degree days."""

from .derive import design_temp_from_winter_minima, hdd_from_means
from .postcode import format_postcode, normalise_postcode, parse_lat_lon, postcode_keys
from .providers import (
    ClimateLookupError,
    Elevation,
    GeoPoint,
    MonthlyNormals,
    fetch_elevation,
    fetch_heating_degree_days,
    fetch_monthly_normals,
    geocode,
    geocode_address,
    geocode_postcode,
)
from .reference_table import ClimateRow, ClimateTable
from .resolver import (
    ClimateResolver,
    ClimateResult,
    ClimateStep,
    DegreeDaysStep,
    LocalTableStep,
    MonthlyNormalsStep,
    ResolveContext,
    default_steps,
)

__all__ = [
    "design_temp_from_winter_minima",
    "hdd_from_means",
    "format_postcode",
    "normalise_postcode",
    "parse_lat_lon",
    "postcode_keys",
    "ClimateLookupError",
    "Elevation",
    "GeoPoint",
    "MonthlyNormals",
    "fetch_elevation",
    "fetch_heating_degree_days",
    "fetch_monthly_normals",
    "geocode",
    "geocode_address",
    "geocode_postcode",
    "ClimateRow",
    "ClimateTable",
    "ClimateResolver",
    "ClimateResult",
    "ClimateStep",
    "DegreeDaysStep",
    "LocalTableStep",
    "MonthlyNormalsStep",
    "ResolveContext",
    "default_steps",
]
