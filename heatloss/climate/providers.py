"""
HTTP clients for geocoding, elevation and climate normals.

All calls are blocking (requests) and retried at most ``settings.http_retries``
times. A service that answers but has no usable data raises
ClimateLookupError; transport errors propagate as requests exceptions. The
resolver catches both and moves on to its next source.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

from ..core.config import Settings, settings as default_settings
from ..utils.retry import RetryConfig, RetryableRequest
from ..utils.validation import to_optional_float
from .derive import HDD_BASE_TEMP_C, round_half_up

logger = logging.getLogger(__name__)


class ClimateLookupError(RuntimeError):
    """An external service responded without a usable result."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float
    source: str


@dataclass(frozen=True)
class Elevation:
    metres: float
    provider: str


@dataclass(frozen=True)
class MonthlyNormals:
    """Twelve monthly mean and minimum temperatures (°C), January first."""

    mean: list[float]
    minimum: list[float]


def _http(cfg: Settings) -> RetryableRequest:
    return RetryableRequest(
        RetryConfig(max_retries=cfg.http_retries),
        timeout=cfg.http_timeout_s,
        headers={"User-Agent": cfg.user_agent, "Accept-Language": "en-GB"},
    )


def _json(response: Any, provider: str) -> Any:
    if response.status_code != 200:
        raise ClimateLookupError(f"{provider} HTTP {response.status_code}", provider)
    return response.json()


def geocode_postcode(postcode: str, cfg: Settings = default_settings) -> GeoPoint:
    """Postcode centroid from postcodes.io."""
    with _http(cfg) as http:
        response = http.get(f"{cfg.postcodes_io_url}/{quote(postcode)}")
    data = _json(response, "postcodes.io")

    result = data.get("result") if isinstance(data, dict) else None
    if data.get("status") != 200 or not result:
        raise ClimateLookupError(f"Postcode not found: {postcode}", "postcodes.io")

    lat = to_optional_float(result.get("latitude"))
    lon = to_optional_float(result.get("longitude"))
    if lat is None or lon is None:
        raise ClimateLookupError(f"Postcode has no coordinates: {postcode}", "postcodes.io")
    return GeoPoint(lat, lon, "postcodes.io")


def geocode_address(query: str, cfg: Settings = default_settings) -> GeoPoint:
    """Free-text search via Nominatim (first hit)."""
    params = {"q": query, "format": "json", "limit": 1, "countrycodes": "gb"}
    with _http(cfg) as http:
        response = http.get(cfg.nominatim_url, params=params)
    results = _json(response, "nominatim")

    if not results:
        raise ClimateLookupError(f"Address not found: {query}", "nominatim")

    lat = to_optional_float(results[0].get("lat"))
    lon = to_optional_float(results[0].get("lon"))
    if lat is None or lon is None:
        raise ClimateLookupError(f"Address has no coordinates: {query}", "nominatim")
    return GeoPoint(lat, lon, "nominatim")


def fetch_heating_degree_days(lat: float, lon: float, cfg: Settings = default_settings) -> int:
    """Mean annual heating degree days (base 15.5 °C) over the normals window."""
    params = {
        "latitude": lat,
        "longitude": lon,
        "start_year": cfg.normals_start_year,
        "end_year": cfg.normals_end_year,
        "base_temperature": HDD_BASE_TEMP_C,
        "degree_day_type": "heating",
    }
    with _http(cfg) as http:
        response = http.get(cfg.open_meteo_degree_days_url, params=params)
    data = _json(response, "open-meteo")

    values = [
        to_optional_float(item.get("heating_degree_days"))
        for item in (data.get("data") or [])
        if isinstance(item, dict)
    ]
    values = [v for v in values if v is not None]
    if not values:
        raise ClimateLookupError("Degree-day series empty", "open-meteo")
    return round_half_up(sum(values) / len(values))


def fetch_monthly_normals(lat: float, lon: float, cfg: Settings = default_settings) -> MonthlyNormals:
    """ERA5 monthly mean and minimum 2 m temperatures."""
    params = {
        "latitude": lat,
        "longitude": lon,
        "start_year": cfg.normals_start_year,
        "end_year": cfg.normals_end_year,
        "models": "ERA5",
        "monthly": "temperature_2m_mean,temperature_2m_min",
    }
    with _http(cfg) as http:
        response = http.get(cfg.open_meteo_climate_url, params=params)
    data = _json(response, "open-meteo")

    monthly = data.get("monthly") or {}
    mean = monthly.get("temperature_2m_mean") or []
    minimum = monthly.get("temperature_2m_min") or []
    if len(mean) < 12 or len(minimum) < 12:
        raise ClimateLookupError("Monthly normals incomplete", "open-meteo")
    return MonthlyNormals(mean=list(mean[:12]), minimum=list(minimum[:12]))


def _elevation_from(url: str, provider: str, lat: float, lon: float, cfg: Settings) -> Elevation:
    with _http(cfg) as http:
        response = http.get(url, params={"locations": f"{lat},{lon}"})
    data = _json(response, provider)

    results = data.get("results") or []
    metres = to_optional_float(results[0].get("elevation")) if results else None
    if metres is None:
        raise ClimateLookupError("No elevation result", provider)
    return Elevation(metres, provider)


def fetch_elevation(lat: float, lon: float, cfg: Settings = default_settings) -> Elevation:
    """Ground elevation from Open-Elevation, falling back to OpenTopoData EU-DEM."""
    try:
        return _elevation_from(cfg.open_elevation_url, "open-elevation", lat, lon, cfg)
    except Exception as e:
        logger.debug(f"Open-Elevation failed ({e}), trying OpenTopoData")
    return _elevation_from(cfg.opentopodata_url, "opentopodata:eudem25m", lat, lon, cfg)


def geocode(
    postcode: str,
    address: Optional[str] = None,
    cfg: Settings = default_settings,
) -> GeoPoint:
    """
    Geocode a postcode, falling back to a general address search.

    A full postcode goes to postcodes.io first, then Nominatim; otherwise the
    address (or raw postcode text) is searched directly.
    """
    from .postcode import format_postcode

    formatted = format_postcode(postcode)
    if formatted:
        try:
            return geocode_postcode(formatted, cfg)
        except Exception as e:
            logger.info(f"postcodes.io failed for {formatted}: {e}", extra={"provider": "postcodes.io"})
        return geocode_address(formatted, cfg)

    query = (address or postcode or "").strip()
    if len(query) < 4:
        raise ClimateLookupError("Enter a postcode or address", "geocode")
    return geocode_address(query, cfg)
