"""
Postcode -> design temperature and heating degree days.

The resolver runs an ordered list of steps. Each step returns a partial
ClimateResult; fields already filled by an earlier step are never
overwritten, and the pipeline stops as soon as both fields are known.

    LocalTableStep      preloaded reference table (full/outcode/sector/area)
    DegreeDaysStep      geocode + Open-Meteo degree-day normals (HDD)
    MonthlyNormalsStep  geocode + ERA5 monthly normals (design temp, HDD)

A failing or timed-out step is logged and skipped. Fields no step can
determine stay None.
"""

from __future__ import annotations

import asyncio
import csv
import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple, Union

from ..core.config import Settings, settings as default_settings
from . import providers
from .derive import design_temp_from_winter_minima, hdd_from_means
from .postcode import normalise_postcode, parse_lat_lon
from .reference_table import ClimateTable

logger = logging.getLogger(__name__)

LatLonInput = Union[str, Tuple[float, float], None]


@dataclass
class ClimateResult:
    design_temp: Optional[float] = None
    hdd: Optional[float] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    altitude_m: Optional[float] = None
    sources: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.design_temp is not None and self.hdd is not None

    def merge(self, other: "ClimateResult", source: str) -> "ClimateResult":
        """Fill only the fields still missing here; earlier values win."""
        contributed = (self.design_temp is None and other.design_temp is not None) or (
            self.hdd is None and other.hdd is not None
        )
        sources = list(self.sources) + ([source] if contributed else [])
        return ClimateResult(
            design_temp=self.design_temp if self.design_temp is not None else other.design_temp,
            hdd=self.hdd if self.hdd is not None else other.hdd,
            lat=self.lat if self.lat is not None else other.lat,
            lon=self.lon if self.lon is not None else other.lon,
            altitude_m=self.altitude_m if self.altitude_m is not None else other.altitude_m,
            sources=sources,
        )

    def to_dict(self) -> dict:
        return {
            "designTemp": self.design_temp,
            "hdd": self.hdd,
            "lat": self.lat,
            "lon": self.lon,
            "altitudeM": self.altitude_m,
            "sources": list(self.sources),
        }


@dataclass
class ResolveContext:
    """
    Inputs and lookups shared by the steps of one resolve() call.

    Geocoding and elevation are fetched at most once per call and never
    cached across calls.
    """

    postcode: str
    settings: Settings
    lat_lon: Optional[Tuple[float, float]] = None
    altitude_m: Optional[float] = None
    _geo: Optional[providers.GeoPoint] = field(default=None, repr=False)
    _elevation: Optional[float] = field(default=None, repr=False)
    _geo_error: Optional[Exception] = field(default=None, repr=False)

    def location(self) -> providers.GeoPoint:
        """Geocode once per call; a failure is re-raised to every later step."""
        if self._geo_error is not None:
            raise self._geo_error
        if self._geo is None:
            if self.lat_lon is not None:
                self._geo = providers.GeoPoint(self.lat_lon[0], self.lat_lon[1], "lat,lon")
            else:
                try:
                    self._geo = providers.geocode(self.postcode, cfg=self.settings)
                except Exception as e:
                    self._geo_error = e
                    raise
            logger.debug(
                f"Location {self._geo.lat:.4f},{self._geo.lon:.4f} via {self._geo.source}",
                extra={"postcode": self.postcode},
            )
        return self._geo

    def altitude(self) -> float:
        """Explicit altitude, else looked up at the location, else 0 m."""
        if self.altitude_m is not None:
            return self.altitude_m
        if self._elevation is None:
            geo = self.location()
            try:
                self._elevation = providers.fetch_elevation(geo.lat, geo.lon, cfg=self.settings).metres
            except Exception as e:
                logger.warning(f"Elevation lookup failed, assuming sea level: {e}", extra={"postcode": self.postcode})
                self._elevation = 0.0
        return self._elevation


class ClimateStep:
    """
    One source in the resolver pipeline.

    Subclasses implement the blocking lookup(); run() moves it off the
    event loop. Override run() directly for natively async sources.
    """

    name = "step"

    def needed(self, current: ClimateResult) -> bool:
        return not current.complete

    def lookup(self, ctx: ResolveContext, current: ClimateResult) -> ClimateResult:
        raise NotImplementedError

    async def run(self, ctx: ResolveContext, current: ClimateResult) -> ClimateResult:
        return await asyncio.to_thread(self.lookup, ctx, current)


class LocalTableStep(ClimateStep):
    name = "table"

    def __init__(self, table: Optional[ClimateTable]):
        self.table = table

    def lookup(self, ctx: ResolveContext, current: ClimateResult) -> ClimateResult:
        row = self.table.lookup(ctx.postcode) if self.table is not None else None
        if row is None:
            return ClimateResult()
        return ClimateResult(design_temp=row.design_temp, hdd=row.hdd)


class DegreeDaysStep(ClimateStep):
    name = "open-meteo:degree-days"

    def needed(self, current: ClimateResult) -> bool:
        return current.hdd is None

    def lookup(self, ctx: ResolveContext, current: ClimateResult) -> ClimateResult:
        geo = ctx.location()
        hdd = providers.fetch_heating_degree_days(geo.lat, geo.lon, cfg=ctx.settings)
        return ClimateResult(hdd=hdd, lat=geo.lat, lon=geo.lon)


class MonthlyNormalsStep(ClimateStep):
    name = "open-meteo:normals"

    def lookup(self, ctx: ResolveContext, current: ClimateResult) -> ClimateResult:
        geo = ctx.location()
        normals = providers.fetch_monthly_normals(geo.lat, geo.lon, cfg=ctx.settings)
        result = ClimateResult(lat=geo.lat, lon=geo.lon)

        if current.design_temp is None:
            altitude = ctx.altitude()
            result.design_temp = design_temp_from_winter_minima(normals.minimum, altitude)
            result.altitude_m = altitude
        if current.hdd is None:
            result.hdd = hdd_from_means(normals.mean)
        return result


def default_steps(table: Optional[ClimateTable]) -> list[ClimateStep]:
    return [LocalTableStep(table), DegreeDaysStep(), MonthlyNormalsStep()]


class ClimateResolver:
    """
    Best-effort climate lookup for a postcode.

    Holds no per-request state, so one instance may serve concurrent calls.
    Debouncing and discarding superseded results is up to the caller.
    """

    def __init__(
        self,
        table: Optional[ClimateTable] = None,
        steps: Optional[Sequence[ClimateStep]] = None,
        settings: Settings = default_settings,
    ):
        self.settings = settings
        if table is None and settings.climate_table_path is not None:
            try:
                table = ClimateTable.load(settings.climate_table_path)
            except (OSError, ValueError, csv.Error) as e:
                logger.warning(f"Climate table {settings.climate_table_path} unusable, continuing without it: {e}")
        self.table = table
        self.steps = list(steps) if steps is not None else default_steps(table)

    def _context(self, postcode: str, lat_lon: LatLonInput, altitude_m: Optional[float]) -> ResolveContext:
        coords: Optional[Tuple[float, float]]
        if isinstance(lat_lon, str):
            coords = parse_lat_lon(lat_lon)
            if coords is None and lat_lon.strip():
                logger.warning(f"Ignoring invalid lat,lon override: {lat_lon!r}")
        else:
            coords = lat_lon
        return ResolveContext(
            postcode=normalise_postcode(postcode),
            settings=self.settings,
            lat_lon=coords,
            altitude_m=altitude_m,
        )

    async def resolve(
        self,
        postcode: str,
        lat_lon: LatLonInput = None,
        altitude_m: Optional[float] = None,
    ) -> ClimateResult:
        ctx = self._context(postcode, lat_lon, altitude_m)
        result = ClimateResult(altitude_m=altitude_m)
        extra = {"postcode": ctx.postcode}

        for step in self.steps:
            if result.complete:
                break
            if not step.needed(result):
                continue
            try:
                partial = await asyncio.wait_for(step.run(ctx, replace(result)), self.settings.step_timeout_s)
            except asyncio.TimeoutError:
                logger.warning(f"Step {step.name} timed out", extra={**extra, "step": step.name})
                continue
            except Exception as e:
                logger.warning(f"Step {step.name} failed: {e}", extra={**extra, "step": step.name})
                continue

            result = result.merge(partial, step.name)
            logger.debug(
                f"After {step.name}: design_temp={result.design_temp} hdd={result.hdd}",
                extra={**extra, "step": step.name},
            )

        if result.complete:
            logger.info(f"Resolved climate from {', '.join(result.sources)}", extra=extra)
        else:
            logger.info(
                f"Partial climate result: design_temp={result.design_temp} hdd={result.hdd}",
                extra=extra,
            )
        return result

    def resolve_sync(
        self,
        postcode: str,
        lat_lon: LatLonInput = None,
        altitude_m: Optional[float] = None,
    ) -> ClimateResult:
        return asyncio.run(self.resolve(postcode, lat_lon=lat_lon, altitude_m=altitude_m))
