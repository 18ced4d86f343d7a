"""
Tests for postcode handling, the climate reference table, derived climate
figures, the HTTP providers and the resolver pipeline.

Run with: pytest tests/test_climate.py -v
"""

import asyncio
import json
import logging
from unittest.mock import Mock, patch

import pytest
import requests

from heatloss.climate import (
    ClimateLookupError,
    ClimateResolver,
    ClimateResult,
    ClimateStep,
    ClimateTable,
    Elevation,
    GeoPoint,
    LocalTableStep,
    MonthlyNormals,
    design_temp_from_winter_minima,
    fetch_elevation,
    fetch_heating_degree_days,
    fetch_monthly_normals,
    format_postcode,
    geocode,
    geocode_postcode,
    hdd_from_means,
    normalise_postcode,
    parse_lat_lon,
    postcode_keys,
)
from heatloss.core.config import Settings


def _response(payload, status_code=200):
    response = Mock(status_code=status_code)
    response.json.return_value = payload
    return response


def _normals(minimum=-1.0, mean=5.5) -> MonthlyNormals:
    minima = [3.0] * 12
    minima[0] = minimum
    return MonthlyNormals(mean=[mean] * 12, minimum=minima)


# =============================================================================
# POSTCODES
# =============================================================================


class TestPostcodes:
    """Tests for postcode normalisation and key derivation."""

    def test_normalise(self):
        assert normalise_postcode(" ss8 9hb ") == "SS89HB"
        assert normalise_postcode(None) == ""

    def test_full_postcode_keys(self):
        """Full, outcode, sector, area in that order."""
        assert postcode_keys("SS8 9HB") == ["SS89HB", "SS8", "SS89", "SS"]
        assert postcode_keys("sw1a1aa") == ["SW1A1AA", "SW1A", "SW1A1", "SW"]

    def test_partial_postcode_keys(self):
        assert postcode_keys("SS8") == ["SS8", "SS"]
        assert postcode_keys("ec") == ["EC"]
        assert postcode_keys("") == []

    def test_format(self):
        assert format_postcode("ss89hb") == "SS8 9HB"
        assert format_postcode("SS8") is None

    def test_parse_lat_lon(self):
        assert parse_lat_lon("51.5,-0.12") == (51.5, -0.12)
        assert parse_lat_lon(" 51.5 , -0.12 ") == (51.5, -0.12)

    @pytest.mark.parametrize("text", ["", "51.5", "abc,def", "95,0", "51.5,200", None])
    def test_parse_lat_lon_rejects(self, text):
        assert parse_lat_lon(text) is None


# =============================================================================
# REFERENCE TABLE
# =============================================================================


class TestClimateTable:
    """Tests for loading and querying the reference table."""

    def test_keys_loaded(self, climate_table):
        """Records without keys are dropped."""
        assert len(climate_table) == 6
        assert "ss8" in climate_table

    def test_most_specific_first(self, climate_table):
        row = climate_table.lookup("SS8 9HB")
        assert row.design_temp == -1.8
        assert row.hdd == 1901

    def test_outcode_then_area(self, climate_table):
        assert climate_table.lookup("SS8 1AA").hdd == 1950
        assert climate_table.lookup("SS1 1AA").design_temp == -2

    def test_partial_row(self, climate_table):
        row = climate_table.lookup("EH1 1YZ")
        assert row.design_temp == -4
        assert row.hdd is None

    def test_miss(self, climate_table):
        assert climate_table.lookup("ZE1 0AA") is None

    def test_first_record_wins(self):
        table = ClimateTable.from_records([
            {"keys": ["AB1"], "designTemp": -5},
            {"keys": ["ab 1"], "designTemp": -9},
        ])
        assert table.get("AB1").design_temp == -5

    def test_from_json(self, temp_dir, climate_records):
        path = temp_dir / "climate.json"
        path.write_text(json.dumps(climate_records))
        table = ClimateTable.load(path)
        assert table.lookup("SS8 9HB").hdd == 1901

    def test_from_csv(self, temp_dir):
        path = temp_dir / "climate.csv"
        path.write_text("postcode,design_temp,hdd\nCB4 1AA,-3,2111\nCB4 2ZZ,-4,\n")
        table = ClimateTable.load(path)
        assert table.get("CB41AA").hdd == 2111
        # both rows claim CB4; the first one keeps it
        assert table.lookup("CB4 9XX").design_temp == -3

    def test_from_csv_custom_columns(self, temp_dir):
        path = temp_dir / "climate.csv"
        path.write_text("pc,temp,degree_days\nSS8,-2,1950\n")
        table = ClimateTable.from_csv(path, postcode_column="pc", design_column="temp", hdd_column="degree_days")
        assert table.get("SS8").hdd == 1950


# =============================================================================
# DERIVED FIGURES
# =============================================================================


class TestDerive:
    """Tests for HDD and design temperature from monthly normals."""

    def test_hdd_all_cold(self):
        assert hdd_from_means([5.5] * 12) == 3650

    def test_hdd_warm_months_contribute_nothing(self):
        means = [5.5] * 6 + [20.0] * 6
        # Jan-Jun: 181 days × 10 K
        assert hdd_from_means(means) == 1810

    def test_hdd_skips_bad_months(self):
        means = ["x"] + [15.5] * 11
        assert hdd_from_means(means) == 0
        assert hdd_from_means([]) is None

    def test_design_temp_uses_winter_minimum(self):
        minima = [3.0] * 12
        minima[1] = -0.5  # February
        minima[6] = -10.0  # July, ignored
        assert design_temp_from_winter_minima(minima) == -2  # -2.5 rounds half up

    def test_design_temp_altitude(self):
        minima = [-1.0] + [3.0] * 11
        # -1 - 2 - 0.65 = -3.65
        assert design_temp_from_winter_minima(minima, altitude_m=100) == -4

    def test_design_temp_no_data(self):
        assert design_temp_from_winter_minima([None] * 12) is None
        assert design_temp_from_winter_minima([]) is None


# =============================================================================
# PROVIDERS
# =============================================================================


class TestProviders:
    """Tests for the HTTP clients, with the network mocked out."""

    def test_geocode_postcode(self, fast_settings):
        payload = {"status": 200, "result": {"latitude": 51.55, "longitude": 0.58}}
        with patch("requests.Session.get", return_value=_response(payload)) as get:
            point = geocode_postcode("SS8 9HB", cfg=fast_settings)

        assert point == GeoPoint(51.55, 0.58, "postcodes.io")
        assert get.call_args[0][0].endswith("/SS8%209HB")
        assert get.call_args[1]["timeout"] == 1.0

    def test_geocode_postcode_not_found(self, fast_settings):
        with patch("requests.Session.get", return_value=_response({"status": 404}, status_code=404)):
            with pytest.raises(ClimateLookupError):
                geocode_postcode("ZZ9 9ZZ", cfg=fast_settings)

    def test_geocode_falls_back_to_nominatim(self, fast_settings):
        responses = [
            _response({"status": 404, "error": "Invalid postcode"}, status_code=404),
            _response([{"lat": "51.5", "lon": "0.6"}]),
        ]
        with patch("requests.Session.get", side_effect=responses) as get:
            point = geocode("ss89hb", cfg=fast_settings)

        assert point.source == "nominatim"
        assert (point.lat, point.lon) == (51.5, 0.6)
        assert get.call_args[1]["params"]["q"] == "SS8 9HB"

    def test_geocode_rejects_short_query(self, fast_settings):
        with pytest.raises(ClimateLookupError):
            geocode("ab", cfg=fast_settings)

    def test_degree_days_mean(self, fast_settings):
        payload = {"data": [{"heating_degree_days": 2000}, {"heating_degree_days": 2101}, {"year": 2020}]}
        with patch("requests.Session.get", return_value=_response(payload)) as get:
            assert fetch_heating_degree_days(51.5, 0.6, cfg=fast_settings) == 2051

        params = get.call_args[1]["params"]
        assert params["base_temperature"] == 15.5
        assert params["degree_day_type"] == "heating"
        assert (params["start_year"], params["end_year"]) == (1991, 2020)

    def test_degree_days_empty(self, fast_settings):
        with patch("requests.Session.get", return_value=_response({"data": []})):
            with pytest.raises(ClimateLookupError):
                fetch_heating_degree_days(51.5, 0.6, cfg=fast_settings)

    def test_monthly_normals(self, fast_settings):
        payload = {"monthly": {"temperature_2m_mean": list(range(12)), "temperature_2m_min": [-1] * 12}}
        with patch("requests.Session.get", return_value=_response(payload)):
            normals = fetch_monthly_normals(51.5, 0.6, cfg=fast_settings)
        assert normals.mean[11] == 11
        assert len(normals.minimum) == 12

    def test_monthly_normals_incomplete(self, fast_settings):
        payload = {"monthly": {"temperature_2m_mean": [5] * 6, "temperature_2m_min": [0] * 12}}
        with patch("requests.Session.get", return_value=_response(payload)):
            with pytest.raises(ClimateLookupError):
                fetch_monthly_normals(51.5, 0.6, cfg=fast_settings)

    def test_elevation_fallback(self, fast_settings):
        responses = [
            requests.ConnectionError("open-elevation down"),
            _response({"results": [{"elevation": 42.0}]}),
        ]
        with patch("requests.Session.get", side_effect=responses):
            elevation = fetch_elevation(51.5, 0.6, cfg=fast_settings)
        assert elevation == Elevation(42.0, "opentopodata:eudem25m")


# =============================================================================
# RESOLVER
# =============================================================================


class _StaticStep(ClimateStep):
    def __init__(self, name, result):
        self.name = name
        self.result = result
        self.calls = 0

    def lookup(self, ctx, current):
        self.calls += 1
        return self.result


class _SlowStep(ClimateStep):
    name = "slow"

    async def run(self, ctx, current):
        await asyncio.sleep(5)
        return ClimateResult(design_temp=-10, hdd=9999)


class _FailingStep(ClimateStep):
    name = "broken"

    def lookup(self, ctx, current):
        raise requests.ConnectionError("service unavailable")


GEO = GeoPoint(52.2, 0.12, "postcodes.io")


class TestClimateResolver:
    """Tests for the ordered resolver pipeline."""

    @pytest.mark.asyncio
    async def test_table_hit_skips_remote(self, climate_table, fast_settings):
        resolver = ClimateResolver(table=climate_table, settings=fast_settings)
        with patch("heatloss.climate.providers.geocode") as geo:
            result = await resolver.resolve("ss8 9hb")

        assert (result.design_temp, result.hdd) == (-1.8, 1901)
        assert result.sources == ["table"]
        geo.assert_not_called()

    @pytest.mark.asyncio
    async def test_partial_table_completed_from_normals(self, climate_table, fast_settings):
        """Table HDD is kept; design temperature comes from the normals."""
        resolver = ClimateResolver(table=climate_table, settings=fast_settings)
        with patch("heatloss.climate.providers.geocode", return_value=GEO), \
             patch("heatloss.climate.providers.fetch_heating_degree_days") as hdd, \
             patch("heatloss.climate.providers.fetch_monthly_normals", return_value=_normals(0.5, mean=0)), \
             patch("heatloss.climate.providers.fetch_elevation", return_value=Elevation(20, "open-elevation")):
            result = await resolver.resolve("CB4 1AA")

        # 0.5 - 2 - 0.13 = -1.63
        assert result.design_temp == -2
        assert result.hdd == 2100
        assert result.altitude_m == 20
        assert result.sources == ["table", "open-meteo:normals"]
        hdd.assert_not_called()

    @pytest.mark.asyncio
    async def test_remote_only(self, fast_settings):
        resolver = ClimateResolver(settings=fast_settings)
        with patch("heatloss.climate.providers.geocode", return_value=GEO) as geo, \
             patch("heatloss.climate.providers.fetch_heating_degree_days", return_value=2051), \
             patch("heatloss.climate.providers.fetch_monthly_normals", return_value=_normals(-1.0)), \
             patch("heatloss.climate.providers.fetch_elevation") as elevation:
            result = await resolver.resolve("CB4 1AA", altitude_m=100)

        assert result.design_temp == -4
        assert result.hdd == 2051
        assert (result.lat, result.lon) == (52.2, 0.12)
        assert result.complete
        # geocoded once, shared by both remote steps
        geo.assert_called_once()
        elevation.assert_not_called()

    @pytest.mark.asyncio
    async def test_degree_days_failure_falls_through(self, fast_settings, caplog):
        resolver = ClimateResolver(settings=fast_settings)
        with caplog.at_level(logging.WARNING), \
             patch("heatloss.climate.providers.geocode", return_value=GEO), \
             patch("heatloss.climate.providers.fetch_heating_degree_days",
                   side_effect=ClimateLookupError("empty", "open-meteo")), \
             patch("heatloss.climate.providers.fetch_monthly_normals", return_value=_normals(-1.0, mean=5.5)), \
             patch("heatloss.climate.providers.fetch_elevation", return_value=Elevation(0, "open-elevation")):
            result = await resolver.resolve("CB4 1AA")

        assert result.hdd == 3650
        assert result.design_temp == -3
        assert "open-meteo:degree-days" in caplog.text

    @pytest.mark.asyncio
    async def test_elevation_failure_assumes_sea_level(self, fast_settings):
        resolver = ClimateResolver(settings=fast_settings)
        with patch("heatloss.climate.providers.geocode", return_value=GEO), \
             patch("heatloss.climate.providers.fetch_heating_degree_days", return_value=2000), \
             patch("heatloss.climate.providers.fetch_monthly_normals", return_value=_normals(-1.0)), \
             patch("heatloss.climate.providers.fetch_elevation", side_effect=requests.Timeout()):
            result = await resolver.resolve("CB4 1AA")

        assert result.design_temp == -3
        assert result.altitude_m == 0

    @pytest.mark.asyncio
    async def test_everything_fails(self, fast_settings):
        """Total failure yields absent fields, not an exception."""
        resolver = ClimateResolver(settings=fast_settings)
        with patch("heatloss.climate.providers.geocode",
                   side_effect=ClimateLookupError("not found", "nominatim")):
            result = await resolver.resolve("ZZ9 9ZZ")

        assert result.design_temp is None
        assert result.hdd is None
        assert result.sources == []
        assert not result.complete

    @pytest.mark.asyncio
    async def test_lat_lon_override(self, fast_settings):
        resolver = ClimateResolver(settings=fast_settings)
        with patch("heatloss.climate.providers.geocode") as geo, \
             patch("heatloss.climate.providers.fetch_heating_degree_days", return_value=2000) as hdd, \
             patch("heatloss.climate.providers.fetch_monthly_normals", return_value=_normals(-1.0)):
            result = await resolver.resolve("", lat_lon="51.5,-0.12", altitude_m=0)

        geo.assert_not_called()
        assert hdd.call_args[0][:2] == (51.5, -0.12)
        assert (result.lat, result.lon) == (51.5, -0.12)

    @pytest.mark.asyncio
    async def test_invalid_lat_lon_ignored(self, fast_settings):
        resolver = ClimateResolver(steps=[], settings=fast_settings)
        ctx = resolver._context("SS8 9HB", "north-ish", None)
        assert ctx.lat_lon is None
        assert ctx.postcode == "SS89HB"

    @pytest.mark.asyncio
    async def test_no_state_across_calls(self, fast_settings):
        resolver = ClimateResolver(settings=fast_settings)
        with patch("heatloss.climate.providers.geocode", return_value=GEO) as geo, \
             patch("heatloss.climate.providers.fetch_heating_degree_days", return_value=2000), \
             patch("heatloss.climate.providers.fetch_monthly_normals", return_value=_normals(-1.0)):
            await resolver.resolve("CB4 1AA", altitude_m=0)
            await resolver.resolve("CB4 1AA", altitude_m=0)
        assert geo.call_count == 2

    @pytest.mark.asyncio
    async def test_custom_steps_in_order(self, fast_settings):
        first = _StaticStep("first", ClimateResult(hdd=1800))
        second = _StaticStep("second", ClimateResult(design_temp=-3, hdd=2500))
        third = _StaticStep("third", ClimateResult(design_temp=-9))
        resolver = ClimateResolver(steps=[first, second, third], settings=fast_settings)

        result = await resolver.resolve("SS8 9HB")

        assert (result.design_temp, result.hdd) == (-3, 1800)
        assert result.sources == ["first", "second"]
        assert third.calls == 0

    @pytest.mark.asyncio
    async def test_step_timeout(self, fast_settings):
        fallback = _StaticStep("fallback", ClimateResult(design_temp=-2, hdd=2000))
        resolver = ClimateResolver(steps=[_SlowStep(), fallback], settings=fast_settings)

        result = await resolver.resolve("SS8 9HB")

        assert result.sources == ["fallback"]
        assert result.design_temp == -2

    @pytest.mark.asyncio
    async def test_step_exception(self, fast_settings):
        fallback = _StaticStep("fallback", ClimateResult(hdd=2000))
        resolver = ClimateResolver(steps=[_FailingStep(), fallback], settings=fast_settings)
        result = await resolver.resolve("SS8 9HB")
        assert result.hdd == 2000
        assert result.design_temp is None

    @pytest.mark.asyncio
    async def test_table_step_without_table(self, fast_settings):
        resolver = ClimateResolver(steps=[LocalTableStep(None)], settings=fast_settings)
        result = await resolver.resolve("SS8 9HB")
        assert result == ClimateResult()

    def test_resolve_sync(self, climate_table, fast_settings):
        resolver = ClimateResolver(table=climate_table, steps=[LocalTableStep(climate_table)], settings=fast_settings)
        result = resolver.resolve_sync("SS8 2AB")
        assert result.to_dict()["hdd"] == 1950

    def test_table_loaded_from_settings(self, temp_dir, climate_records):
        path = temp_dir / "climate.json"
        path.write_text(json.dumps(climate_records))
        settings = Settings(climate_table_path=path, http_retries=0)
        resolver = ClimateResolver(settings=settings)
        assert resolver.table is not None
        assert isinstance(resolver.steps[0], LocalTableStep)

    def test_geocode_failure_not_repeated(self, fast_settings):
        """A failed geocode is shared by later steps instead of being retried."""
        resolver = ClimateResolver(settings=fast_settings)
        with patch("requests.Session.get", side_effect=requests.ConnectionError("offline")) as get:
            result = resolver.resolve_sync("SS8 9HB")

        urls = [c.args[0] for c in get.call_args_list]
        assert len(urls) == 2
        assert urls[0].startswith(fast_settings.postcodes_io_url)
        assert urls[1] == fast_settings.nominatim_url
        assert not result.complete

    @pytest.mark.parametrize("filename,content", [
        ("missing.json", None),
        ("broken.json", "{not json"),
        ("object.json", '{"keys": ["SS8"]}'),
    ])
    def test_unusable_table_path_is_skipped(self, temp_dir, caplog, filename, content):
        path = temp_dir / filename
        if content is not None:
            path.write_text(content)
        settings = Settings(climate_table_path=path, http_retries=0)

        with caplog.at_level(logging.WARNING):
            resolver = ClimateResolver(settings=settings)

        assert resolver.table is None
        assert filename in caplog.text
