"""
Configuration management for heatloss.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables (HEATLOSS_*) or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="HEATLOSS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    climate_table_path: Path | None = Field(
        default=None, description="JSON or CSV postcode climate table"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_file: Path | None = Field(
        default=None, description="Also write JSON-lines records to this file"
    )

    # Engine defaults
    default_indoor_temp: float = Field(default=21.0, description="Indoor design temperature (°C)")
    default_policy: Literal["max", "sum"] = Field(
        default="max", description="Ventilation combination policy"
    )

    # External services
    http_timeout_s: float = Field(default=10.0, description="Per-request HTTP timeout")
    step_timeout_s: float = Field(default=30.0, description="Upper bound for one resolver step")
    http_retries: int = Field(default=1, ge=0, description="Retries per external call")
    user_agent: str = Field(default="heatloss/0.1 (design-heat-loss)")
    postcodes_io_url: str = Field(default="https://api.postcodes.io/postcodes")
    nominatim_url: str = Field(default="https://nominatim.openstreetmap.org/search")
    open_meteo_climate_url: str = Field(default="https://climate-api.open-meteo.com/v1/climate")
    open_meteo_degree_days_url: str = Field(
        default="https://climate-api.open-meteo.com/v1/degree-days"
    )
    open_elevation_url: str = Field(default="https://api.open-elevation.com/api/v1/lookup")
    opentopodata_url: str = Field(default="https://api.opentopodata.org/v1/eudem25m")

    # Climate normals window
    normals_start_year: int = Field(default=1991)
    normals_end_year: int = Field(default=2020)


settings = Settings()
