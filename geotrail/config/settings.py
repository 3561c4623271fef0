from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from geotrail.services.logparser.constants import ALLOWED_GEOIP_LOCALES


class GeoIPSettings(BaseSettings):
    """GeoIP database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="GEOIP_", env_file=".env", extra="ignore")

    db_path: Path = Field(
        default=Path("data/GeoLite2-City.mmdb"),
        description="Path to GeoIP2/GeoLite2 City database file",
    )
    locales: list[str] = Field(
        default=["en"],
        description="List of GeoIP locales to use",
    )
    validate_db_path: bool = Field(
        default=False,
        description="Validate that the GeoIP database file exists when settings load"
    )
    validate_locales: bool = Field(
        default=True,
        description="Validate that the specified GeoIP locales are supported"
    )

    @model_validator(mode="after")
    def validate_geoip_db_exists(self) -> "GeoIPSettings":
        """Ensure GeoIP database file exists if validation is enabled."""
        if self.validate_db_path and not self.db_path.exists():
            raise ValueError(f"GeoIP database file not found: {self.db_path}")
        return self

    @model_validator(mode="after")
    def validate_geoip_locales(self) -> "GeoIPSettings":
        """Ensure GeoIP locales are valid if validation is enabled."""
        if self.validate_locales:
            invalid_locales = [loc for loc in self.locales if loc not in ALLOWED_GEOIP_LOCALES]
            if invalid_locales:
                raise ValueError(f"Invalid GeoIP locales: {invalid_locales}. Allowed locales are: {ALLOWED_GEOIP_LOCALES}")
        return self


class ScannerSettings(BaseSettings):
    """Log scanning configuration settings."""

    model_config = SettingsConfigDict(env_prefix="SCANNER_", env_file=".env", extra="ignore")

    input_path: Path | None = Field(
        default=None,
        description="Access log to scan. Standard input is read when unset.",
    )
    formatters: list[str] = Field(
        default=["print"],
        description="Formatters to render events with (print, kml, chart)",
    )
    on_timestamp_error: Literal["abort", "skip"] = Field(
        default="abort",
        description="Abort the scan or skip the line when a timestamp cannot be parsed",
    )
    outputs: dict[str, Path] = Field(
        default_factory=dict,
        description="Output file per formatter name, the rest write to standard output",
    )

    @field_validator("formatters")
    @classmethod
    def validate_formatters(cls, value: list[str]) -> list[str]:
        """Ensure every formatter name is registered."""
        from geotrail.formatters.registry import formatter_names

        if not value:
            raise ValueError("At least one formatter must be selected")
        available = formatter_names()
        unknown = [name for name in value if name not in available]
        if unknown:
            raise ValueError(f"Unknown formatters: {unknown}. Available formatters are: {available}")
        return value

    @field_validator("outputs")
    @classmethod
    def validate_outputs(cls, value: dict[str, Path]) -> dict[str, Path]:
        """Ensure outputs are only routed for registered formatters."""
        from geotrail.formatters.registry import formatter_names

        available = formatter_names()
        unknown = [name for name in value if name not in available]
        if unknown:
            raise ValueError(f"Outputs given for unknown formatters: {unknown}. Available formatters are: {available}")
        return value


class KmlSettings(BaseSettings):
    """KML document configuration settings."""

    model_config = SettingsConfigDict(env_prefix="KML_", env_file=".env", extra="ignore")

    document_name: str = Field(default="Web Tokyo", description="KML document name")
    document_description: str = Field(
        default="Web Requests to Tokyo around the world",
        description="KML document description",
    )
    anchor_name: str = Field(default="iKnow!", description="Name of the anchor placemark")
    anchor_description: str = Field(default="iKnow! home", description="Description of the anchor placemark")
    anchor_longitude: float = Field(
        default=139.701204, ge=-180.0, le=180.0, description="Longitude every line is drawn to"
    )
    anchor_latitude: float = Field(
        default=35.655614, ge=-90.0, le=90.0, description="Latitude every line is drawn to"
    )
    line_color: str = Field(default="7f00ffff", description="Line colour (aabbggrr)")
    line_width: int = Field(default=4, ge=1, description="Line width in pixels")
    poly_color: str = Field(default="7f00ff00", description="Polygon colour (aabbggrr)")


class ChartSettings(BaseSettings):
    """Heat-map chart configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CHART_", env_file=".env", extra="ignore")

    base_url: str = Field(default="http://chart.apis.google.com/chart", description="Chart service URL")
    size: str = Field(default="440x220", pattern=r"^\d+x\d+$", description="Chart size, WIDTHxHEIGHT")
    region: str = Field(default="world", description="Geographical area shown on the map")
    colors: list[str] = Field(
        default=["ffffff", "f4ed28", "f11414"],
        description="Gradient colours, no-data colour first",
    )
    background: str = Field(default="EAF7FE", description="Chart background colour")
    symbols: str = Field(
        default="ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789",
        min_length=1,
        description="Simple-encoding alphabet, lowest bucket first",
    )


class Settings(BaseSettings):
    """Main application settings.

    Configuration precedence (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values

    Example .env file:
        APP_LOG_LEVEL=DEBUG
        GEOIP_DB_PATH=/data/GeoLite2-City.mmdb
        SCANNER_FORMATTERS=["kml", "chart"]
        KML_ANCHOR_LONGITUDE=139.701204
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    name: str = Field(default="geotrail", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )

    # Sub-configurations
    geoip: GeoIPSettings = Field(default_factory=GeoIPSettings)
    scanner: ScannerSettings = Field(default_factory=ScannerSettings)
    kml: KmlSettings = Field(default_factory=KmlSettings)
    chart: ChartSettings = Field(default_factory=ChartSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, otherwise the configured level."""
        return "DEBUG" if self.debug else self.log_level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function is cached to ensure we only parse configuration once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
