"""Configuration module for geotrail."""

from geotrail.config.logs import configure_logging
from geotrail.config.settings import (
    ChartSettings,
    GeoIPSettings,
    KmlSettings,
    ScannerSettings,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "ChartSettings",
    "GeoIPSettings",
    "KmlSettings",
    "ScannerSettings",
]
