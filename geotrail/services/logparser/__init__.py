"""Log parser module - parsing only, no GeoIP lookups."""
from .logparser import LogLineParser, normalize_timestamp
from .schemas import GeoEvent, LocationRecord, ParsedLogLine

__all__ = ["LogLineParser", "normalize_timestamp", "GeoEvent", "LocationRecord", "ParsedLogLine"]
