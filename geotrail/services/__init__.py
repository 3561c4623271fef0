"""Services layer - parsing, GeoIP resolution and scanning."""
from .geoip import GeoIP2Resolver, GeoResolver
from .logparser import LogLineParser
from .scanner import EventScanner

__all__ = ["GeoIP2Resolver", "GeoResolver", "LogLineParser", "EventScanner"]
