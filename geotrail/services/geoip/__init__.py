"""GeoIP lookups."""
from .resolver import GeoIP2Resolver, GeoResolver

__all__ = ["GeoIP2Resolver", "GeoResolver"]
