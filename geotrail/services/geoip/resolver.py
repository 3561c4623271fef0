"""GeoIP resolution of client IP addresses."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from geoip2.database import Reader
from geoip2.errors import AddressNotFoundError
from IPy import IP

from geotrail.services.logparser.constants import ALLOWED_GEOIP_LOCALES, GEOIP_LOCALES_DEFAULT
from geotrail.services.logparser.schemas import LocationRecord


logger = logging.getLogger(__name__)


@runtime_checkable
class GeoResolver(Protocol):
    """Anything that turns an IP address into a location."""

    def resolve(self, ip: str) -> LocationRecord | None:
        """Return the location of ``ip`` or None when it cannot be resolved."""
        ...


class GeoIP2Resolver:
    """Resolves IP addresses against a MaxMind GeoIP2/GeoLite2 City database.

    The resolver owns its reader; use it as a context manager or call
    ``close`` when done. Lookups are not cached.
    """

    def __init__(self, reader: Any) -> None:
        self.reader = reader

        # Statistics
        self.resolved: int = 0
        self.unresolved: int = 0

    @classmethod
    def from_path(cls, db_path: Path, locales: list[str] | None = None) -> GeoIP2Resolver:
        """Open the mmdb file at ``db_path``.

        Args:
            db_path (Path): Path to the GeoLite2 City mmdb file.
            locales (list[str], optional): Name locales in order of preference.
                Unknown locales fall back to the default with a warning.
        """
        locales = locales or GEOIP_LOCALES_DEFAULT
        if any(loc not in ALLOWED_GEOIP_LOCALES for loc in locales):
            logger.warning(
                "Unmatched GeoIp2 locale found. Allowed are '%s', defaulting to 'en'",
                ALLOWED_GEOIP_LOCALES,
            )
            locales = GEOIP_LOCALES_DEFAULT
        logger.debug("GeoIP database path: %s", db_path)
        return cls(Reader(str(db_path), locales=locales))

    def __enter__(self) -> GeoIP2Resolver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.reader.close()

    def get_ip_type(self, ip: str) -> str:
        """Get the IP type of the given IP address.

        If the IP address is invalid, return an empty string.
        """
        try:
            return IP(ip).iptype()
        except ValueError:
            logger.debug("Invalid IP address %s.", ip)
            return ""

    def resolve(self, ip: str) -> LocationRecord | None:
        if not self.get_ip_type(ip):
            self.unresolved += 1
            return None

        try:
            ip_data = self.reader.city(ip)
        except (AddressNotFoundError, ValueError) as e:
            logger.debug("GeoIP lookup failed for %s: %s", ip, e)
            self.unresolved += 1
            return None

        self.resolved += 1
        return LocationRecord(
            country_code=ip_data.country.iso_code or "",
            country=ip_data.country.name or "",
            region=ip_data.subdivisions.most_specific.name or "",
            city=ip_data.city.name or "",
            latitude=ip_data.location.latitude,
            longitude=ip_data.location.longitude,
        )
