"""Schemas for parsed log data - pure data, no I/O."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ParsedLogLine:
    """Fields extracted from one access log line that matched the grammar."""

    ip_address: str
    raw_timestamp: str
    method: str
    path: str
    protocol: str
    status_code: int
    size: int | None
    referrer: str
    user_agent: str


@dataclass(frozen=True)
class LocationRecord:
    """Geographic data returned by a GeoResolver.

    Any of the string fields may be empty when the database has no data at
    that granularity. Missing coordinates are ``None``, never ``0.0``.
    """

    country_code: str = ""
    country: str = ""
    region: str = ""
    city: str = ""
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True)
class GeoEvent:
    """A resolved location paired with the request timestamp of one log line."""

    timestamp: datetime
    country_code: str = ""
    country: str = ""
    region: str = ""
    city: str = ""
    latitude: float | None = None
    longitude: float | None = None
    ip_address: str | None = field(default=None, compare=False)

    @classmethod
    def from_location(
        cls, location: LocationRecord, timestamp: datetime, ip_address: str | None = None
    ) -> GeoEvent:
        """Build an event from a resolver result and a normalized timestamp."""
        return cls(
            timestamp=timestamp,
            country_code=location.country_code,
            country=location.country,
            region=location.region,
            city=location.city,
            latitude=location.latitude,
            longitude=location.longitude,
            ip_address=ip_address,
        )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None
