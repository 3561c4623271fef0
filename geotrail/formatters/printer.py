"""Human-readable listing, one line per event."""
from __future__ import annotations

from typing import TYPE_CHECKING

from .base import Formatter

if TYPE_CHECKING:
    from geotrail.services.logparser.schemas import GeoEvent


def _coordinate(value: float | None) -> str:
    return "-" if value is None else str(value)


class PrintFormatter(Formatter):
    """Writes a summary line for every event as it arrives."""

    name = "print"

    @staticmethod
    def format_event(event: "GeoEvent") -> str:
        return (
            f"Country: {event.country} Region: {event.region} City: {event.city} "
            f"Lat: {_coordinate(event.latitude)} Long: {_coordinate(event.longitude)} "
            f"Time: {event.timestamp.isoformat()}"
        )

    def on_entry(self, event: "GeoEvent") -> None:
        self.write(self.format_event(event) + "\n")
