"""KML document with a line from every visitor to a fixed anchor point.

The output opens with a preamble holding the line style and a placemark for
the anchor, then one placemark per event, then the closing tags. Load it in
Google Earth or any other KML viewer.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TextIO
from xml.sax.saxutils import escape

from .base import Formatter

if TYPE_CHECKING:
    from geotrail.config.settings import KmlSettings, Settings
    from geotrail.services.logparser.schemas import GeoEvent


logger = logging.getLogger(__name__)

STYLE_ID = "yellowLineGreenPoly"

KML_PREAMBLE = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
<Document>
  <name>{document_name}</name>
  <description>{document_description}</description>
  <Style id="{style_id}">
    <LineStyle>
      <color>{line_color}</color>
      <width>{line_width}</width>
    </LineStyle>
    <PolyStyle>
      <color>{poly_color}</color>
    </PolyStyle>
  </Style>
  <Placemark>
    <name>{anchor_name}</name>
    <description>{anchor_description}</description>
    <Point>
      <coordinates>{anchor_longitude},{anchor_latitude},0</coordinates>
    </Point>
  </Placemark>
"""

KML_PLACEMARK = """  <Placemark>
    <name>{label}</name>
    <description>{label}</description>
    <TimeStamp><when>{when}</when></TimeStamp>
    <styleUrl>#{style_id}</styleUrl>
    <LineString>
      <extrude>1</extrude>
      <tessellate>1</tessellate>
      <coordinates>{longitude},{latitude}
        {anchor_longitude},{anchor_latitude}
      </coordinates>
    </LineString>
  </Placemark>
"""

KML_CLOSING = """</Document>
</kml>
"""


class KmlFormatter(Formatter):
    """Streams a KML document, one placemark per event."""

    name = "kml"
    standalone_document = True

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        document_name: str = "Web Tokyo",
        document_description: str = "Web Requests to Tokyo around the world",
        anchor_name: str = "iKnow!",
        anchor_description: str = "iKnow! home",
        anchor_longitude: float = 139.701204,
        anchor_latitude: float = 35.655614,
        line_color: str = "7f00ffff",
        line_width: int = 4,
        poly_color: str = "7f00ff00",
    ) -> None:
        super().__init__(stream)
        self.document_name = document_name
        self.document_description = document_description
        self.anchor_name = anchor_name
        self.anchor_description = anchor_description
        self.anchor_longitude = anchor_longitude
        self.anchor_latitude = anchor_latitude
        self.line_color = line_color
        self.line_width = line_width
        self.poly_color = poly_color
        self.skipped: int = 0

    @classmethod
    def from_settings(cls, settings: "Settings", stream: TextIO | None = None) -> KmlFormatter:
        kml: KmlSettings = settings.kml
        return cls(
            stream,
            document_name=kml.document_name,
            document_description=kml.document_description,
            anchor_name=kml.anchor_name,
            anchor_description=kml.anchor_description,
            anchor_longitude=kml.anchor_longitude,
            anchor_latitude=kml.anchor_latitude,
            line_color=kml.line_color,
            line_width=kml.line_width,
            poly_color=kml.poly_color,
        )

    def preamble(self) -> str:
        return KML_PREAMBLE.format(
            document_name=escape(self.document_name),
            document_description=escape(self.document_description),
            style_id=STYLE_ID,
            line_color=self.line_color,
            line_width=self.line_width,
            poly_color=self.poly_color,
            anchor_name=escape(self.anchor_name),
            anchor_description=escape(self.anchor_description),
            anchor_longitude=self.anchor_longitude,
            anchor_latitude=self.anchor_latitude,
        )

    def placemark(self, event: "GeoEvent") -> str:
        return KML_PLACEMARK.format(
            label=escape(f"{event.country} : {event.region} - {event.city}"),
            when=event.timestamp.isoformat(),
            style_id=STYLE_ID,
            longitude=event.longitude,
            latitude=event.latitude,
            anchor_longitude=self.anchor_longitude,
            anchor_latitude=self.anchor_latitude,
        )

    def on_open(self) -> None:
        self.skipped = 0
        self.write(self.preamble())

    def on_entry(self, event: "GeoEvent") -> None:
        if not event.has_coordinates:
            logger.debug("No coordinates for %s, leaving it out of the KML document", event.ip_address)
            self.skipped += 1
            return
        self.write(self.placemark(event))

    def on_close(self) -> None:
        self.write(KML_CLOSING)
