"""World heat-map chart of hits per country.

Nothing is written while events arrive; hits are counted per country code
and a single chart URL is written when the formatter closes.
"""
from __future__ import annotations

import math
import string
import logging
from collections import Counter
from typing import TYPE_CHECKING, TextIO

from .base import Formatter

if TYPE_CHECKING:
    from geotrail.config.settings import Settings
    from geotrail.services.logparser.schemas import GeoEvent


logger = logging.getLogger(__name__)

CHART_BASE_URL = "http://chart.apis.google.com/chart"
# Simple-encoding alphabet: A-Z, a-z, 0-9
CHART_SYMBOLS = string.ascii_uppercase + string.ascii_lowercase + string.digits
CHART_COLORS = ["ffffff", "f4ed28", "f11414"]


def bucket_index(count: int, minimum: int, maximum: int, size: int) -> int:
    """Map ``count`` into ``[0, size - 1]`` relative to the observed range.

    When every country has the same count the range is empty and all of
    them land on index 0.
    """
    if maximum <= minimum:
        return 0
    index = math.floor((count - minimum) / (maximum - minimum) * size)
    return max(0, min(index, size - 1))


def encode_hits(hits: Counter[str], symbols: str = CHART_SYMBOLS) -> tuple[str, str]:
    """Return the ``(data, country_codes)`` pair for the chart query.

    Countries keep their first-seen order; each contributes one symbol to
    ``data`` and its code to ``country_codes``.
    """
    if not hits:
        return "", ""
    minimum = min(hits.values())
    maximum = max(hits.values())
    data = "".join(
        symbols[bucket_index(count, minimum, maximum, len(symbols))] for count in hits.values()
    )
    return data, "".join(hits)


class HeatMapChartFormatter(Formatter):
    """Counts hits per country and emits a chart URL on close."""

    name = "chart"

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        base_url: str = CHART_BASE_URL,
        size: str = "440x220",
        region: str = "world",
        colors: list[str] | None = None,
        background: str = "EAF7FE",
        symbols: str = CHART_SYMBOLS,
    ) -> None:
        super().__init__(stream)
        if not symbols:
            raise ValueError("Chart symbol alphabet must not be empty")
        self.base_url = base_url
        self.size = size
        self.region = region
        self.colors = colors or list(CHART_COLORS)
        self.background = background
        self.symbols = symbols
        self.hits: Counter[str] = Counter()

    @classmethod
    def from_settings(cls, settings: "Settings", stream: TextIO | None = None) -> HeatMapChartFormatter:
        chart = settings.chart
        return cls(
            stream,
            base_url=chart.base_url,
            size=chart.size,
            region=chart.region,
            colors=list(chart.colors),
            background=chart.background,
            symbols=chart.symbols,
        )

    def chart_url(self) -> str:
        """Compose the chart URL from the hits counted so far."""
        data, country_codes = encode_hits(self.hits, self.symbols)
        query = [
            "cht=t",
            f"chs={self.size}",
            f"chtm={self.region}",
            f"chd=s:{data}",
            f"chco={','.join(self.colors)}",
            f"chld={country_codes}",
            f"chf=bg,s,{self.background}",
        ]
        return f"{self.base_url}?{'&'.join(query)}"

    def on_open(self) -> None:
        self.hits = Counter()

    def on_entry(self, event: "GeoEvent") -> None:
        if not event.country_code:
            logger.debug("No country code for %s, not counted in chart", event.ip_address)
            return
        self.hits[event.country_code] += 1

    def on_close(self) -> None:
        if not self.hits:
            logger.info("No countries counted, writing an empty chart")
        self.write(self.chart_url() + "\n")
