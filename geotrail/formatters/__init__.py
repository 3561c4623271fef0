"""Renderers for GeoEvent streams."""
from .base import Formatter
from .chart import HeatMapChartFormatter
from .group import FormatterGroup
from .kml import KmlFormatter
from .printer import PrintFormatter
from .registry import FORMATTERS, build_formatter, create_formatter

__all__ = [
    "Formatter",
    "FormatterGroup",
    "HeatMapChartFormatter",
    "KmlFormatter",
    "PrintFormatter",
    "FORMATTERS",
    "build_formatter",
    "create_formatter",
]
