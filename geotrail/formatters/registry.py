"""Static registry of formatters selectable by name."""
from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, TextIO

from geotrail.exceptions import SharedOutputError, UnknownFormatterError

from .base import Formatter
from .chart import HeatMapChartFormatter
from .group import FormatterGroup
from .kml import KmlFormatter
from .printer import PrintFormatter

if TYPE_CHECKING:
    from geotrail.config.settings import Settings


# Ordered mapping of (name -> formatter class)
FORMATTERS: dict[str, type[Formatter]] = {
    PrintFormatter.name: PrintFormatter,
    KmlFormatter.name: KmlFormatter,
    HeatMapChartFormatter.name: HeatMapChartFormatter,
}


def formatter_names() -> list[str]:
    return list(FORMATTERS)


def _formatter_class(name: str) -> type[Formatter]:
    try:
        return FORMATTERS[name]
    except KeyError:
        raise UnknownFormatterError(
            f"Unknown formatter '{name}'. Available formatters are: {', '.join(FORMATTERS)}"
        ) from None


def create_formatter(name: str, settings: "Settings", stream: TextIO | None = None) -> Formatter:
    """Build the formatter registered under ``name``."""
    return _formatter_class(name).from_settings(settings, stream)


def check_outputs(names: list[str], routed: Collection[str] = ()) -> None:
    """Refuse selections that would interleave a standalone document.

    Formatters not in ``routed`` share the default stream. A KML document
    mixed with any other output on that stream is no longer well-formed.

    Raises:
        UnknownFormatterError: A selected or routed name is not registered.
        SharedOutputError: A standalone document shares the default stream.
    """
    unique = list(dict.fromkeys(names))
    for name in [*unique, *routed]:
        _formatter_class(name)

    shared = [name for name in unique if name not in routed]
    if len(shared) < 2:
        return
    documents = [name for name in shared if FORMATTERS[name].standalone_document]
    if documents:
        others = [name for name in shared if name not in documents]
        raise SharedOutputError(
            f"Formatter(s) {', '.join(documents)} write a complete document and cannot share "
            f"an output with {', '.join(others)}. Give them their own output file."
        )


def build_formatter(
    names: list[str],
    settings: "Settings",
    stream: TextIO | None = None,
    streams: Mapping[str, TextIO] | None = None,
) -> Formatter:
    """Build one formatter, or a FormatterGroup when several names are given.

    Duplicate names are collapsed, the first occurrence sets the order.
    ``streams`` routes a formatter to its own output, the others write to
    ``stream`` (standard output when None).
    """
    unique = list(dict.fromkeys(names))
    if not unique:
        raise UnknownFormatterError("No formatter selected")
    streams = streams or {}
    check_outputs(unique, streams)
    if len(unique) == 1:
        return create_formatter(unique[0], settings, streams.get(unique[0], stream))
    return FormatterGroup({
        name: create_formatter(name, settings, streams.get(name, stream)) for name in unique
    })
