"""Exceptions raised by the geotrail pipeline."""
from __future__ import annotations


class GeoTrailError(Exception):
    """Base class for all geotrail errors."""


class TimestampParseError(GeoTrailError, ValueError):
    """A timestamp matched the log grammar but not the strict date layout."""

    def __init__(self, raw: str, reason: str | None = None) -> None:
        self.raw = raw
        self.reason = reason
        message = f"Unparseable access log timestamp: {raw!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class FormatterStateError(GeoTrailError, RuntimeError):
    """An entry was handed to a formatter that is not open."""


class UnknownFormatterError(GeoTrailError, KeyError):
    """No formatter is registered under the requested name."""

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the message readable
        return str(self.args[0]) if self.args else ""


class SharedOutputError(GeoTrailError, ValueError):
    """Formatters whose output cannot be interleaved were given one stream."""
