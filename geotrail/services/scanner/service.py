"""Event scanner: turns access log lines into GeoEvents for a formatter.

Pipeline per line:
- match the line against the access log grammar (skip on no match)
- resolve the client IP (skip when unresolved)
- normalize the timestamp (abort or skip on failure, see ``on_timestamp_error``)
- build the GeoEvent and hand it to the formatter
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Literal

from geotrail.exceptions import TimestampParseError
from geotrail.services.logparser.logparser import LogLineParser, normalize_timestamp
from geotrail.services.logparser.schemas import GeoEvent

if TYPE_CHECKING:
    from geotrail.formatters.base import Formatter
    from geotrail.services.geoip.resolver import GeoResolver


logger = logging.getLogger(__name__)

TimestampErrorPolicy = Literal["abort", "skip"]


class EventScanner:
    """Single pass, synchronous scanner over a stream of log lines.

    Example:
        scanner = EventScanner(resolver=GeoIP2Resolver.from_path(db_path))
        with open("access.log", encoding="utf-8") as log:
            scanner.scan(log, PrintFormatter())
    """

    def __init__(
        self,
        resolver: "GeoResolver",
        parser: LogLineParser | None = None,
        *,
        on_timestamp_error: TimestampErrorPolicy = "abort",
    ) -> None:
        """Initialize the scanner.

        Args:
            resolver: Service turning client IPs into locations.
            parser: Log line parser. Defaults to the combined log grammar.
            on_timestamp_error: ``"abort"`` re-raises TimestampParseError out of
                the scan, ``"skip"`` drops the line with a warning.
        """
        if on_timestamp_error not in ("abort", "skip"):
            raise ValueError(f"Unknown timestamp error policy: {on_timestamp_error!r}")
        self.resolver = resolver
        self.parser = parser or LogLineParser()
        self.on_timestamp_error = on_timestamp_error

        # Statistics
        self.parsed_lines: int = 0
        self.skipped_lines: int = 0
        self.unresolved_lines: int = 0
        self.invalid_timestamps: int = 0
        self.events: int = 0

    def reset_stats(self) -> None:
        self.parsed_lines = 0
        self.skipped_lines = 0
        self.unresolved_lines = 0
        self.invalid_timestamps = 0
        self.events = 0

    def iter_events(self, lines: Iterable[str]) -> Iterator[GeoEvent]:
        """Yield one GeoEvent per matched and resolved line, in input order."""
        for line in lines:
            parsed = self.parser.parse(line)
            if parsed is None:
                self.skipped_lines += 1
                continue
            self.parsed_lines += 1

            location = self.resolver.resolve(parsed.ip_address)
            if location is None:
                logger.debug("No location found for IP %s", parsed.ip_address)
                self.unresolved_lines += 1
                continue

            try:
                timestamp = normalize_timestamp(parsed.raw_timestamp)
            except TimestampParseError as e:
                self.invalid_timestamps += 1
                if self.on_timestamp_error == "abort":
                    logger.error("Aborting scan: %s", e)
                    raise
                logger.warning("Skipping line: %s", e)
                self.skipped_lines += 1
                continue

            self.events += 1
            yield GeoEvent.from_location(location, timestamp, ip_address=parsed.ip_address)

    def scan(self, lines: Iterable[str], formatter: "Formatter") -> int:
        """Feed every event from ``lines`` to ``formatter``.

        The formatter is opened before the first line and closed on every
        exit path, including an aborting TimestampParseError.

        Returns:
            Number of events handed to the formatter.
        """
        self.reset_stats()
        try:
            with formatter:
                for event in self.iter_events(lines):
                    formatter.process_entry(event)
        finally:
            logger.info(
                "Scan finished: %d events, %d parsed lines, %d skipped, %d unresolved, %d bad timestamps",
                self.events,
                self.parsed_lines,
                self.skipped_lines,
                self.unresolved_lines,
                self.invalid_timestamps,
            )
        return self.events
