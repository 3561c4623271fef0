import re
import logging
from datetime import datetime, timedelta, timezone

from geotrail.exceptions import TimestampParseError

from .constants import (
    MONTH_ABBREVIATIONS,
    TWO_DIGIT_YEAR_PIVOT,
    access_log_pattern,
    timestamp_pattern,
)
from .schemas import ParsedLogLine


logger = logging.getLogger(__name__)


def _parse_offset(sign: str, digits: str) -> timezone:
    """Read a 1-5 digit offset as [H]HMM, the last two digits being minutes."""
    hours, minutes = int(digits[:-2] or 0), int(digits[-2:])
    if minutes >= 60 or hours >= 24:
        raise ValueError(f"UTC offset out of range: {sign}{digits}")
    offset = timedelta(hours=hours, minutes=minutes)
    return timezone(-offset if sign == "-" else offset)


def _parse_year(digits: str) -> int:
    year = int(digits)
    if len(digits) == 2:
        year += 1900 if year >= TWO_DIGIT_YEAR_PIVOT else 2000
    return year


def normalize_timestamp(raw_timestamp: str) -> datetime:
    """Parse the bracketed access log timestamp into an aware datetime.

    Accepts ``day/Mon/Year:HH:MM:SS +ZZZZ`` with a 1-2 digit day, an English
    month abbreviation, a 2-4 digit year and a signed 1-5 digit offset.

    Args:
        raw_timestamp (str): Timestamp as captured by the log grammar, e.g.
            ``10/Oct/2021:13:55:36 +0000``.

    Raises:
        TimestampParseError: The string does not follow the strict layout,
            or names a month, day, time or offset that does not exist.
    """
    matched = timestamp_pattern().fullmatch(raw_timestamp)
    if not matched:
        raise TimestampParseError(raw_timestamp, "does not match day/Mon/Year:HH:MM:SS +ZZZZ")

    datadict = matched.groupdict()
    month = MONTH_ABBREVIATIONS.get(datadict["month"].lower())
    if month is None:
        raise TimestampParseError(raw_timestamp, f"unknown month {datadict['month']!r}")

    try:
        return datetime(
            _parse_year(datadict["year"]),
            month,
            int(datadict["day"]),
            int(datadict["hour"]),
            int(datadict["minute"]),
            int(datadict["second"]),
            tzinfo=_parse_offset(datadict["sign"], datadict["offset"]),
        )
    except ValueError as e:
        raise TimestampParseError(raw_timestamp, str(e)) from e


class LogLineParser:
    """Matches access log lines against the combined/common log grammar.

    A line that does not match is not an error, ``parse`` simply returns
    None and the caller skips it.
    """

    def __init__(self, pattern: re.Pattern[str] | None = None) -> None:
        self.pattern = pattern or access_log_pattern()

        # Statistics
        self.matched_lines: int = 0
        self.unmatched_lines: int = 0

    def match(self, line: str) -> re.Match[str] | None:
        """Search the line for an access log record."""
        return self.pattern.search(line)

    def parse(self, line: str) -> ParsedLogLine | None:
        """Extract the client IP, raw timestamp and request fields from a line."""
        matched = self.match(line)
        if not matched:
            logger.debug("Skipping unmatched line: '%s'", line.strip())
            self.unmatched_lines += 1
            return None

        self.matched_lines += 1
        datadict = matched.groupdict()
        size = datadict["size"]

        return ParsedLogLine(
            ip_address=datadict["ip_address"],
            raw_timestamp=datadict["dateandtime"],
            method=datadict["method"],
            path=datadict["path"],
            protocol=datadict["protocol"],
            status_code=int(datadict["status_code"]),
            size=None if size == "-" else int(size),
            referrer=datadict["referrer"],
            user_agent=datadict["user_agent"],
        )
