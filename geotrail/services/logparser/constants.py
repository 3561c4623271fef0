"""Patterns and constants used by the access log parser."""
import re
from functools import lru_cache

# Locales shipped in the MaxMind GeoIP2/GeoLite2 databases
ALLOWED_GEOIP_LOCALES = ["de", "en", "es", "fr", "ja", "pt-BR", "ru", "zh-CN"]
GEOIP_LOCALES_DEFAULT = ["en"]

# Strict layout of the bracketed timestamp, e.g. 10/Oct/2021:13:55:36 +0000.
# Years have 2-4 digits, the offset 1-5 digits read as [H]HMM.
TIMESTAMP_REGEX = r"""
    (?P<day>\d{1,2})/(?P<month>[a-z]{3})/(?P<year>\d{2,4}):
    (?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})\s
    (?P<sign>[+-])(?P<offset>\d{1,5})
"""

MONTH_ABBREVIATIONS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# Two-digit years pivot like POSIX %y: 69-99 -> 19xx, 00-68 -> 20xx
TWO_DIGIT_YEAR_PIVOT = 69

ACCESS_LOG_REGEX = r"""
    (?P<ip_address>\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})\s+
    .*\s+
    \[(?P<dateandtime>\d{1,2}/\w+/\d{2,4}:\d{2}:\d{2}:\d{2}\s[+-]\d{1,4})\]\s+
    "(?P<method>\w+)\s+(?P<path>.+)\s+(?P<protocol>[\w/.\\]+)\s*"\s+
    (?P<status_code>\d{3})\s+(?P<size>\d+|-)\s+
    "(?P<referrer>.*)"\s+
    "(?P<user_agent>.*)"
"""


@lru_cache
def access_log_pattern() -> re.Pattern[str]:
    """Compiled combined/common log format pattern.

    Case-insensitive, and ``.`` also matches newlines so records that were
    split over several physical lines still match.
    """
    return re.compile(ACCESS_LOG_REGEX, re.IGNORECASE | re.VERBOSE | re.DOTALL)


@lru_cache
def timestamp_pattern() -> re.Pattern[str]:
    """Compiled strict layout for the bracketed timestamp."""
    return re.compile(TIMESTAMP_REGEX, re.IGNORECASE | re.VERBOSE)
