import re
from datetime import datetime, timedelta, timezone

import pytest

from geotrail.exceptions import TimestampParseError
from geotrail.services.logparser.constants import access_log_pattern
from geotrail.services.logparser.logparser import LogLineParser, normalize_timestamp
from geotrail.services.logparser.schemas import ParsedLogLine


@pytest.fixture
def ipv4_log_pattern() -> re.Pattern[str]:
    """Return the regular expression pattern for an access log line."""
    return access_log_pattern()


@pytest.fixture
def log_parser() -> LogLineParser:
    """Return an instance of the LogLineParser class."""
    return LogLineParser()


def test_regex_tester_ipv4(load_valid_ipv4_log: list[str], ipv4_log_pattern: re.Pattern[str]) -> None:
    """Every valid line matches the grammar."""
    for line in load_valid_ipv4_log:
        assert bool(ipv4_log_pattern.search(line)) is True


def test_regex_tester_invalid(load_invalid_logs: list[str], ipv4_log_pattern: re.Pattern[str]) -> None:
    """None of the invalid lines match the grammar."""
    for line in load_invalid_logs:
        assert bool(ipv4_log_pattern.search(line)) is False


def test_parse_scenario_line(log_parser: LogLineParser, scenario_line: str) -> None:
    parsed = log_parser.parse(scenario_line)
    assert parsed == ParsedLogLine(
        ip_address="10.0.0.1",
        raw_timestamp="10/Oct/2021:13:55:36 +0000",
        method="GET",
        path="/index.html",
        protocol="HTTP/1.1",
        status_code=200,
        size=2326,
        referrer="-",
        user_agent="Mozilla/5.0",
    )


def test_parse_dash_size_and_user(log_parser: LogLineParser, load_valid_ipv4_log: list[str]) -> None:
    """A dash size means no size was recorded."""
    parsed = log_parser.parse(load_valid_ipv4_log[1])
    assert parsed is not None
    assert parsed.ip_address == "52.53.54.55"
    assert parsed.method == "POST"
    assert parsed.status_code == 302
    assert parsed.size is None
    assert parsed.referrer == "https://example.com/"
    assert parsed.user_agent == "curl/8.4.0"


def test_parse_empty_quoted_fields_and_spaces_in_path(log_parser: LogLineParser, load_valid_ipv4_log: list[str]) -> None:
    parsed = log_parser.parse(load_valid_ipv4_log[2])
    assert parsed is not None
    # Grammar is case-insensitive, the method is kept as written
    assert parsed.method == "get"
    assert parsed.path == "/search?q=a b"
    assert parsed.protocol == "HTTP/2.0"
    assert parsed.referrer == ""
    assert parsed.user_agent == ""


def test_parse_user_agent_with_spaces(log_parser: LogLineParser, load_valid_ipv4_log: list[str]) -> None:
    parsed = log_parser.parse(load_valid_ipv4_log[3])
    assert parsed is not None
    assert parsed.user_agent == "Mozilla/5.0 (X11; Linux x86_64)"
    assert parsed.size == 0


def test_parse_out_of_range_ip_still_matches(log_parser: LogLineParser) -> None:
    """Octets are not range checked, resolution is the backstop."""
    line = '999.999.999.999 - - [10/Oct/2021:13:55:36 +0000] "GET / HTTP/1.1" 200 1 "-" "-"'
    parsed = log_parser.parse(line)
    assert parsed is not None
    assert parsed.ip_address == "999.999.999.999"


def test_parse_record_split_over_lines(log_parser: LogLineParser) -> None:
    line = '10.0.0.1 - -\n[10/Oct/2021:13:55:36 +0000] "GET / HTTP/1.1" 200 1\n"-" "Mozilla/5.0"'
    parsed = log_parser.parse(line)
    assert parsed is not None
    assert parsed.user_agent == "Mozilla/5.0"


def test_parse_unmatched_counts(log_parser: LogLineParser, load_invalid_logs: list[str]) -> None:
    for line in load_invalid_logs:
        assert log_parser.parse(line) is None
    assert log_parser.unmatched_lines == len(load_invalid_logs)
    assert log_parser.matched_lines == 0


def test_normalize_timestamp_utc() -> None:
    ts = normalize_timestamp("10/Oct/2021:13:55:36 +0000")
    assert ts.isoformat() == "2021-10-10T13:55:36+00:00"


def test_normalize_timestamp_keeps_offset() -> None:
    ts = normalize_timestamp("11/Oct/2021:08:01:02 -0700")
    assert ts.utcoffset() == timedelta(hours=-7)
    assert ts == datetime(2021, 10, 11, 15, 1, 2, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("10/Oct/21:13:55:36 +0000", "2021-10-10T13:55:36+00:00"),
        ("10/Oct/99:13:55:36 +0000", "1999-10-10T13:55:36+00:00"),
        ("10/Oct/021:13:55:36 +0000", "0021-10-10T13:55:36+00:00"),
        ("1/oct/2021:13:55:36 +0000", "2021-10-01T13:55:36+00:00"),
        ("10/Oct/2021:13:55:36 +0", "2021-10-10T13:55:36+00:00"),
        ("10/Oct/2021:13:55:36 +000", "2021-10-10T13:55:36+00:00"),
        ("10/Oct/2021:13:55:36 +530", "2021-10-10T13:55:36+05:30"),
        ("10/Oct/2021:13:55:36 -45", "2021-10-10T13:55:36-00:45"),
        ("10/Oct/2021:13:55:36 +00100", "2021-10-10T13:55:36+01:00"),
    ],
)
def test_normalize_timestamp_short_forms(raw: str, expected: str) -> None:
    """Two-digit years pivot like %y, short offsets are read as [H]HMM."""
    assert normalize_timestamp(raw).isoformat() == expected


@pytest.mark.parametrize(
    "raw",
    [
        "10/Foo/2021:13:55:36 +0000",  # unknown month
        "10/September/2021:13:55:36 +0000",  # month name too long
        "29/Feb/2021:13:55:36 +0000",  # not a leap year
        "10/Oct/2021:13:55:36 +0060",  # offset minutes out of range
        "10/Oct/2021:13:55:36 +2400",  # offset hours out of range
        "32/Oct/2021:13:55:36 +0000",  # no such day
        "10/Oct/2021:25:55:36 +0000",  # no such hour
    ],
)
def test_normalize_timestamp_rejects_layout_mismatch(raw: str) -> None:
    """Strings the grammar accepts but the strict layout does not."""
    assert access_log_pattern().search(
        f'10.0.0.1 - - [{raw}] "GET / HTTP/1.1" 200 1 "-" "-"'
    )
    with pytest.raises(TimestampParseError) as exc_info:
        normalize_timestamp(raw)
    assert exc_info.value.raw == raw
    assert isinstance(exc_info.value, ValueError)
