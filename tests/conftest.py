import os
from pathlib import Path

import pytest

from geotrail.services.logparser.schemas import LocationRecord

TESTS_DIR = Path(__file__).parent
VALID_LOG_PATH = TESTS_DIR / "valid_ipv4_log.txt"
INVALID_LOG_PATH = TESTS_DIR / "invalid_logs.txt"

SCENARIO_LINE = (
    '10.0.0.1 - - [10/Oct/2021:13:55:36 +0000] "GET /index.html HTTP/1.1" 200 2326 "-" "Mozilla/5.0"'
)

MOUNTAIN_VIEW = LocationRecord(
    country_code="US",
    country="United States",
    region="CA",
    city="Mountain View",
    latitude=37.4,
    longitude=-122.1,
)

TOKYO = LocationRecord(
    country_code="JP",
    country="Japan",
    region="Tokyo",
    city="Shibuya",
    latitude=35.66,
    longitude=139.7,
)


class StubResolver:
    """In-memory resolver keyed by IP; unknown IPs are unresolved."""

    def __init__(self, locations: dict[str, LocationRecord] | None = None, default: LocationRecord | None = None):
        self.locations = locations or {}
        self.default = default
        self.calls: list[str] = []

    def resolve(self, ip: str) -> LocationRecord | None:
        self.calls.append(ip)
        return self.locations.get(ip, self.default)


def make_line(ip: str = "10.0.0.1", timestamp: str = "10/Oct/2021:13:55:36 +0000") -> str:
    return f'{ip} - - [{timestamp}] "GET /index.html HTTP/1.1" 200 2326 "-" "Mozilla/5.0"\n'


@pytest.fixture(scope="session", autouse=True)
def baseline_settings_env():
    """Provide baseline env vars so tests are not affected by local .env.

    Pydantic-settings precedence: init args > env vars > .env > defaults.
    Setting these ensures stable defaults regardless of any .env present.
    """
    os.environ.update({
        # App
        "APP_NAME": "geotrail",
        "APP_VERSION": "0.1.0",
        "APP_DEBUG": "false",
        "APP_LOG_LEVEL": "WARNING",
        # GeoIP
        "GEOIP_DB_PATH": "data/GeoLite2-City.mmdb",
        "GEOIP_LOCALES": '["en"]',
        # Scanner
        "SCANNER_FORMATTERS": '["print"]',
        "SCANNER_ON_TIMESTAMP_ERROR": "abort",
        "SCANNER_OUTPUTS": "{}",
    })


@pytest.fixture(autouse=True)
def refresh_settings_cache():
    """Clear settings cache so env changes take effect per test.

    Ensures tests using monkeypatch.setenv() get a fresh Settings instance.
    """
    from geotrail.config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def load_valid_ipv4_log() -> list[str]:
    """Load the contents of the valid IPv4 log file."""
    with open(VALID_LOG_PATH, "r", encoding="utf-8") as f:
        return f.readlines()


@pytest.fixture
def load_invalid_logs() -> list[str]:
    """Load the contents of the invalid log file."""
    with open(INVALID_LOG_PATH, "r", encoding="utf-8") as f:
        return f.readlines()


@pytest.fixture
def scenario_line() -> str:
    return SCENARIO_LINE


@pytest.fixture
def stub_resolver() -> StubResolver:
    """Resolver placing every IP in Mountain View."""
    return StubResolver(default=MOUNTAIN_VIEW)
