from pathlib import Path
from types import SimpleNamespace

import pytest
from geoip2.errors import AddressNotFoundError

from geotrail.services.geoip import resolver as resolver_module
from geotrail.services.geoip.resolver import GeoIP2Resolver, GeoResolver
from geotrail.services.logparser.schemas import LocationRecord

from conftest import StubResolver


def make_city(
    iso_code="US",
    country_name="United States",
    state="California",
    city="Mountain View",
    latitude=37.4,
    longitude=-122.1,
):
    """Minimal stand-in for a geoip2.models.City."""
    return SimpleNamespace(
        country=SimpleNamespace(iso_code=iso_code, name=country_name),
        subdivisions=SimpleNamespace(most_specific=SimpleNamespace(name=state, iso_code="CA")),
        city=SimpleNamespace(name=city),
        location=SimpleNamespace(latitude=latitude, longitude=longitude, time_zone="America/Los_Angeles"),
    )


class FakeReader:
    def __init__(self, city=None, error: Exception | None = None) -> None:
        self._city = city
        self._error = error
        self.lookups: list[str] = []
        self.closed = False

    def city(self, ip: str):
        self.lookups.append(ip)
        if self._error:
            raise self._error
        return self._city

    def close(self) -> None:
        self.closed = True


def test_resolve_maps_city_record() -> None:
    resolver = GeoIP2Resolver(FakeReader(make_city()))
    assert resolver.resolve("52.53.54.55") == LocationRecord(
        country_code="US",
        country="United States",
        region="California",
        city="Mountain View",
        latitude=37.4,
        longitude=-122.1,
    )
    assert resolver.resolved == 1


def test_resolve_missing_names_become_empty() -> None:
    city = make_city(state=None, city=None, latitude=None, longitude=None)
    location = GeoIP2Resolver(FakeReader(city)).resolve("52.53.54.55")
    assert location is not None
    assert location.region == ""
    assert location.city == ""
    assert location.latitude is None
    assert location.longitude is None


def test_resolve_address_not_found() -> None:
    resolver = GeoIP2Resolver(FakeReader(error=AddressNotFoundError("The address 10.0.0.1 is not in the database.")))
    assert resolver.resolve("10.0.0.1") is None
    assert resolver.unresolved == 1


def test_resolve_invalid_ip_skips_lookup() -> None:
    reader = FakeReader(make_city())
    resolver = GeoIP2Resolver(reader)
    assert resolver.resolve("999.999.999.999") is None
    assert reader.lookups == []


def test_get_ip_type() -> None:
    resolver = GeoIP2Resolver(FakeReader())
    assert resolver.get_ip_type("10.10.10.1") == "PRIVATE"
    assert resolver.get_ip_type("52.53.54.55") == "PUBLIC"
    assert resolver.get_ip_type("10.10.10.256") == ""


def test_context_manager_closes_reader() -> None:
    reader = FakeReader()
    with GeoIP2Resolver(reader):
        pass
    assert reader.closed is True


def test_from_path_opens_reader(monkeypatch) -> None:
    opened = {}

    def fake_reader(path, locales=None):
        opened["path"] = path
        opened["locales"] = locales
        return FakeReader()

    monkeypatch.setattr(resolver_module, "Reader", fake_reader)
    GeoIP2Resolver.from_path(Path("data/GeoLite2-City.mmdb"), ["de", "en"])
    assert opened == {"path": "data/GeoLite2-City.mmdb", "locales": ["de", "en"]}


def test_from_path_unknown_locale_defaults_to_en(monkeypatch) -> None:
    opened = {}

    def fake_reader(path, locales=None):
        opened["locales"] = locales
        return FakeReader()

    monkeypatch.setattr(resolver_module, "Reader", fake_reader)
    GeoIP2Resolver.from_path(Path("GeoLite2-City.mmdb"), ["xx"])
    assert opened["locales"] == ["en"]


def test_from_path_missing_database(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        GeoIP2Resolver.from_path(tmp_path / "missing.mmdb")


def test_protocol_conformance() -> None:
    assert isinstance(GeoIP2Resolver(FakeReader()), GeoResolver)
    assert isinstance(StubResolver(), GeoResolver)
