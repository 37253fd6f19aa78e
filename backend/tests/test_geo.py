import pytest
import requests
from django.core.cache import cache
from geopy.exc import GeocoderServiceError

from geo.distance import format_distance, straight_line_km
from geo.engine import DistanceEngine
from geo.geocoding import Geocoder, normalize_address
from geo.region import GeoPoint, ServiceRegion
from geo.routing import OsrmRouter, downsample

from .conftest import COLOMBO, DEHIWALA, FakeNominatim, FakeRouter

REGION = ServiceRegion(min_lat=5, max_lat=10, min_lng=79, max_lng=82)


def test_region_is_inclusive_and_rejects_junk():
    assert REGION.point(5, 79) == GeoPoint(5.0, 79.0)
    assert REGION.point("10", "82") == GeoPoint(10.0, 82.0)
    assert REGION.point(10.0001, 80) is None
    assert REGION.point(None, 80) is None
    assert REGION.point("abc", 80) is None
    assert REGION.point(float("nan"), 80) is None
    assert REGION.point(True, 80) is None


def test_format_distance():
    assert format_distance(None) == "N/A"
    assert format_distance(0.35) == "350 m"
    assert format_distance(1) == "1.0 km"
    assert format_distance(12.345) == "12.3 km"


def test_straight_line_distance():
    km = straight_line_km(GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA))
    assert 8 < km < 9
    assert straight_line_km(None, GeoPoint(*COLOMBO)) is None


def test_geocoder_appends_country_and_caches_hits():
    backend = FakeNominatim()
    g = Geocoder(backend, cache, REGION, country_suffix="Sri Lanka", min_delay_seconds=0)
    assert g.geocode("Galle Road,  Colombo 03") == GeoPoint(*COLOMBO)
    assert g.geocode("galle road, colombo 03") == GeoPoint(*COLOMBO)
    assert backend.calls == ["Galle Road, Colombo 03, Sri Lanka"]


def test_geocoder_caches_not_found_and_out_of_region():
    backend = FakeNominatim()
    g = Geocoder(backend, cache, REGION, min_delay_seconds=0)
    assert g.geocode("Nowhere street") is None
    assert g.geocode("London") is None
    assert g.geocode("Nowhere street") is None
    assert g.geocode("London") is None
    assert len(backend.calls) == 2
    assert g.geocode("") is None
    assert g.geocode(None) is None


def test_geocoder_does_not_cache_service_errors():
    class Flaky(FakeNominatim):
        failures = 1

        def geocode(self, query, **kwargs):
            if self.failures:
                self.failures -= 1
                self.calls.append(query)
                raise GeocoderServiceError("down")
            return super().geocode(query, **kwargs)

    backend = Flaky()
    g = Geocoder(backend, cache, REGION, min_delay_seconds=0)
    assert g.geocode("Dehiwala Junction") is None
    assert g.geocode("Dehiwala Junction") == GeoPoint(*DEHIWALA)
    assert len(backend.calls) == 2
    assert all(q.startswith("Dehiwala Junction") for q in backend.calls)


def test_normalize_address():
    assert normalize_address("  Galle   Road\n Colombo ") == "galle road colombo"


def test_distance_engine_prefers_road_and_caches_it():
    router = FakeRouter(km=12.5)
    engine = DistanceEngine(router, cache, ttl_seconds=60)
    a, b = GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA)
    assert engine.distance_km(a, b) == 12.5
    assert engine.distance_km(a, b) == 12.5
    assert router.calls == 1


def test_distance_engine_falls_back_to_straight_line():
    router = FakeRouter(km=None)
    engine = DistanceEngine(router, cache)
    a, b = GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA)
    assert engine.distance_km(a, b) == pytest.approx(straight_line_km(a, b))
    assert engine.distance_km(a, b) == pytest.approx(straight_line_km(a, b))
    assert router.calls == 2  # failures are not cached
    assert engine.distance_km(a, None) is None


class _Resp:
    def __init__(self, status_code, data):
        self.status_code = status_code
        self._data = data

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


class _Session:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.urls = []
        self.params = []

    def get(self, url, params=None, timeout=None):
        self.urls.append(url)
        self.params.append(params)
        if self.exc:
            raise self.exc
        return self.response

    def close(self):
        pass


def test_osrm_router_reads_meters():
    session = _Session(_Resp(200, {"code": "Ok", "routes": [{"distance": 15300}]}))
    r = OsrmRouter("http://osrm.local/", session=session)
    assert r.route_distance_km(GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA)) == 15.3
    assert session.urls == [f"http://osrm.local/route/v1/driving/{COLOMBO[1]},{COLOMBO[0]};{DEHIWALA[1]},{DEHIWALA[0]}"]


@pytest.mark.parametrize("session", [
    _Session(exc=requests.Timeout("slow")),
    _Session(_Resp(503, {})),
    _Session(_Resp(200, ValueError("not json"))),
    _Session(_Resp(200, {"code": "NoRoute", "routes": []})),
    _Session(_Resp(200, {"code": "Ok", "routes": [{"distance": 0}]})),
])
def test_osrm_router_failures_are_none(session):
    r = OsrmRouter("http://osrm.local", session=session)
    assert r.route_distance_km(GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA)) is None


def test_downsample_keeps_both_ends():
    points = list(range(120))
    picked = downsample(points, 50)
    assert len(picked) == 50
    assert picked[0] == 0 and picked[-1] == 119
    assert picked == sorted(set(picked))
    assert downsample(points[:50], 50) == points[:50]


def test_osrm_router_reads_geojson_waypoints():
    coords = [[79.8612 + i * 0.0001, 6.9271 - i * 0.001] for i in range(80)]
    session = _Session(_Resp(200, {"code": "Ok", "routes": [{"geometry": {"coordinates": coords}}]}))
    r = OsrmRouter("http://osrm.local", session=session)
    points = r.route_waypoints(GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA))
    assert session.params == [{"overview": "full", "geometries": "geojson"}]
    assert len(points) == 50
    assert points[0] == GeoPoint(coords[0][1], coords[0][0])
    assert points[-1] == GeoPoint(coords[-1][1], coords[-1][0])


def test_osrm_router_waypoints_tell_outage_from_no_route():
    a, b = GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA)
    assert OsrmRouter("http://osrm.local", session=_Session(_Resp(502, {}))).route_waypoints(a, b) is None
    assert OsrmRouter("http://osrm.local", session=_Session(exc=requests.ConnectionError())).route_waypoints(a, b) is None
    no_route = _Session(_Resp(200, {"code": "NoRoute", "routes": []}))
    assert OsrmRouter("http://osrm.local", session=no_route).route_waypoints(a, b) == []


def test_distance_engine_caches_waypoints_but_not_outages():
    a, b = GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA)
    router = FakeRouter(waypoints=None)
    engine = DistanceEngine(router, cache)
    assert engine.route_waypoints(a, b) is None
    router.waypoints = [a, b]
    assert engine.route_waypoints(a, b) == [a, b]
    assert engine.route_waypoints(a, b) == [a, b]
    assert router.calls == 2
