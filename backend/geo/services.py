from __future__ import annotations

from dataclasses import dataclass

from django.apps import apps
from django.conf import settings
from django.core.cache import caches
from geopy.geocoders import Nominatim

from .engine import DistanceEngine
from .geocoding import Geocoder
from .region import ServiceRegion
from .routing import OsrmRouter


@dataclass
class GeoServices:
    region: ServiceRegion
    geocoder: Geocoder
    distances: DistanceEngine

    def close(self):
        close = getattr(self.distances.router, "close", None)
        if close:
            close()


def build_geo_services(*, geocoder_backend=None, router=None, cache=None) -> GeoServices:
    """Wire the geo stack from settings. Tests pass fakes for the backend/router."""
    cache = cache or caches["default"]
    region = ServiceRegion.from_settings()
    backend = geocoder_backend or Nominatim(user_agent=settings.GEOCODER_USER_AGENT,
                                            timeout=settings.GEOCODER_TIMEOUT_SECONDS)
    geocoder = Geocoder(
        backend, cache, region,
        country_codes=settings.GEOCODER_COUNTRY_CODES,
        country_suffix=settings.GEOCODER_COUNTRY_SUFFIX,
        min_delay_seconds=settings.GEOCODER_MIN_DELAY_SECONDS,
    )
    router = router or OsrmRouter(settings.ROUTING_BASE_URL, timeout=settings.ROUTING_TIMEOUT_SECONDS)
    distances = DistanceEngine(router, cache, ttl_seconds=settings.ROUTING_CACHE_TTL_SECONDS)
    return GeoServices(region=region, geocoder=geocoder, distances=distances)


def get_geo_services() -> GeoServices:
    return apps.get_app_config("geo").services
