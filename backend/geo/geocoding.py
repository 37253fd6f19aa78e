"""
Address -> coordinates, memoized.

Lookups go through Nominatim (OpenStreetMap) with a self-imposed delay
between calls. Results are cached with no expiry, keyed by the normalized
address; "not found" is cached too so a bad address is only looked up once.
Service errors are not cached.
"""
from __future__ import annotations

import hashlib
import logging
from typing import Optional

from geopy.exc import GeopyError
from geopy.extra.rate_limiter import RateLimiter

from .region import GeoPoint, ServiceRegion

log = logging.getLogger(__name__)

_MISS = "__not_found__"


def normalize_address(address: str) -> str:
    return " ".join((address or "").split()).lower()


class Geocoder:
    def __init__(self, backend, cache, region: ServiceRegion, *,
                 country_codes: str = "", country_suffix: str = "",
                 min_delay_seconds: float = 1.0):
        self.backend = backend
        self.cache = cache
        self.region = region
        self.country_codes = country_codes
        self.country_suffix = country_suffix
        if min_delay_seconds:
            self._lookup = RateLimiter(backend.geocode, min_delay_seconds=min_delay_seconds,
                                       max_retries=0, swallow_exceptions=False)
        else:
            self._lookup = backend.geocode

    def _cache_key(self, normalized: str) -> str:
        return "geocode:" + hashlib.sha1(normalized.encode("utf-8")).hexdigest()

    def _query(self, address: str) -> str:
        q = " ".join(address.split())
        suffix = self.country_suffix
        if suffix and suffix.lower() not in q.lower():
            q = f"{q}, {suffix}"
        return q

    def geocode(self, address: Optional[str]) -> Optional[GeoPoint]:
        normalized = normalize_address(address or "")
        if not normalized:
            return None

        key = self._cache_key(normalized)
        cached = self.cache.get(key)
        if cached == _MISS:
            return None
        if cached is not None:
            return GeoPoint(*cached)

        kwargs = {"exactly_one": True}
        if self.country_codes:
            kwargs["country_codes"] = self.country_codes
        try:
            location = self._lookup(self._query(address), **kwargs)
        except GeopyError as e:
            log.warning("geocode failed for %r: %s", address, e)
            return None

        if location is None:
            log.info("geocode: no result for %r", address)
            self.cache.set(key, _MISS, None)
            return None

        point = GeoPoint(float(location.latitude), float(location.longitude))
        if not self.region.contains(point):
            log.warning("geocode: %r resolved outside the service region (%s, %s)", address, point.lat, point.lng)
            self.cache.set(key, _MISS, None)
            return None

        self.cache.set(key, (point.lat, point.lng), None)
        return point
