from __future__ import annotations

import logging
from typing import List, Optional

from .distance import straight_line_km
from .region import GeoPoint

log = logging.getLogger(__name__)


class DistanceEngine:
    """
    Road distance first, great-circle fallback.
    Successful road lookups are cached briefly, keyed by rounded coordinates.
    """
    def __init__(self, router, cache, ttl_seconds: int = 300, precision: int = 4):
        self.router = router
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.precision = precision

    def _cache_key(self, a: GeoPoint, b: GeoPoint, kind: str = "route") -> str:
        p = self.precision
        return f"{kind}:{round(a.lat, p)},{round(a.lng, p)}:{round(b.lat, p)},{round(b.lng, p)}"

    def route_km(self, a: GeoPoint, b: GeoPoint) -> Optional[float]:
        key = self._cache_key(a, b)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        km = self.router.route_distance_km(a, b)
        if km is not None:
            self.cache.set(key, km, self.ttl_seconds)
        return km

    def route_waypoints(self, a: GeoPoint, b: GeoPoint) -> Optional[List[GeoPoint]]:
        """Road geometry for drawing; None when the router is unavailable, [] when there is no route."""
        key = self._cache_key(a, b, kind="waypoints")
        cached = self.cache.get(key)
        if cached is not None:
            return [GeoPoint(lat, lng) for lat, lng in cached]
        points = self.router.route_waypoints(a, b)
        if points:
            self.cache.set(key, [(p.lat, p.lng) for p in points], self.ttl_seconds)
        return points

    def distance_km(self, a: Optional[GeoPoint], b: Optional[GeoPoint]) -> Optional[float]:
        if a is None or b is None:
            return None
        km = self.route_km(a, b)
        if km is None:
            km = straight_line_km(a, b)
        return km
