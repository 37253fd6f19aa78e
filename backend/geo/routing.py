from __future__ import annotations

import logging
from typing import List, Optional

import requests

from .region import GeoPoint

log = logging.getLogger(__name__)

MAX_WAYPOINTS = 50


def downsample(points: list, max_points: int = MAX_WAYPOINTS) -> list:
    """Evenly spaced subset of at most max_points, always keeping both ends."""
    n = len(points)
    if n <= max_points:
        return list(points)
    step = (n - 1) / (max_points - 1)
    picked = [points[min(int(i * step + 0.5), n - 1)] for i in range(max_points - 1)]
    picked.append(points[-1])
    return picked


class OsrmRouter:
    """
    Driving routes along roads via an OSRM server.
    Returns None on any failure (timeout, non-200, malformed payload) so the
    caller can fall back to the straight-line distance.
    """
    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _route(self, a: GeoPoint, b: GeoPoint, params: dict) -> Optional[dict]:
        url = f"{self.base_url}/route/v1/driving/{a.lng},{a.lat};{b.lng},{b.lat}"
        try:
            r = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("route lookup failed: %s", e)
            return None
        if r.status_code != 200:
            log.warning("route lookup returned HTTP %s", r.status_code)
            return None
        try:
            data = r.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    def route_distance_km(self, a: GeoPoint, b: GeoPoint) -> Optional[float]:
        data = self._route(a, b, {"overview": "false"})
        if data is None or data.get("code") != "Ok":
            return None
        routes = data.get("routes") or [{}]
        meters = routes[0].get("distance") if isinstance(routes[0], dict) else None
        if not isinstance(meters, (int, float)) or meters <= 0:
            return None
        return meters / 1000.0

    def route_waypoints(self, a: GeoPoint, b: GeoPoint, max_points: int = MAX_WAYPOINTS) -> Optional[List[GeoPoint]]:
        """
        Road geometry from a to b, downsampled for drawing on a map.
        None when the server cannot be used; an empty list when it answers
        but has no route between the points.
        """
        data = self._route(a, b, {"overview": "full", "geometries": "geojson"})
        if data is None:
            return None
        routes = data.get("routes") if data.get("code") == "Ok" else None
        route = routes[0] if routes and isinstance(routes[0], dict) else {}
        coords = (route.get("geometry") or {}).get("coordinates") or []
        points = [GeoPoint(float(c[1]), float(c[0])) for c in coords
                  if isinstance(c, (list, tuple)) and len(c) >= 2]
        return downsample(points, max_points)

    def close(self):
        self.session.close()
