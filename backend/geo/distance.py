from __future__ import annotations

from typing import Optional

from geopy.distance import great_circle

from .region import GeoPoint


def straight_line_km(a: Optional[GeoPoint], b: Optional[GeoPoint]) -> Optional[float]:
    """Great-circle (haversine) distance in km, or None when either side is unknown."""
    if a is None or b is None:
        return None
    return great_circle((a.lat, a.lng), (b.lat, b.lng)).km


def format_distance(km: Optional[float]) -> str:
    if km is None:
        return "N/A"
    if km < 1:
        return f"{round(km * 1000)} m"
    return f"{km:.1f} km"
