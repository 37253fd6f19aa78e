from __future__ import annotations

from dataclasses import dataclass
from math import isfinite
from typing import Optional

from django.conf import settings


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def as_dict(self) -> dict:
        return {"latitude": self.lat, "longitude": self.lng}


def _as_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if isfinite(f) else None


@dataclass(frozen=True)
class ServiceRegion:
    """Inclusive lat/lng rectangle every client-supplied coordinate must fall in."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @classmethod
    def from_settings(cls) -> "ServiceRegion":
        return cls(**settings.FOODLOOP_SERVICE_REGION)

    def contains(self, point: Optional[GeoPoint]) -> bool:
        if point is None:
            return False
        return self.min_lat <= point.lat <= self.max_lat and self.min_lng <= point.lng <= self.max_lng

    def point(self, lat, lng) -> Optional[GeoPoint]:
        """Coerce a raw pair to a GeoPoint; anything missing, non-numeric or outside the box is None."""
        flat, flng = _as_float(lat), _as_float(lng)
        if flat is None or flng is None:
            return None
        p = GeoPoint(flat, flng)
        return p if self.contains(p) else None
