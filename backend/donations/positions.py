"""Where the parties of a donation are, as far as we can tell."""
import logging
from typing import Optional

from django.db import DatabaseError

from geo.region import GeoPoint
from .models import Donation

log = logging.getLogger(__name__)


def donor_position(donation: Donation, services, persist: bool = True) -> Optional[GeoPoint]:
    """
    Stored coordinates when they are inside the service region; otherwise the
    geocoded donor address, written back to the row for next time.
    """
    point = services.region.point(donation.donor_latitude, donation.donor_longitude)
    if point is not None:
        return point
    address = donation.donor_address or getattr(donation.donor, "address", "")
    point = services.geocoder.geocode(address)
    if point is None:
        if address:
            log.warning("donation %s: could not geocode donor address", donation.pk)
        return None
    if persist:
        try:
            Donation.objects.filter(pk=donation.pk).update(donor_latitude=point.lat, donor_longitude=point.lng)
            donation.donor_latitude, donation.donor_longitude = point.lat, point.lng
        except DatabaseError:
            log.exception("donation %s: saving geocoded donor coordinates failed", donation.pk)
    return point


def receiver_position(donation: Donation, services) -> Optional[GeoPoint]:
    """Location confirmed at claim time, else the claim address or the receiver's profile address."""
    point = services.region.point(donation.receiver_latitude, donation.receiver_longitude)
    if point is not None:
        return point
    receiver = donation.assigned_receiver
    address = donation.receiver_address or (receiver.address if receiver else "")
    return services.geocoder.geocode(address)


def driver_position(driver, services) -> Optional[GeoPoint]:
    if driver is None:
        return None
    return services.region.point(driver.driver_latitude, driver.driver_longitude)
