"""
Role-specific read models over the donation table.

Receivers see unclaimed, unexpired donations. Drivers see claimed donations
without a driver, but only once they have shared a location and only when
driver->donor->receiver fits inside the service radius. Drivers also get
their own active and completed runs. Distances are road first, straight line
when the router is unavailable.
"""
import logging

from django.conf import settings
from django.utils import timezone

from accounts.models import Role
from geo.distance import format_distance
from geo.services import get_geo_services
from .models import Donation
from .positions import donor_position, driver_position, receiver_position
from .results import TransitionResult

log = logging.getLogger(__name__)

S = Donation.Status


def expiry_text(expiry_date, now=None) -> str:
    """'Expires in 3 hours 20 mins'; minutes are dropped from 24 hours up."""
    now = now or timezone.now()
    seconds = (expiry_date - now).total_seconds()
    if seconds <= 0:
        return "Expired"
    hours, minutes = divmod(int(seconds // 60), 60)
    mins = f"{minutes} {'min' if minutes == 1 else 'mins'}"
    if hours <= 0:
        return f"Expires in {mins}"
    text = f"Expires in {hours} {'hour' if hours == 1 else 'hours'}"
    if minutes > 0 and hours < 24:
        text += f" {mins}"
    return text


def _point_dict(point):
    return point.as_dict() if point else None


def _food(d: Donation) -> dict:
    return {
        "id": d.pk,
        "tracking_id": d.tracking_id,
        "item_name": d.item_name,
        "food_category": d.food_category,
        "quantity": d.quantity,
        "image_url": d.image_url,
        "expiry_date": d.expiry_date,
        "storage_recommendation": d.storage_recommendation,
        "status": d.status,
        "created_at": d.created_at,
        "updated_at": d.updated_at,
    }


def _pickup_window(d: Donation) -> dict:
    return {
        "preferred_pickup_date": d.preferred_pickup_date,
        "preferred_pickup_time_from": d.preferred_pickup_time_from,
        "preferred_pickup_time_to": d.preferred_pickup_time_to,
    }


def _ai(d: Donation) -> dict:
    return {
        "ai_quality_score": d.ai_quality_score,
        "ai_freshness": d.ai_freshness or None,
        "ai_confidence": d.ai_confidence,
        "ai_detected_items": d.ai_detected_items or [],
    }


def _donor(d: Donation) -> dict:
    donor = d.donor
    return {
        "donor_id": d.donor_id,
        "donor_name": donor.public_name,
        "donor_type": donor.donor_type or None,
        "donor_address": d.donor_address or donor.address,
        "donor_email": d.donor_email or donor.email,
    }


def _receiver(d: Donation) -> dict:
    r = d.assigned_receiver
    return {
        "receiver_id": d.assigned_receiver_id,
        "receiver_name": r.public_name if r else None,
        "receiver_type": r.receiver_type if r else None,
        "receiver_email": r.email if r else None,
        "receiver_address": d.receiver_address or (r.address if r else ""),
    }


def _driver(d: Donation) -> dict:
    drv = d.assigned_driver
    return {
        "assigned_driver_id": d.assigned_driver_id,
        "driver_name": drv.public_name if drv else None,
        "vehicle_number": drv.vehicle_number if drv else None,
        "vehicle_type": drv.vehicle_type if drv else None,
    }


def _with_distance(out: dict, key: str, km):
    out[key] = km
    out[f"{key}_formatted"] = format_distance(km)


# --- receivers --------------------------------------------------------------

def available_for_receiver(services=None, now=None) -> list:
    services = services or get_geo_services()
    now = now or timezone.now()
    qs = (Donation.objects.select_related("donor")
          .filter(status__in=Donation.CLAIMABLE, expiry_date__gt=now, assigned_receiver__isnull=True)
          .order_by("-created_at"))
    out = []
    for d in qs:
        point = donor_position(d, services)
        row = {**_food(d), **_donor(d), **_pickup_window(d), **_ai(d)}
        row["position"] = [point.lat, point.lng] if point else None
        out.append(row)
    log.info("available donations for receivers: %d", len(out))
    return out


def my_claims(receiver) -> list:
    qs = (Donation.objects.select_related("donor", "assigned_driver")
          .filter(assigned_receiver=receiver).order_by("-created_at"))
    return [{**_food(d), **_donor(d), **_driver(d), **_pickup_window(d), **_ai(d),
             "actual_pickup_date": d.actual_pickup_date} for d in qs]


# --- donors -----------------------------------------------------------------

def my_donations(donor) -> list:
    qs = (Donation.objects.select_related("assigned_receiver", "assigned_driver")
          .filter(donor=donor).order_by("-created_at"))
    return [{**_food(d), **_receiver(d), **_driver(d), **_pickup_window(d), **_ai(d),
             "actual_pickup_date": d.actual_pickup_date,
             "can_edit": d.is_editable} for d in qs]


def donor_detail(donor, donation_id) -> TransitionResult:
    """Everything the edit form needs; only the owning donor may read it."""
    d = Donation.objects.filter(pk=donation_id, donor=donor).first()
    if d is None:
        return TransitionResult.not_found()
    data = {
        **_food(d), **_pickup_window(d), **_ai(d),
        "preferred_pickup_date": d.preferred_pickup_date.isoformat(),
        "expiry_date": timezone.localdate(d.expiry_date).isoformat(),
        "expiry_date_from_package": d.expiry_date_from_package,
        "donor_latitude": d.donor_latitude,
        "donor_longitude": d.donor_longitude,
        "product_type": d.product_type or None,
        "can_edit": d.is_editable,
    }
    return TransitionResult.success(donation=d, data=data)


# --- drivers ----------------------------------------------------------------

def available_pickups(driver, services=None, now=None) -> dict:
    """
    Claimed, driverless, unexpired donations whose driver->donor->receiver
    total is known and within FOODLOOP_DRIVER_SERVICE_RADIUS_KM (inclusive).
    Nothing is shown until the driver has shared a location.
    """
    services = services or get_geo_services()
    now = now or timezone.now()
    origin = driver_position(driver, services)
    if origin is None:
        return {"pickups": [], "driver_location": None}

    radius = settings.FOODLOOP_DRIVER_SERVICE_RADIUS_KM
    qs = (Donation.objects.select_related("donor", "assigned_receiver")
          .filter(status=S.ASSIGNED, assigned_receiver__isnull=False,
                  assigned_driver__isnull=True, expiry_date__gt=now)
          .order_by("-created_at"))
    pickups = []
    for d in qs:
        donor_at = donor_position(d, services)
        receiver_at = receiver_position(d, services)
        to_donor = services.distances.distance_km(origin, donor_at)
        to_receiver = services.distances.distance_km(donor_at, receiver_at)
        total = to_donor + to_receiver if to_donor is not None and to_receiver is not None else None
        if total is None or total > radius:
            continue

        row = {**_food(d), **_donor(d), **_receiver(d), **_pickup_window(d),
               "expiry_text": expiry_text(d.expiry_date, now),
               "donor_location": _point_dict(donor_at),
               "receiver_location": _point_dict(receiver_at)}
        _with_distance(row, "driver_to_donor_distance", to_donor)
        _with_distance(row, "donor_to_receiver_distance", to_receiver)
        _with_distance(row, "total_route_distance", total)
        pickups.append(row)

    log.info("driver %s: %d pickups within %s km", driver.pk, len(pickups), radius)
    return {"pickups": pickups, "driver_location": origin.as_dict()}


def active_deliveries(driver, services=None, now=None) -> dict:
    services = services or get_geo_services()
    now = now or timezone.now()
    origin = driver_position(driver, services)
    qs = (Donation.objects.select_related("donor", "assigned_receiver")
          .filter(assigned_driver=driver, status__in=Donation.ACTIVE_FOR_DRIVER, expiry_date__gt=now)
          .order_by("-updated_at"))
    deliveries = []
    for d in qs:
        donor_at = donor_position(d, services)
        receiver_at = receiver_position(d, services)
        row = {**_food(d), **_donor(d), **_receiver(d),
               "expiry_text": expiry_text(d.expiry_date, now),
               "actual_pickup_date": d.actual_pickup_date,
               "donor_location": _point_dict(donor_at),
               "receiver_location": _point_dict(receiver_at)}
        _with_distance(row, "driver_to_receiver_distance", services.distances.distance_km(origin, receiver_at))
        _with_distance(row, "driver_to_donor_distance", services.distances.distance_km(origin, donor_at))
        deliveries.append(row)
    return {"deliveries": deliveries, "driver_location": _point_dict(origin)}


def driver_completed(driver) -> list:
    qs = (Donation.objects.select_related("donor", "assigned_receiver")
          .filter(assigned_driver=driver, status=S.DELIVERED).order_by("-delivered_at", "-updated_at"))
    return [{
        "id": d.pk,
        "tracking_id": d.tracking_id,
        "item_name": d.item_name,
        "quantity": d.quantity,
        "image_url": d.image_url,
        "donor_name": d.donor.public_name,
        "donor_address": d.donor_address or d.donor.address,
        "receiver_name": d.assigned_receiver.public_name,
        "receiver_address": d.receiver_address or d.assigned_receiver.address,
        "delivered_at": d.delivered_at or d.updated_at,
        "created_at": d.created_at,
    } for d in qs]


# --- tracking ---------------------------------------------------------------

def tracking_snapshot(viewer, donation_id, services=None) -> TransitionResult:
    """Parties and last known positions; visible to the donation's parties and admins."""
    d = (Donation.objects.select_related("donor", "assigned_receiver", "assigned_driver")
         .filter(pk=donation_id).first())
    if d is None:
        return TransitionResult.not_found()
    parties = {d.donor_id, d.assigned_receiver_id, d.assigned_driver_id}
    if viewer.pk not in parties and viewer.role != Role.ADMIN and not viewer.is_superuser:
        return TransitionResult.forbidden("You are not a party to this donation")

    services = services or get_geo_services()
    donor, receiver, driver = d.donor, d.assigned_receiver, d.assigned_driver
    data = {
        "donation": {"id": d.pk, "tracking_id": d.tracking_id, "status": d.status,
                     "item_name": d.item_name, "quantity": d.quantity, "image_url": d.image_url},
        "donor": {
            "id": donor.pk,
            "name": donor.public_name,
            "address": d.donor_address or donor.address,
            "contact_no": donor.contact_no or None,
            "email": donor.email or d.donor_email,
            "location": _point_dict(services.region.point(d.donor_latitude, d.donor_longitude)),
        },
        "receiver": {
            "id": receiver.pk,
            "name": receiver.public_name,
            "address": d.receiver_address or receiver.address,
            "contact_no": receiver.contact_no or None,
            "location": _point_dict(receiver_position(d, services)),
        } if receiver else None,
        "driver": {
            "id": driver.pk,
            "name": driver.public_name,
            "vehicle_number": driver.vehicle_number,
            "vehicle_type": driver.vehicle_type,
            "location": _point_dict(driver_position(driver, services)),
        } if driver else None,
        "timestamps": {"created_at": d.created_at, "actual_pickup_date": d.actual_pickup_date,
                       "delivered_at": d.delivered_at, "updated_at": d.updated_at},
    }
    return TransitionResult.success(donation=d, data=data)
