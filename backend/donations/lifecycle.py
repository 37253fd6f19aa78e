"""
Donation state machine.

    pending/approved --claim--> assigned --accept-order--> assigned (+driver)
    assigned --confirm-pickup--> picked_up --confirm-delivery--> delivered
    pending/approved/assigned-without-driver --cancel--> cancelled

Every transition is a single conditional UPDATE with its guard in the WHERE
clause. When no row matches, the donation is re-read only to explain why; the
caller gets a TransitionResult, never an exception, for a rule violation.
Notifications are queued with transaction.on_commit and cannot undo a commit.
"""
import logging

from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction
from django.utils import timezone

from accounts.models import Role, User
from audit.utils import audit_log
from foodloop.api import field_errors
from geo.services import get_geo_services
from notifications.models import EventType
from notifications.services import notify
from .expiry import calculate_expiry
from .forms import ClaimForm, DonationEditForm, DonationForm
from .models import Donation
from .results import TransitionResult
from .tracking import next_tracking_id

log = logging.getLogger(__name__)

S = Donation.Status

ONE_ORDER_AT_A_TIME = "You can only accept one order at a time. Complete your current delivery first."
NOT_CLAIMED_YET = "This donation has not been claimed by a receiver yet"
OTHER_DRIVER = "This donation has already been assigned to another driver"


def _load(donation_id):
    return (Donation.objects.select_related("donor", "assigned_receiver", "assigned_driver")
            .filter(pk=donation_id).first())


def _has_active_order(driver) -> bool:
    return Donation.objects.filter(assigned_driver=driver, status__in=Donation.ACTIVE_FOR_DRIVER).exists()


def _lock_driver(driver):
    # serializes one driver's accept/pickup attempts so the one-active-order check holds
    User.objects.select_for_update().only("pk").get(pk=driver.pk)


# --- create -----------------------------------------------------------------

def create_donation(donor, data, services=None, now=None) -> TransitionResult:
    if donor.role != Role.DONOR:
        return TransitionResult.forbidden("Only donors can create donations")
    form = DonationForm(data)
    if not form.is_valid():
        return TransitionResult.invalid("Invalid donation details", field_errors(form))
    if not donor.address:
        return TransitionResult.invalid("Donor address is missing. Please update your profile with an address.")
    if not donor.email:
        return TransitionResult.invalid("Donor email is missing. Please update your profile.")

    cd = form.cleaned_data
    now = now or timezone.now()
    expiry = calculate_expiry(cd.get("product_type") or None, cd.get("expiry_date_from_package"),
                              cd.get("user_provided_expiry_date"), now)

    point = form.donor_point()
    if point is None:
        if cd.get("donor_latitude") is not None or cd.get("donor_longitude") is not None:
            log.warning("donor %s sent coordinates outside the service region; geocoding address", donor.pk)
        point = (services or get_geo_services()).geocoder.geocode(donor.address)

    try:
        with transaction.atomic():
            donation = Donation.objects.create(
                tracking_id=next_tracking_id(now),
                donor=donor,
                food_category=cd["food_category"],
                item_name=cd["item_name"],
                quantity=cd["quantity"],
                storage_recommendation=cd["storage_recommendation"],
                image_url=cd["image_url"],
                preferred_pickup_date=cd["preferred_pickup_date"],
                preferred_pickup_time_from=cd["preferred_pickup_time_from"],
                preferred_pickup_time_to=cd["preferred_pickup_time_to"],
                product_type=cd.get("product_type") or "",
                expiry_date=expiry,
                expiry_date_from_package=cd.get("expiry_date_from_package"),
                donor_address=donor.address,
                donor_email=donor.email,
                donor_latitude=point.lat if point else None,
                donor_longitude=point.lng if point else None,
                ai_confidence=cd.get("ai_confidence"),
                ai_quality_score=cd.get("ai_quality_score"),
                ai_freshness=cd.get("ai_freshness") or "",
                ai_detected_items=cd.get("ai_detected_items") or [],
                created_at=now,
            )
            audit_log(donor, "DONATION_CREATED", target=donation,
                      payload={"tracking_id": donation.tracking_id, "expiry_date": expiry.isoformat()})
            receivers = User.objects.active_with_role(Role.RECEIVER).values_list("pk", flat=True)
            notify(EventType.DONATION_CREATED, donation, [donor.pk, *receivers])
    except (IntegrityError, OperationalError) as exc:
        # duplicate tracking id, or a lock wait or deadlock on the day sequence
        log.warning("tracking id allocation failed for donor %s (%s); caller may retry", donor.pk, exc)
        return TransitionResult.conflict("Could not allocate a tracking id, please retry")

    log.info("donation %s created by donor %s (expires %s)", donation.tracking_id, donor.pk, expiry.isoformat())
    return TransitionResult.success("Donation created successfully", donation=donation)


# --- claim ------------------------------------------------------------------

def _claim_rejection(donation_id, now) -> TransitionResult:
    d = _load(donation_id)
    if d is None:
        return TransitionResult.not_found()
    if d.assigned_receiver_id:
        return TransitionResult.conflict("This donation has already been claimed by another receiver")
    if d.status not in Donation.CLAIMABLE:
        return TransitionResult.conflict(f"This donation is not available for claiming. Current status: {d.status}")
    if d.is_expired(now):
        return TransitionResult.conflict("This donation has expired and cannot be claimed")
    return TransitionResult.conflict("This donation is no longer available")


def claim_donation(receiver, donation_id, data=None, now=None) -> TransitionResult:
    if receiver.role != Role.RECEIVER:
        return TransitionResult.forbidden("Only receivers can claim donations")
    form = ClaimForm(data or {})
    if not form.is_valid():
        return TransitionResult.invalid("Invalid delivery location", field_errors(form))
    point = form.cleaned_data["receiver_point"]
    now = now or timezone.now()

    changes = {"assigned_receiver": receiver, "status": S.ASSIGNED, "updated_at": now}
    if point is not None:
        changes.update(receiver_latitude=point.lat, receiver_longitude=point.lng)
    if form.cleaned_data.get("receiver_address"):
        changes["receiver_address"] = form.cleaned_data["receiver_address"]

    with transaction.atomic():
        n = Donation.objects.filter(
            pk=donation_id,
            assigned_receiver__isnull=True,
            status__in=Donation.CLAIMABLE,
            expiry_date__gt=now,
        ).update(**changes)
        if not n:
            return _claim_rejection(donation_id, now)
        donation = _load(donation_id)
        audit_log(receiver, "DONATION_CLAIMED", target=donation,
                  payload={"receiver_location": point.as_dict() if point else None})
        drivers = User.objects.active_with_role(Role.DRIVER).values_list("pk", flat=True)
        notify(EventType.DONATION_CLAIMED, donation, [donation.donor_id, *drivers])

    log.info("donation %s claimed by receiver %s", donation.tracking_id, receiver.pk)
    return TransitionResult.success("Donation claimed successfully", donation=donation)


# --- accept order -----------------------------------------------------------

def _accept_rejection(donation_id, driver, now) -> TransitionResult:
    d = _load(donation_id)
    if d is None:
        return TransitionResult.not_found()
    if d.assigned_driver_id == driver.pk:
        return TransitionResult.conflict("You have already accepted this order")
    if d.assigned_driver_id:
        return TransitionResult.conflict(OTHER_DRIVER)
    if d.status != S.ASSIGNED:
        return TransitionResult.conflict(f"This donation cannot be accepted. Current status: {d.status}")
    if not d.assigned_receiver_id:
        return TransitionResult.conflict(NOT_CLAIMED_YET)
    if _has_active_order(driver):
        return TransitionResult.conflict(ONE_ORDER_AT_A_TIME)
    if d.is_expired(now):
        return TransitionResult.conflict("This donation has expired")
    return TransitionResult.conflict("This order is no longer available")


def accept_order(driver, donation_id, now=None) -> TransitionResult:
    if driver.role != Role.DRIVER:
        return TransitionResult.forbidden("Only drivers can accept orders")
    now = now or timezone.now()

    with transaction.atomic():
        _lock_driver(driver)
        n = 0
        if not _has_active_order(driver):
            n = Donation.objects.filter(
                pk=donation_id,
                assigned_driver__isnull=True,
                status=S.ASSIGNED,
                assigned_receiver__isnull=False,
                expiry_date__gt=now,
            ).update(assigned_driver=driver, updated_at=now)
        if not n:
            return _accept_rejection(donation_id, driver, now)
        donation = _load(donation_id)
        audit_log(driver, "DRIVER_ACCEPTED", target=donation)
        notify(EventType.DRIVER_ACCEPTED, donation, [donation.donor_id, donation.assigned_receiver_id])

    log.info("donation %s accepted by driver %s", donation.tracking_id, driver.pk)
    return TransitionResult.success("Order accepted. It now appears in your pickups in transit.", donation=donation)


# --- confirm pickup ---------------------------------------------------------

def _pickup_rejection(donation_id, driver, now) -> TransitionResult:
    d = _load(donation_id)
    if d is None:
        return TransitionResult.not_found()
    if d.assigned_driver_id and d.assigned_driver_id != driver.pk:
        return TransitionResult.conflict(OTHER_DRIVER)
    if d.status != S.ASSIGNED:
        return TransitionResult.conflict(f"This donation cannot be picked up. Current status: {d.status}")
    if not d.assigned_receiver_id:
        return TransitionResult.conflict(NOT_CLAIMED_YET)
    if d.is_expired(now):
        return TransitionResult.conflict("This donation has expired and cannot be picked up")
    if d.assigned_driver_id is None:
        if settings.FOODLOOP_REQUIRE_ACCEPT_ORDER:
            return TransitionResult.conflict("Accept this order before confirming pickup")
        if _has_active_order(driver):
            return TransitionResult.conflict(ONE_ORDER_AT_A_TIME)
    return TransitionResult.conflict("This pickup can no longer be confirmed")


def confirm_pickup(driver, donation_id, now=None) -> TransitionResult:
    """
    Two guard branches:
      * accepted   - the actor already holds the order (normal path);
      * unassigned - no driver yet; attach the actor and pick up in one step.
    The second branch stays for older clients and is switched off by
    FOODLOOP_REQUIRE_ACCEPT_ORDER. It obeys the one-active-order rule as well.
    """
    if driver.role != Role.DRIVER:
        return TransitionResult.forbidden("Only drivers can confirm pickups")
    now = now or timezone.now()
    base = Donation.objects.filter(
        pk=donation_id,
        status=S.ASSIGNED,
        assigned_receiver__isnull=False,
        expiry_date__gt=now,
    )

    with transaction.atomic():
        attached = False
        n = base.filter(assigned_driver=driver).update(status=S.PICKED_UP, actual_pickup_date=now, updated_at=now)
        if not n and not settings.FOODLOOP_REQUIRE_ACCEPT_ORDER:
            _lock_driver(driver)
            if not _has_active_order(driver):
                n = base.filter(assigned_driver__isnull=True).update(
                    assigned_driver=driver, status=S.PICKED_UP, actual_pickup_date=now, updated_at=now)
                attached = bool(n)
        if not n:
            return _pickup_rejection(donation_id, driver, now)
        donation = _load(donation_id)
        audit_log(driver, "PICKUP_CONFIRMED", target=donation, payload={"attached_driver": attached})
        notify(EventType.PICKUP_CONFIRMED, donation, [donation.donor_id, donation.assigned_receiver_id])

    log.info("donation %s picked up by driver %s%s", donation.tracking_id, driver.pk,
             " (attached on pickup)" if attached else "")
    return TransitionResult.success("Pickup confirmed successfully", donation=donation)


# --- confirm delivery -------------------------------------------------------

def _delivery_rejection(donation_id, driver) -> TransitionResult:
    d = _load(donation_id)
    if d is None:
        return TransitionResult.not_found()
    if d.assigned_driver_id != driver.pk:
        return TransitionResult.forbidden("You are not assigned to this donation")
    if d.status != S.PICKED_UP:
        return TransitionResult.conflict(
            f"Cannot confirm delivery. Current status: {d.status}. "
            "Delivery can only be confirmed for donations that have been picked up.")
    if not d.assigned_receiver_id:
        return TransitionResult.conflict("This donation has not been assigned to a receiver")
    return TransitionResult.conflict("This delivery can no longer be confirmed")


def confirm_delivery(driver, donation_id, now=None) -> TransitionResult:
    if driver.role != Role.DRIVER:
        return TransitionResult.forbidden("Only drivers can confirm delivery")
    now = now or timezone.now()

    with transaction.atomic():
        n = Donation.objects.filter(
            pk=donation_id,
            assigned_driver=driver,
            status=S.PICKED_UP,
            assigned_receiver__isnull=False,
        ).update(status=S.DELIVERED, delivered_at=now, updated_at=now)
        if not n:
            return _delivery_rejection(donation_id, driver)
        donation = _load(donation_id)
        audit_log(driver, "DELIVERY_CONFIRMED", target=donation)
        notify(EventType.DELIVERY_CONFIRMED, donation, [donation.donor_id, donation.assigned_receiver_id])

    log.info("donation %s delivered by driver %s", donation.tracking_id, driver.pk)
    return TransitionResult.success("Delivery confirmed successfully", donation=donation)


# --- donor edit / cancel ----------------------------------------------------

def _owned(donor, donation_id):
    return Donation.objects.filter(pk=donation_id, donor=donor).first()


def edit_donation(donor, donation_id, data, services=None, now=None) -> TransitionResult:
    if donor.role != Role.DONOR:
        return TransitionResult.forbidden("Only donors can update donations")
    donation = _owned(donor, donation_id)
    if donation is None:
        return TransitionResult.not_found()
    if not donation.is_editable:
        return TransitionResult.conflict(
            "This donation can no longer be edited (driver already assigned or delivered)")

    form = DonationEditForm(data)
    if not form.is_valid():
        return TransitionResult.invalid("Invalid donation details", field_errors(form))
    supplied = form.supplied()

    changes = {k: v for k, v in supplied.items()
               if k not in ("user_provided_expiry_date", "donor_latitude", "donor_longitude")}
    if "user_provided_expiry_date" in supplied:
        changes["expiry_date"] = supplied["user_provided_expiry_date"]
    if "donor_latitude" in supplied or "donor_longitude" in supplied:
        point = form.donor_point()
        if point is None:
            log.warning("donation %s: edited coordinates outside the service region; geocoding address",
                        donation.pk)
            point = (services or get_geo_services()).geocoder.geocode(donation.donor_address)
        if point is not None:
            changes.update(donor_latitude=point.lat, donor_longitude=point.lng)

    now = now or timezone.now()
    with transaction.atomic():
        n = (Donation.objects.filter(pk=donation.pk, donor=donor)
             .filter(Donation.editable_q())
             .update(updated_at=now, **changes))
        if not n:
            return TransitionResult.conflict(
                "This donation can no longer be edited (driver already assigned or delivered)")
        donation.refresh_from_db()
        audit_log(donor, "DONATION_EDITED", target=donation, payload={"fields": sorted(changes)})

    log.info("donation %s edited by donor %s: %s", donation.tracking_id, donor.pk, sorted(changes))
    return TransitionResult.success("Donation updated successfully", donation=donation)


def cancel_donation(donor, donation_id, now=None) -> TransitionResult:
    if donor.role != Role.DONOR:
        return TransitionResult.forbidden("Only donors can cancel donations")
    if not Donation.objects.filter(pk=donation_id, donor=donor).exists():
        return TransitionResult.not_found()
    now = now or timezone.now()

    with transaction.atomic():
        n = (Donation.objects.filter(pk=donation_id, donor=donor)
             .filter(Donation.editable_q())
             .update(status=S.CANCELLED, updated_at=now))
        if not n:
            return TransitionResult.conflict(
                "This donation can no longer be cancelled (driver already assigned or delivered)")
        donation = _load(donation_id)
        audit_log(donor, "DONATION_CANCELLED", target=donation)

    log.info("donation %s cancelled by donor %s", donation.tracking_id, donor.pk)
    return TransitionResult.success("Donation cancelled successfully", donation=donation)
