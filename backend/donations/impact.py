"""
Impact accounting for delivered donations.

    total weight (kg) = quantity x weight per serving
    methane saved (kg) = total weight x FOODLOOP_METHANE_FACTOR, 2 dp, half-up
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import IntegrityError, transaction

from accounts.models import Role
from audit.utils import audit_log
from foodloop.api import field_errors
from geo.distance import straight_line_km
from geo.services import get_geo_services
from .forms import ImpactReceiptForm
from .models import Donation, ImpactReceipt, methane_factor
from .positions import donor_position, receiver_position
from .results import TransitionResult

log = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
THREE_PLACES = Decimal("0.001")


def methane_saved_kg(quantity, weight_per_serving, factor=None) -> Decimal:
    factor = methane_factor() if factor is None else Decimal(str(factor))
    total = Decimal(int(quantity or 0)) * Decimal(str(weight_per_serving))
    return (total * factor).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def delivery_distance_km(donation: Donation, services) -> float:
    """Straight line donor -> delivery location; 0 when either end cannot be placed."""
    km = straight_line_km(donor_position(donation, services), receiver_position(donation, services))
    return round(km, 3) if km is not None else 0.0


def receipt_dict(r: ImpactReceipt) -> dict:
    return {
        "id": r.pk,
        "donation_id": r.donation_id,
        "drop_location": r.drop_location,
        "people_fed": r.people_fed,
        "weight_per_serving": float(r.weight_per_serving),
        "distance_traveled": r.distance_traveled,
        "methane_saved": float(r.effective_methane_saved),
        "created_at": r.created_at,
    }


def _delivered_to(receiver, donation_id):
    """(donation, None) or (None, rejection) for receipt operations."""
    d = (Donation.objects.select_related("donor", "assigned_receiver", "assigned_driver")
         .filter(pk=donation_id).first())
    if d is None:
        return None, TransitionResult.not_found()
    if d.assigned_receiver_id != receiver.pk:
        return None, TransitionResult.forbidden("This donation is not assigned to you")
    if d.status != Donation.Status.DELIVERED:
        return None, TransitionResult.conflict("Receipt can only be created for delivered donations")
    return d, None


def _parties(d) -> dict:
    donor, rcv, drv = d.donor, d.assigned_receiver, d.assigned_driver
    return {
        "donation": {"id": d.pk, "tracking_id": d.tracking_id, "item_name": d.item_name,
                     "quantity": d.quantity, "image_url": d.image_url,
                     "food_category": d.food_category, "storage_recommendation": d.storage_recommendation},
        "donor": {"id": donor.pk, "name": donor.public_name, "email": donor.email,
                  "address": d.donor_address or donor.address,
                  "type": donor.get_donor_type_display() if donor.donor_type else "Individual"},
        "receiver": {"id": rcv.pk, "name": rcv.public_name, "type": rcv.receiver_type,
                     "address": d.receiver_address or rcv.address} if rcv else None,
        "driver": {"id": drv.pk, "name": drv.public_name, "vehicle_number": drv.vehicle_number,
                   "vehicle_type": drv.vehicle_type} if drv else None,
        "delivery_date": d.delivered_at or d.updated_at,
    }


def create_receipt(receiver, donation_id, data, services=None) -> TransitionResult:
    if receiver.role != Role.RECEIVER:
        return TransitionResult.forbidden("Only receivers can create receipts")
    form = ImpactReceiptForm(data)
    if not form.is_valid():
        return TransitionResult.invalid("Invalid receipt details", field_errors(form))
    donation, rejection = _delivered_to(receiver, donation_id)
    if rejection:
        return rejection
    if ImpactReceipt.objects.filter(donation=donation).exists():
        return TransitionResult.conflict("A receipt already exists for this donation")

    cd = form.cleaned_data
    distance = delivery_distance_km(donation, services or get_geo_services())
    methane = methane_saved_kg(donation.quantity, cd["weight_per_serving"])
    try:
        with transaction.atomic():
            receipt = ImpactReceipt.objects.create(
                donation=donation,
                receiver=receiver,
                drop_location=cd["drop_location"],
                people_fed=cd["people_fed"],
                weight_per_serving=cd["weight_per_serving"].quantize(THREE_PLACES, rounding=ROUND_HALF_UP),
                distance_traveled=distance,
                methane_saved=methane,
            )
            audit_log(receiver, "IMPACT_RECEIPT_CREATED", target=donation,
                      payload={"people_fed": receipt.people_fed, "methane_saved": str(methane)})
    except IntegrityError:
        return TransitionResult.conflict("A receipt already exists for this donation")

    log.info("impact receipt for %s: %s kg methane, %s people fed", donation.tracking_id, methane, receipt.people_fed)
    return TransitionResult.success("Impact receipt created successfully", donation=donation,
                                    data=receipt_dict(receipt))


def receipt_details(receiver, donation_id, services=None) -> TransitionResult:
    """What the receipt form shows: parties, pre-computed distance, and any receipt already filed."""
    if receiver.role != Role.RECEIVER:
        return TransitionResult.forbidden("Only receivers can access receipt details")
    d, rejection = _delivered_to(receiver, donation_id)
    if rejection:
        return rejection
    existing = ImpactReceipt.objects.filter(donation=d).first()
    data = {
        **_parties(d),
        "distance_traveled": delivery_distance_km(d, services or get_geo_services()),
        "existing_receipt": receipt_dict(existing) if existing else None,
    }
    return TransitionResult.success(donation=d, data=data)


def donor_receipt_view(donor, donation_id) -> TransitionResult:
    """A donor's read-only view of one delivered donation and the receipt filed for it, if any."""
    if donor.role != Role.DONOR:
        return TransitionResult.forbidden("Only donors can view receipt")
    d = (Donation.objects.select_related("donor", "assigned_receiver", "assigned_driver")
         .filter(pk=donation_id, donor=donor, status=Donation.Status.DELIVERED).first())
    if d is None:
        return TransitionResult.not_found("Donation not found or not delivered")
    receipt = ImpactReceipt.objects.filter(donation=d).first()
    data = {**_parties(d), "receipt": receipt_dict(receipt) if receipt else None}
    return TransitionResult.success(donation=d, data=data)
