"""
Periodic expiry housekeeping.

Both sweeps are safe to run twice: deleting a row that is already gone is a
no-op, and overlapping warning runs can at worst warn a donor twice.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from audit.utils import audit_log
from notifications.models import EventType
from notifications.services import notify
from .models import Donation

log = logging.getLogger(__name__)


def delete_expired_donations(now=None) -> dict:
    """Hard-delete every non-delivered donation whose expiry has passed; tell each donor."""
    now = now or timezone.now()
    expired = (Donation.objects.select_related("donor")
               .filter(expiry_date__lte=now).exclude(status=Donation.Status.DELIVERED))
    deleted = errors = 0
    for d in expired.iterator():
        try:
            with transaction.atomic():
                _, per_model = (Donation.objects.filter(pk=d.pk, expiry_date__lte=now)
                                .exclude(status=Donation.Status.DELIVERED).delete())
                if not per_model.get(Donation._meta.label):
                    continue
                audit_log(None, "DONATION_EXPIRED_DELETED", target=d,
                          payload={"tracking_id": d.tracking_id, "expiry_date": d.expiry_date.isoformat()})
                notify(EventType.DONATION_DELETED, d, [d.donor_id],
                       extra={"expiry_date": d.expiry_date.isoformat()})
            deleted += 1
            log.info("deleted expired donation %s", d.tracking_id)
        except DatabaseError:
            errors += 1
            log.exception("deleting expired donation %s failed", d.pk)

    if deleted or errors:
        log.info("expiry sweep: %d deleted, %d errors", deleted, errors)
    return {"deleted": deleted, "errors": errors}


def send_expiry_warnings(now=None) -> dict:
    """One warning per donor per run for donations expiring inside the warning window."""
    now = now or timezone.now()
    start_h, end_h = settings.FOODLOOP_EXPIRY_WARNING_WINDOW_HOURS
    expiring = (Donation.objects.select_related("donor")
                .filter(expiry_date__gte=now + timedelta(hours=start_h),
                        expiry_date__lte=now + timedelta(hours=end_h))
                .exclude(status=Donation.Status.DELIVERED)
                .order_by("expiry_date"))

    by_donor = {}
    for d in expiring:
        by_donor.setdefault(d.donor_id, []).append(d)

    sent = errors = 0
    for donor_id, donations in by_donor.items():
        first = donations[0]
        try:
            notify(EventType.DONATION_EXPIRING, first, [donor_id], extra={
                "expiry_date": first.expiry_date.isoformat(),
                "expiring_count": len(donations),
                "tracking_ids": [d.tracking_id for d in donations],
            })
            sent += 1
        except Exception:
            errors += 1
            log.exception("expiry warning for donor %s failed", donor_id)

    log.info("expiry warnings: %d sent, %d errors", sent, errors)
    return {"sent": sent, "errors": errors}
