import logging
from typing import Iterable, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from .models import EventType, NotificationLog

log = logging.getLogger(__name__)


# provider picker
def _provider():
    prov = (settings.NOTIFICATION_PROVIDER or "mock").lower()
    if prov == "email":
        from .providers.email import EmailProvider
        return EmailProvider()
    elif prov == "webhook":
        from .providers.webhook import WebhookProvider
        return WebhookProvider()
    else:
        from .providers.mock import MockProvider
        return MockProvider()


def _payload(donation, extra: Optional[dict]) -> dict:
    data = {
        "donation_id": donation.pk,
        "tracking_id": donation.tracking_id,
        "item_name": donation.item_name,
        "status": donation.status,
    }
    data.update(extra or {})
    return data


def _emit(event_type: str, donation_id, user_ids: list, payload: dict):
    from .tasks import deliver_notification  # local import breaks the cycle
    User = get_user_model()
    channel = (settings.NOTIFICATION_PROVIDER or "mock").lower()
    for user in User.objects.filter(pk__in=user_ids):
        row = NotificationLog.objects.create(
            event_type=event_type, recipient=user, donation_id=donation_id,
            payload=payload, channel=channel,
        )
        deliver_notification.delay(row.id)


def notify(event_type: str, donation, user_ids: Iterable, extra: Optional[dict] = None) -> None:
    """
    Fire-and-forget. The payload is captured now (the donation may be deleted
    by the time the transaction commits); logging and delivery happen on commit.
    Any failure here is logged and dropped, never raised into the caller.
    """
    if event_type not in EventType.values:
        raise ValueError(f"Unknown event type {event_type!r}")
    ids = sorted({uid for uid in user_ids if uid is not None})
    if not ids:
        return
    payload = _payload(donation, extra)
    donation_id = donation.pk

    def _send():
        try:
            _emit(event_type, donation_id, ids, payload)
        except Exception:
            log.exception("notify %s for donation %s failed", event_type, donation_id)

    transaction.on_commit(_send)
